"""
Protocrypt Web — File Tab
=========================

Encrypt / decrypt uploaded files with any of the three protocols.

The engine buffers whole payloads, so the uploaded file is handed over as
an in-memory stream.
"""

from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

# -- project-root import ---------------------------------------------------
_root = str(Path(__file__).resolve().parent.parent.parent)
if _root not in sys.path:
    sys.path.insert(0, _root)

import protocrypt  # noqa: E402

from key_store import build_engine, save_parameters  # noqa: E402
from utils import human_file_size, safe_output_filename  # noqa: E402
from widgets import Selection, protocol_inputs, show_error  # noqa: E402


# ---------------------------------------------------------------------------
# Public render function
# ---------------------------------------------------------------------------

def render() -> None:
    """Render the File encryption / decryption tab."""

    operation = st.radio(
        "Operation",
        ["Encrypt", "Decrypt"],
        horizontal=True,
        key="file_operation",
    )

    uploaded = st.file_uploader(
        "Choose a file" if operation == "Encrypt" else "Choose an encrypted file",
        key="file_uploader",
    )
    if uploaded:
        st.caption(f"**{uploaded.name}**  —  {human_file_size(uploaded.size)}")

    selection = protocol_inputs("file", operation)

    st.markdown("---")
    btn_label = "🔒 Encrypt File" if operation == "Encrypt" else "🔓 Decrypt File"
    if not st.button(btn_label, type="primary", key="file_action"):
        return
    if not uploaded:
        st.error("Please upload a file first.")
        return

    try:
        result_bytes, out_name = _process_file(uploaded, operation, selection)
    except protocrypt.ProtocryptError as exc:
        show_error(exc)
        return

    st.success(
        f"{'Encryption' if operation == 'Encrypt' else 'Decryption'} "
        f"successful!  ({human_file_size(len(result_bytes))})"
    )
    st.download_button(
        f"📥 Download {out_name}",
        data=result_bytes,
        file_name=out_name,
        mime="application/octet-stream",
        key="file_download",
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _process_file(uploaded, operation: str, selection: Selection) -> tuple[bytes, str]:
    """
    Run the uploaded file through the engine.

    Returns (result_bytes, suggested_output_filename).
    """
    encrypting = operation == "Encrypt"
    out_name = safe_output_filename(uploaded.name, encrypting, selection.protocol)
    engine = build_engine(selection.protocol, selection.passphrase, selection.rsa_id)

    uploaded.seek(0)
    if not encrypting:
        return engine.decrypt(uploaded, selection.parameters), out_name

    ciphertext, parameters = engine.encrypt(uploaded)
    if parameters is not None:
        entry = save_parameters(uploaded.name, parameters)
        st.info(f"GCM parameters saved to this session as **{entry.name}** ({entry.params_id}).")
        if selection.passphrase:
            st.download_button(
                "📥 Download wrapped GCM parameters",
                data=engine.wrap_parameters(parameters),
                file_name=uploaded.name + ".params.enc",
                mime="application/octet-stream",
                key="file_download_params",
            )
        else:
            st.warning("No passphrase given — keep the parameters below safe.")
            st.code(parameters.format())
    return ciphertext, out_name
