"""
Protocrypt Web — Text Tab
=========================

Encrypt / decrypt text with any of the three protocols.

Output is Base64-encoded for easy copy/paste sharing.  AES256-GCM
encryptions also store their parameter record in the session and, when a
passphrase is given, offer it wrapped under that passphrase.
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
from utils import b64_to_bytes, bytes_to_b64  # noqa: E402
from widgets import Selection, protocol_inputs, show_error  # noqa: E402


# ---------------------------------------------------------------------------
# Public render function
# ---------------------------------------------------------------------------

def render() -> None:
    """Render the Text encryption / decryption tab."""

    operation = st.radio(
        "Operation",
        ["Encrypt", "Decrypt"],
        horizontal=True,
        key="text_operation",
    )
    selection = protocol_inputs("text", operation)

    st.markdown("---")

    if operation == "Encrypt":
        input_text = st.text_area(
            "Plaintext",
            height=200,
            placeholder="Enter text to encrypt…",
            key="text_input_encrypt",
        )
    else:
        input_text = st.text_area(
            "Ciphertext (Base64)",
            height=200,
            placeholder="Paste Base64-encoded ciphertext…",
            key="text_input_decrypt",
        )

    if input_text:
        st.caption(f"{len(input_text):,} chars  |  {len(input_text.encode('utf-8')):,} bytes")

    btn_label = "🔒 Encrypt" if operation == "Encrypt" else "🔓 Decrypt"
    if not st.button(btn_label, type="primary", key="text_action"):
        return
    if not input_text:
        st.error("Please enter some text first.")
        return

    try:
        if operation == "Encrypt":
            _encrypt(input_text, selection)
        else:
            _decrypt(input_text, selection)
    except (protocrypt.ProtocryptError, ValueError) as exc:
        show_error(exc)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _encrypt(text: str, selection: Selection) -> None:
    engine = build_engine(selection.protocol, selection.passphrase, selection.rsa_id)
    ciphertext, parameters = engine.encrypt(text.encode("utf-8"))

    st.success("Encryption successful!")
    st.text_area(
        "Encrypted Output (Base64)",
        value=bytes_to_b64(ciphertext),
        height=200,
        key="text_output_display",
    )
    st.download_button(
        "📥 Download as .enc file",
        data=ciphertext,
        file_name="encrypted.enc",
        mime="application/octet-stream",
        key="text_download_enc",
    )
    if parameters is not None:
        _show_parameters(engine, parameters, selection)


def _show_parameters(
    engine: protocrypt.EncryptionEngine,
    parameters: protocrypt.GCMParameters,
    selection: Selection,
) -> None:
    entry = save_parameters("Text message", parameters)
    st.info(f"GCM parameters saved to this session as **{entry.name}** ({entry.params_id}).")
    if selection.passphrase:
        wrapped = engine.wrap_parameters(parameters)
        st.text_area(
            "Wrapped GCM Parameters (Base64, AES256-CFB under your passphrase)",
            value=bytes_to_b64(wrapped),
            height=120,
            key="text_wrapped_params",
        )
    else:
        st.warning("No passphrase given — the parameters below are unprotected.")
        st.code(parameters.format())


def _decrypt(text: str, selection: Selection) -> None:
    engine = build_engine(selection.protocol, selection.passphrase, selection.rsa_id)
    plaintext = engine.decrypt(b64_to_bytes(text), selection.parameters)

    st.success("Decryption successful!")
    try:
        st.text_area(
            "Decrypted Output",
            value=plaintext.decode("utf-8"),
            height=200,
            key="text_output_display",
        )
    except UnicodeDecodeError:
        st.warning("Decrypted data is not valid UTF-8 text. Showing as Base64.")
        st.text_area(
            "Decrypted Output (Base64)",
            value=bytes_to_b64(plaintext),
            height=200,
            key="text_output_display",
        )
    st.download_button(
        "📥 Download decrypted data",
        data=plaintext,
        file_name="decrypted.txt",
        mime="application/octet-stream",
        key="text_download_dec",
    )
