"""
Protocrypt Web — Keys Tab
=========================

Manage the key material the other tabs use:
  • Generate / import RSA secrets (base64 serialized private keys)
  • View, export and delete RSA secrets
  • Import AES256-GCM parameter records (hex or wrapped under a passphrase)
  • View, export and delete parameter records
"""

from __future__ import annotations

import os
import sys
from datetime import datetime
from pathlib import Path

import streamlit as st

# -- project-root import ---------------------------------------------------
_root = str(Path(__file__).resolve().parent.parent.parent)
if _root not in sys.path:
    sys.path.insert(0, _root)

import protocrypt  # noqa: E402

from key_store import (  # noqa: E402
    delete_parameters,
    delete_rsa_secret,
    generate_rsa_secret,
    import_rsa_secret,
    list_parameters,
    list_rsa_secrets,
    save_parameters,
)
from utils import b64_to_bytes  # noqa: E402

_RSA_SIZES = [2048, 3072, 4096]


# ---------------------------------------------------------------------------
# Public render function
# ---------------------------------------------------------------------------

def render() -> None:
    """Render the Keys management tab."""

    rsa_col, params_col = st.columns(2)

    # =====================================================================
    # LEFT COLUMN — RSA secrets
    # =====================================================================
    with rsa_col:
        st.subheader("🔐 RSA Keys")

        with st.expander("Generate New RSA Key", expanded=False):
            rsa_name = st.text_input("Key Name", placeholder="e.g. My RSA Key", key="rsa_gen_name")
            rsa_size = st.selectbox(
                "Key Size",
                _RSA_SIZES,
                index=_default_size_index(),
                key="rsa_gen_size",
            )
            if st.button("Generate RSA Key", key="rsa_gen_btn"):
                if not rsa_name.strip():
                    st.error("Please enter a name for the key.")
                else:
                    with st.spinner(f"Generating {rsa_size}-bit RSA key… This may take a moment."):
                        entry = generate_rsa_secret(rsa_name, key_size=rsa_size)
                    st.success(f"RSA key **{entry.name}** ({entry.key_size}-bit) generated!")
                    st.rerun()

        with st.expander("Import RSA Secret", expanded=False):
            imp_name = st.text_input("Key Name", placeholder="e.g. Node Key", key="rsa_imp_name")
            imp_text = st.text_area(
                "Serialized Private Key (Base64)",
                height=120,
                placeholder="CAASpwkwggSjAgEAAoIBAQ…",
                key="rsa_imp_secret",
            )
            if st.button("Import RSA Key", key="rsa_imp_btn"):
                if not imp_text.strip():
                    st.error("Please paste the serialized private key.")
                else:
                    try:
                        entry = import_rsa_secret(imp_name or "Imported RSA Key", imp_text)
                        st.success(f"RSA key **{entry.name}** imported!")
                        st.rerun()
                    except (protocrypt.ProtocryptError, ValueError) as e:
                        st.error(f"Import failed: {e}")

        st.markdown("---")
        secrets = list_rsa_secrets()
        if not secrets:
            st.info("No RSA keys yet. Generate or import one above.")
        else:
            st.caption(f"{len(secrets)} key(s) stored in this session")
            for entry in secrets:
                _render_rsa_card(entry)

    # =====================================================================
    # RIGHT COLUMN — AES256-GCM parameter records
    # =====================================================================
    with params_col:
        st.subheader("🧾 GCM Parameters")

        with st.expander("Import Hex Parameters", expanded=False):
            hex_name = st.text_input("Record Name", placeholder="e.g. report.pdf", key="gcm_hex_name")
            hex_key = st.text_input("Cipher Key (hex)", key="gcm_hex_key")
            hex_nonce = st.text_input("Nonce (hex)", key="gcm_hex_nonce")
            if st.button("Import", key="gcm_hex_btn"):
                if not hex_key.strip() or not hex_nonce.strip():
                    st.error("Both the cipher key and the nonce are required.")
                else:
                    params = protocrypt.GCMParameters(cipher_key=hex_key.strip(), nonce=hex_nonce.strip())
                    entry = save_parameters(hex_name or "Imported parameters", params)
                    st.success(f"Parameters **{entry.name}** imported!")
                    st.rerun()

        with st.expander("Unwrap Parameters", expanded=False):
            wrap_name = st.text_input("Record Name", placeholder="e.g. report.pdf", key="gcm_wrap_name")
            wrapped_file = st.file_uploader("Wrapped parameters file", key="gcm_wrap_file")
            wrapped_text = st.text_area("…or Base64 text", height=100, key="gcm_wrap_text")
            wrap_pass = st.text_input("Passphrase", type="password", key="gcm_wrap_pass")
            if st.button("Unwrap", key="gcm_wrap_btn"):
                try:
                    blob = wrapped_file.getvalue() if wrapped_file else b64_to_bytes(wrapped_text)
                    if not wrap_pass:
                        raise protocrypt.ConfigurationError("Passphrase must be a non-empty string.")
                    params = protocrypt.unwrap_parameters(blob, wrap_pass)
                    entry = save_parameters(wrap_name or "Unwrapped parameters", params)
                    st.success(f"Parameters **{entry.name}** unwrapped!")
                    st.rerun()
                except (protocrypt.ProtocryptError, ValueError) as e:
                    st.error(f"Unwrap failed: {e}")

        st.markdown("---")
        records = list_parameters()
        if not records:
            st.info("No GCM parameters yet. Encrypt with AES256-GCM or import a record above.")
        else:
            st.caption(f"{len(records)} record(s) stored in this session")
            for entry in records:
                _render_params_card(entry)


# ---------------------------------------------------------------------------
# Card renderers
# ---------------------------------------------------------------------------

def _render_rsa_card(entry) -> None:
    with st.container(border=True):
        st.markdown(f"**{entry.name}**")
        st.caption(f"{entry.key_size}-bit RSA  •  {_format_time(entry.created)}")

        action_cols = st.columns(2)
        with action_cols[0]:
            st.download_button(
                "📥 Export secret",
                data=entry.secret_b64 + "\n",
                file_name=f"{entry.name.replace(' ', '_')}.key",
                mime="text/plain",
                key=f"rsa_export_{entry.key_id}",
            )
        with action_cols[1]:
            if st.button("🗑️ Delete", key=f"rsa_del_{entry.key_id}"):
                delete_rsa_secret(entry.key_id)
                st.rerun()


def _render_params_card(entry) -> None:
    with st.container(border=True):
        st.markdown(f"**{entry.name}**")
        st.caption(f"AES256-GCM  •  {_format_time(entry.created)}")
        params = entry.to_parameters()

        with st.expander("Show parameters", expanded=False):
            st.code(params.format(), language=None)

        action_cols = st.columns(2)
        with action_cols[0]:
            st.download_button(
                "📥 Export .params",
                data=params.format() + "\n",
                file_name=f"{entry.name.replace(' ', '_')}.params",
                mime="text/plain",
                key=f"gcm_export_{entry.params_id}",
            )
        with action_cols[1]:
            if st.button("🗑️ Delete", key=f"gcm_del_{entry.params_id}"):
                delete_parameters(entry.params_id)
                st.rerun()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _default_size_index() -> int:
    """Index of ``PROTOCRYPT_DEFAULT_RSA_BITS`` in the size list (2048 if unset/unknown)."""
    try:
        bits = int(os.environ.get("PROTOCRYPT_DEFAULT_RSA_BITS", "2048"))
    except ValueError:
        bits = 2048
    return _RSA_SIZES.index(bits) if bits in _RSA_SIZES else 0


def _format_time(iso_str: str) -> str:
    """Format an ISO timestamp for display."""
    try:
        dt = datetime.fromisoformat(iso_str)
        return dt.strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return iso_str
