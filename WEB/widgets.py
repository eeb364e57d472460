"""
Protocrypt Web — Shared Widgets
===============================

Protocol / key-material selectors shared by the Text and File tabs, and
the error reporting both tabs use.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import streamlit as st

import protocrypt

from key_store import get_parameters, list_parameters, list_rsa_secrets
from utils import passphrase_strength

PROTOCOLS = [p.value for p in protocrypt.Protocol]


@dataclass
class Selection:
    protocol: str
    passphrase: str = ""
    rsa_id: Optional[str] = None
    parameters: Optional[protocrypt.GCMParameters] = None


def protocol_inputs(prefix: str, operation: str) -> Selection:
    """Render protocol + key inputs; widget keys are namespaced by *prefix*."""
    protocol = st.radio(
        "Protocol",
        PROTOCOLS,
        horizontal=True,
        key=f"{prefix}_protocol",
    )
    selection = Selection(protocol=protocol)

    if protocol == protocrypt.Protocol.RSA.value:
        secrets = list_rsa_secrets()
        if not secrets:
            st.info("No RSA keys stored yet. Generate or import one in the **Keys** tab.")
        else:
            options = {k.key_id: f"{k.name}  ({k.key_size}-bit)" for k in secrets}
            selection.rsa_id = st.selectbox(
                "Select RSA Key",
                options.keys(),
                format_func=lambda kid: options[kid],
                key=f"{prefix}_rsa_key",
            )
        return selection

    label = "Passphrase" if protocol == protocrypt.Protocol.CFB.value else "Passphrase (optional, wraps parameters)"
    selection.passphrase = st.text_input(
        label,
        type="password",
        placeholder="Enter your passphrase…",
        key=f"{prefix}_passphrase",
    )
    if selection.passphrase:
        score, strength, color = passphrase_strength(selection.passphrase)
        cols = st.columns([4, 1])
        with cols[0]:
            st.progress(score / 100)
        with cols[1]:
            st.markdown(
                f"<span style='color:{color}; font-weight:600;'>{strength}</span>",
                unsafe_allow_html=True,
            )

    if protocol == protocrypt.Protocol.GCM.value and operation == "Decrypt":
        records = list_parameters()
        if not records:
            st.info("No GCM parameters stored yet. Encrypt something or import a record in the **Keys** tab.")
        else:
            options = {r.params_id: f"{r.name}  (nonce {r.nonce[:8]}…)" for r in records}
            params_id = st.selectbox(
                "GCM Parameters",
                options.keys(),
                format_func=lambda pid: options[pid],
                key=f"{prefix}_gcm_params",
            )
            entry = get_parameters(params_id) if params_id else None
            if entry is not None:
                selection.parameters = entry.to_parameters()
    return selection


def show_error(exc: Exception) -> None:
    """Report an engine error the way each exception class deserves."""
    if isinstance(exc, protocrypt.InputTooLargeError):
        st.error(f"Input too large: {exc}")
    elif isinstance(exc, protocrypt.MissingParametersError):
        st.error(f"Missing parameters: {exc}")
    elif isinstance(exc, protocrypt.ConfigurationError):
        st.error(f"Configuration error: {exc}")
    elif isinstance(exc, protocrypt.MalformedInputError):
        st.error(f"Malformed input: {exc}")
    elif isinstance(exc, protocrypt.DecryptionError):
        st.error(f"Decryption failed: {exc}")
    elif isinstance(exc, protocrypt.ProtocryptError):
        st.error(f"Error: {exc}")
    else:
        st.error(f"Unexpected error: {exc}")
