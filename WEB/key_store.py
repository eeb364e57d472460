"""
Protocrypt Web — Session-State Key Store
========================================

Keep RSA secrets and AES256-GCM parameter records entirely in
``st.session_state`` — nothing is persisted to disk or sent to the server
beyond the active session.  Also builds the :class:`EncryptionEngine` a tab
needs from the user's selections.
"""

from __future__ import annotations

import logging
import sys
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import streamlit as st

# -- make project root importable so a checkout runs without installing -----
_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import protocrypt  # noqa: E402

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------

@dataclass
class RSASecretEntry:
    """An RSA private key, held as its base64 serialized secret."""
    key_id: str
    name: str
    secret_b64: str
    key_size: int
    created: str
    description: str = ""


@dataclass
class ParamsEntry:
    """Hex key/nonce needed to decrypt one AES256-GCM ciphertext."""
    params_id: str
    name: str
    cipher_key: str
    nonce: str
    created: str

    def to_parameters(self) -> protocrypt.GCMParameters:
        return protocrypt.GCMParameters(cipher_key=self.cipher_key, nonce=self.nonce)


# ---------------------------------------------------------------------------
# Session-state initialisation
# ---------------------------------------------------------------------------

_RSA_KEY = "protocrypt_rsa_secrets"
_PARAMS_KEY = "protocrypt_gcm_params"


def _init_state() -> None:
    """Ensure session-state dicts exist."""
    if _RSA_KEY not in st.session_state:
        st.session_state[_RSA_KEY] = {}
    if _PARAMS_KEY not in st.session_state:
        st.session_state[_PARAMS_KEY] = {}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# RSA secret operations
# ---------------------------------------------------------------------------

def generate_rsa_secret(name: str, key_size: int = 2048, description: str = "") -> RSASecretEntry:
    """Generate an RSA key and store its serialized secret in the session."""
    _init_state()
    secret = protocrypt.generate_rsa_secret(key_size)
    entry = RSASecretEntry(
        key_id=uuid.uuid4().hex[:12],
        name=name.strip() or "Untitled RSA Key",
        secret_b64=secret.as_text(),
        key_size=key_size,
        created=_now(),
        description=description,
    )
    st.session_state[_RSA_KEY][entry.key_id] = entry
    logger.info("Generated %d-bit RSA secret %s", key_size, entry.key_id)
    return entry


def parse_rsa_secret_text(secret_text: str) -> protocrypt.RsaPrivateKeySecret:
    """Turn pasted base64 text (line breaks allowed) into an RSA secret."""
    compact = "".join(secret_text.split())
    if not compact:
        raise protocrypt.MalformedInputError("RSA secret text is empty.")
    try:
        return protocrypt.RsaPrivateKeySecret(compact.encode("ascii"))
    except UnicodeEncodeError as exc:
        raise protocrypt.MalformedInputError("RSA secret must be base64 text.") from exc


def import_rsa_secret(name: str, secret_text: str, description: str = "") -> RSASecretEntry:
    """
    Import a base64 serialized private key.

    The secret is parsed once up front so a bad paste fails here rather
    than at encrypt time.
    """
    _init_state()
    secret = parse_rsa_secret_text(secret_text)
    pair = protocrypt.import_rsa_secret(secret)
    entry = RSASecretEntry(
        key_id=uuid.uuid4().hex[:12],
        name=name.strip() or "Imported RSA Key",
        secret_b64=secret.as_text(),
        key_size=pair.public_key.key_size,
        created=_now(),
        description=description,
    )
    st.session_state[_RSA_KEY][entry.key_id] = entry
    return entry


def list_rsa_secrets() -> list[RSASecretEntry]:
    """Return all RSA secrets in the session (newest first)."""
    _init_state()
    keys = list(st.session_state[_RSA_KEY].values())
    keys.sort(key=lambda k: k.created, reverse=True)
    return keys


def get_rsa_secret(key_id: str) -> Optional[RSASecretEntry]:
    _init_state()
    return st.session_state[_RSA_KEY].get(key_id)


def delete_rsa_secret(key_id: str) -> bool:
    _init_state()
    return st.session_state[_RSA_KEY].pop(key_id, None) is not None


# ---------------------------------------------------------------------------
# GCM parameter records
# ---------------------------------------------------------------------------

def save_parameters(name: str, parameters: protocrypt.GCMParameters) -> ParamsEntry:
    """Store the key/nonce returned by an AES256-GCM encryption."""
    _init_state()
    entry = ParamsEntry(
        params_id=uuid.uuid4().hex[:12],
        name=name.strip() or "GCM parameters",
        cipher_key=parameters.cipher_key,
        nonce=parameters.nonce,
        created=_now(),
    )
    st.session_state[_PARAMS_KEY][entry.params_id] = entry
    return entry


def list_parameters() -> list[ParamsEntry]:
    """Return all parameter records in the session (newest first)."""
    _init_state()
    entries = list(st.session_state[_PARAMS_KEY].values())
    entries.sort(key=lambda e: e.created, reverse=True)
    return entries


def get_parameters(params_id: str) -> Optional[ParamsEntry]:
    _init_state()
    return st.session_state[_PARAMS_KEY].get(params_id)


def delete_parameters(params_id: str) -> bool:
    _init_state()
    return st.session_state[_PARAMS_KEY].pop(params_id, None) is not None


# ---------------------------------------------------------------------------
# Engine construction
# ---------------------------------------------------------------------------

def build_engine(
    protocol: str,
    passphrase: str = "",
    rsa_id: str | None = None,
) -> protocrypt.EncryptionEngine:
    """
    Build an engine for the tab's current selections.

    Raises
    ------
    protocrypt.ConfigurationError
        If the selection lacks the key material *protocol* needs.
    """
    if protocol == protocrypt.Protocol.RSA.value:
        if not rsa_id:
            raise protocrypt.ConfigurationError("No RSA key selected.")
        entry = get_rsa_secret(rsa_id)
        if entry is None:
            raise protocrypt.ConfigurationError(f"RSA key '{rsa_id}' not found in session.")
        secret = protocrypt.RsaPrivateKeySecret(entry.secret_b64.encode("ascii"))
        return protocrypt.EncryptionEngine(secret, protocol)

    if protocol == protocrypt.Protocol.CFB.value and not passphrase:
        raise protocrypt.ConfigurationError("Passphrase must be a non-empty string.")
    secret = protocrypt.PasswordSecret(passphrase.encode("utf-8")) if passphrase else None
    return protocrypt.EncryptionEngine(secret, protocol)
