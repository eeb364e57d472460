"""
Protocrypt Web — Utility Helpers
================================

Shared helpers for passphrase strength, file size formatting,
Base64 text fields and output filename generation.
"""

from __future__ import annotations

import base64
import binascii
import math
import re


# ---------------------------------------------------------------------------
# Passphrase strength
# ---------------------------------------------------------------------------

def passphrase_strength(passphrase: str) -> tuple[int, str, str]:
    """
    Evaluate passphrase strength based on character-pool entropy.

    Returns
    -------
    (score, label, color) : tuple[int, str, str]
        score  — 0-100 normalised against 128-bit target entropy
        label  — "Weak" / "Fair" / "Good" / "Strong" / ""
        color  — hex colour string for the UI indicator
    """
    if not passphrase:
        return 0, "", "#6c6c80"

    pool = 0
    if re.search(r"[a-z]", passphrase):
        pool += 26
    if re.search(r"[A-Z]", passphrase):
        pool += 26
    if re.search(r"[0-9]", passphrase):
        pool += 10
    if re.search(r"[^a-zA-Z0-9]", passphrase):
        pool += 32
    pool = max(pool, 1)

    entropy = len(passphrase) * math.log2(pool)
    score = min(int(entropy * 100 / 128), 100)

    if score < 25:
        return score, "Weak", "#e74c3c"
    if score < 50:
        return score, "Fair", "#f39c12"
    if score < 75:
        return score, "Good", "#3498db"
    return score, "Strong", "#2ecc71"


# ---------------------------------------------------------------------------
# Human-readable file size
# ---------------------------------------------------------------------------

def human_file_size(size_bytes: int) -> str:
    """Convert byte count to a human-readable string (e.g. '1.5 MB')."""
    if size_bytes < 0:
        return "0 B"
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if size < 1024.0:
            if unit == "B":
                return f"{size_bytes} {unit}"
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} PB"


# ---------------------------------------------------------------------------
# Base64 text fields
# ---------------------------------------------------------------------------

def b64_to_bytes(text: str) -> bytes:
    """Decode a pasted Base64 block, ignoring surrounding/embedded whitespace."""
    compact = "".join(text.split())
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Input is not valid Base64.") from exc


def bytes_to_b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


# ---------------------------------------------------------------------------
# Output filename helper
# ---------------------------------------------------------------------------

def safe_output_filename(original: str, encrypting: bool, protocol: str = "") -> str:
    """
    Derive an output filename for download.

    * Encrypting  → append ``.enc`` (``.gcm.enc`` for AES256-GCM so the
      matching parameter record is easy to find)
    * Decrypting  → strip ``.gcm.enc`` / ``.enc`` if present, else prepend ``decrypted_``
    """
    if encrypting:
        if protocol == "AES256-GCM":
            return original + ".gcm.enc"
        return original + ".enc"
    for suffix in (".gcm.enc", ".enc"):
        if original.endswith(suffix) and len(original) > len(suffix):
            return original[: -len(suffix)]
    return "decrypted_" + original
