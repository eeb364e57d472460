"""
Protocrypt — Web Edition
========================

Streamlit application entry point.

Launch:
    streamlit run WEB/app.py

Environment:
    PROTOCRYPT_LOG_LEVEL        root log level (default WARNING)
    PROTOCRYPT_DEFAULT_RSA_BITS default size offered for new RSA keys (2048)
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

# -- Ensure project root is importable ------------------------------------
_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

# -- Ensure WEB/ directory is importable ----------------------------------
_web_root = str(Path(__file__).resolve().parent)
if _web_root not in sys.path:
    sys.path.insert(0, _web_root)

import streamlit as st  # noqa: E402

logging.basicConfig(
    level=os.environ.get("PROTOCRYPT_LOG_LEVEL", "WARNING").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# ---------------------------------------------------------------------------
# Page config — must be the first Streamlit command
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="Protocrypt",
    page_icon="🔐",
    layout="wide",
    initial_sidebar_state="collapsed",
)

st.title("🔐 Protocrypt")
st.caption("AES256-GCM · AES256-CFB · RSA")

with st.sidebar:
    st.markdown(
        "**AES256-GCM** uses a fresh key and nonce per encryption. Keep the "
        "parameter record from the Keys tab to decrypt.  \n"
        "**AES256-CFB** derives its key from a passphrase. It is not "
        "authenticated, so a wrong passphrase yields garbage.  \n"
        "**RSA** encrypts one small block with PKCS#1 v1.5.  \n\n"
        "Keys and parameters live only in this browser session."
    )

# ---------------------------------------------------------------------------
# Tabs
# ---------------------------------------------------------------------------

from tabs.text_tab import render as render_text  # noqa: E402
from tabs.file_tab import render as render_file  # noqa: E402
from tabs.key_tab import render as render_keys   # noqa: E402

tab_text, tab_file, tab_keys = st.tabs(["📝 Text", "📁 File", "🔑 Keys"])

with tab_text:
    render_text()

with tab_file:
    render_file()

with tab_keys:
    render_keys()
