import sys
from pathlib import Path

import pytest

_web_root = str(Path(__file__).resolve().parent / "WEB")
if _web_root not in sys.path:
    sys.path.insert(0, _web_root)

import protocrypt  # noqa: E402
from key_store import build_engine, parse_rsa_secret_text  # noqa: E402
from utils import (  # noqa: E402
    b64_to_bytes,
    bytes_to_b64,
    human_file_size,
    passphrase_strength,
    safe_output_filename,
)


def test_passphrase_strength_empty():
    assert passphrase_strength("") == (0, "", "#6c6c80")


def test_passphrase_strength_grows_with_pool():
    weak, _, _ = passphrase_strength("abc")
    strong, label, _ = passphrase_strength("Correct-Horse-Battery-Staple-42!")
    assert weak < strong
    assert label == "Strong"


@pytest.mark.parametrize(
    "size, expected",
    [(-1, "0 B"), (0, "0 B"), (1023, "1023 B"), (1536, "1.5 KB"), (5 * 1024 ** 2, "5.0 MB")],
)
def test_human_file_size(size, expected):
    assert human_file_size(size) == expected


def test_b64_helpers_ignore_whitespace():
    encoded = bytes_to_b64(b"\x00\xffhello")
    wrapped = encoded[:4] + "\n  " + encoded[4:] + "\n"
    assert b64_to_bytes(wrapped) == b"\x00\xffhello"


def test_b64_to_bytes_rejects_garbage():
    with pytest.raises(ValueError):
        b64_to_bytes("not*base64")


@pytest.mark.parametrize(
    "name, encrypting, protocol, expected",
    [
        ("a.txt", True, "AES256-CFB", "a.txt.enc"),
        ("a.txt", True, "AES256-GCM", "a.txt.gcm.enc"),
        ("a.txt.gcm.enc", False, "AES256-GCM", "a.txt"),
        ("a.txt.enc", False, "AES256-CFB", "a.txt"),
        ("a.bin", False, "RSA", "decrypted_a.bin"),
        (".enc", False, "RSA", "decrypted_.enc"),
    ],
)
def test_safe_output_filename(name, encrypting, protocol, expected):
    assert safe_output_filename(name, encrypting, protocol) == expected


def test_build_engine_cfb_requires_passphrase():
    with pytest.raises(protocrypt.ConfigurationError):
        build_engine("AES256-CFB", "")


def test_build_engine_cfb_roundtrip():
    engine = build_engine("AES256-CFB", "pw")
    ct, _ = engine.encrypt(b"web")
    assert engine.decrypt(ct) == b"web"


def test_build_engine_gcm_without_passphrase():
    engine = build_engine("AES256-GCM")
    ct, params = engine.encrypt(b"web")
    assert engine.decrypt(ct, params) == b"web"


def test_build_engine_rsa_requires_selection():
    with pytest.raises(protocrypt.ConfigurationError):
        build_engine("RSA")


@pytest.mark.parametrize("text", ["", "  \n", "CAASpwkwéggSj"])
def test_parse_rsa_secret_text_rejects_non_base64(text):
    with pytest.raises(protocrypt.MalformedInputError):
        parse_rsa_secret_text(text)


def test_parse_rsa_secret_text_strips_line_breaks():
    secret = protocrypt.generate_rsa_secret()
    text = secret.as_text()
    wrapped = "\n".join(text[i : i + 64] for i in range(0, len(text), 64))
    assert parse_rsa_secret_text(wrapped) == secret
