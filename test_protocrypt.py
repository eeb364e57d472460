import base64
import io
import os

import pytest
from cryptography.hazmat.primitives import serialization

import protocrypt
from protocrypt import (
    IV_SIZE,
    NONCE_SIZE,
    SALT_SIZE,
    ConfigurationError,
    CryptographicFailureError,
    DecryptionError,
    EncryptionEngine,
    GCMParameters,
    InputTooLargeError,
    MalformedInputError,
    MissingParametersError,
    PasswordSecret,
    Protocol,
    RsaPrivateKeySecret,
)


@pytest.fixture(scope="module")
def rsa_secret():
    return protocrypt.generate_rsa_secret(2048)


@pytest.fixture
def rsa_engine(rsa_secret):
    return EncryptionEngine(rsa_secret, Protocol.RSA)


@pytest.fixture
def cfb_engine():
    return EncryptionEngine(PasswordSecret(b"correct horse"), Protocol.CFB)


@pytest.fixture
def gcm_engine():
    return EncryptionEngine(PasswordSecret(b"correct horse"), Protocol.GCM)


# --- Round trips -----------------------------------------------------------


@pytest.mark.parametrize("payload", [b"", b"hello world", os.urandom(1_000_000)])
def test_gcm_roundtrip(gcm_engine, payload):
    ct, params = gcm_engine.encrypt(io.BytesIO(payload))
    assert params is not None
    assert gcm_engine.decrypt(io.BytesIO(ct), params) == payload


@pytest.mark.parametrize("payload", [b"", b"hello world", os.urandom(1_000_000)])
def test_cfb_roundtrip(cfb_engine, payload):
    ct, params = cfb_engine.encrypt(io.BytesIO(payload))
    assert params is None
    assert cfb_engine.decrypt(io.BytesIO(ct)) == payload


@pytest.mark.parametrize("payload", [b"", b"hello world", bytes(range(200))])
def test_rsa_roundtrip(rsa_engine, payload):
    ct, params = rsa_engine.encrypt(payload)
    assert params is None
    assert len(ct) == 256
    assert rsa_engine.decrypt(ct) == payload


def test_hello_world_scenario():
    engine = EncryptionEngine.from_passphrase("correct horse", "AES256-CFB")
    ct, _ = engine.encrypt(io.BytesIO(b"hello world"))
    assert engine.decrypt(io.BytesIO(ct)) == b"hello world"


def test_accepts_bytes_like_sources(cfb_engine):
    ct, _ = cfb_engine.encrypt(bytearray(b"abc"))
    assert cfb_engine.decrypt(memoryview(ct)) == b"abc"


# --- GCM -------------------------------------------------------------------


def test_gcm_parameters_are_hex_of_expected_sizes(gcm_engine):
    _, params = gcm_engine.encrypt(b"data")
    assert len(bytes.fromhex(params.cipher_key)) == 32
    assert len(bytes.fromhex(params.nonce)) == NONCE_SIZE


def test_gcm_ciphertext_is_plaintext_plus_tag(gcm_engine):
    ct, _ = gcm_engine.encrypt(b"x" * 100)
    assert len(ct) == 100 + protocrypt.TAG_SIZE


def test_gcm_fresh_randomness_per_call(gcm_engine):
    ct1, p1 = gcm_engine.encrypt(b"same plaintext")
    ct2, p2 = gcm_engine.encrypt(b"same plaintext")
    assert ct1 != ct2
    assert p1.cipher_key != p2.cipher_key
    assert p1.nonce != p2.nonce


def test_gcm_encrypt_leaves_engine_unchanged(gcm_engine):
    gcm_engine.encrypt(b"data")
    assert gcm_engine.gcm_parameters is None


@pytest.mark.parametrize("bit", [0, 7, 8 * 5 + 3, 8 * 20 + 1])
def test_gcm_tamper_detected(gcm_engine, bit):
    ct, params = gcm_engine.encrypt(b"sixteen byte msg")
    tampered = bytearray(ct)
    tampered[bit // 8] ^= 1 << (bit % 8)
    with pytest.raises(CryptographicFailureError):
        gcm_engine.decrypt(bytes(tampered), params)


def test_gcm_every_bit_flip_detected(gcm_engine):
    ct, params = gcm_engine.encrypt(b"abc")
    for bit in range(len(ct) * 8):
        tampered = bytearray(ct)
        tampered[bit // 8] ^= 1 << (bit % 8)
        with pytest.raises(CryptographicFailureError):
            gcm_engine.decrypt(bytes(tampered), params)


def test_gcm_wrong_parameters(gcm_engine):
    ct, _ = gcm_engine.encrypt(b"secret")
    _, other = gcm_engine.encrypt(b"secret")
    with pytest.raises(CryptographicFailureError):
        gcm_engine.decrypt(ct, other)


def test_gcm_missing_parameters(gcm_engine):
    ct, _ = gcm_engine.encrypt(b"secret")
    with pytest.raises(MissingParametersError) as info:
        gcm_engine.decrypt(ct)
    assert isinstance(info.value, ConfigurationError)
    assert isinstance(info.value, DecryptionError)


def test_with_gcm_installs_parameters():
    engine = EncryptionEngine(PasswordSecret(b"pw"), Protocol.CFB)
    ct, params = EncryptionEngine(protocol=Protocol.GCM).encrypt(b"payload")
    configured = engine.with_gcm(params)
    assert configured.protocol is Protocol.GCM
    assert configured.gcm_parameters == params
    assert configured.decrypt(ct) == b"payload"
    assert engine.protocol is Protocol.CFB


@pytest.mark.parametrize(
    "params",
    [
        GCMParameters(cipher_key="zz" * 32, nonce="00" * NONCE_SIZE),
        GCMParameters(cipher_key="00" * 32, nonce="abc"),
        GCMParameters(cipher_key="00" * 16, nonce="00" * NONCE_SIZE),
        GCMParameters(cipher_key="00" * 32, nonce="00" * 12),
    ],
)
def test_gcm_bad_parameters_are_malformed(gcm_engine, params):
    with pytest.raises(MalformedInputError):
        gcm_engine.decrypt(b"\x00" * 32, params)


def test_gcm_parameters_repr_hides_key():
    params = GCMParameters(cipher_key="ab" * 32, nonce="cd" * NONCE_SIZE)
    assert "ab" * 32 not in repr(params)


# --- Parameter wrapping ----------------------------------------------------


def test_parameters_format_and_parse():
    params = GCMParameters(cipher_key="aa" * 32, nonce="bb" * NONCE_SIZE)
    text = params.format()
    assert text == f"Nonce:\t{'bb' * NONCE_SIZE}\nCipherKey:\t{'aa' * 32}"
    assert GCMParameters.parse(text) == params


@pytest.mark.parametrize("text", ["garbage", "Nonce:\tabcd", "CipherKey:\tabcd"])
def test_parameters_parse_rejects_incomplete(text):
    with pytest.raises(MalformedInputError):
        GCMParameters.parse(text)


def test_wrap_parameters_roundtrip(gcm_engine):
    _, params = gcm_engine.encrypt(b"data")
    blob = gcm_engine.wrap_parameters(params)
    assert gcm_engine.unwrap_parameters(blob) == params
    assert protocrypt.unwrap_parameters(blob, "correct horse") == params


def test_wrapped_parameters_are_a_cfb_envelope(gcm_engine, cfb_engine):
    _, params = gcm_engine.encrypt(b"data")
    blob = protocrypt.wrap_parameters(params, b"correct horse")
    assert len(blob) == IV_SIZE + len(params.format()) + SALT_SIZE
    assert cfb_engine.decrypt(blob).decode("utf-8") == params.format()


def test_wrap_parameters_requires_passphrase():
    engine = EncryptionEngine(protocol=Protocol.GCM)
    _, params = engine.encrypt(b"data")
    with pytest.raises(ConfigurationError):
        engine.wrap_parameters(params)


# --- CFB -------------------------------------------------------------------


@pytest.mark.parametrize("size", [0, 1, 15, 16, 17, 4096])
def test_cfb_envelope_length(cfb_engine, size):
    ct, _ = cfb_engine.encrypt(os.urandom(size))
    assert len(ct) == IV_SIZE + size + SALT_SIZE


def test_cfb_is_randomized(cfb_engine):
    ct1, _ = cfb_engine.encrypt(b"same")
    ct2, _ = cfb_engine.encrypt(b"same")
    assert ct1[:IV_SIZE] != ct2[:IV_SIZE]
    assert ct1[-SALT_SIZE:] != ct2[-SALT_SIZE:]


@pytest.mark.parametrize("length", [0, 1, IV_SIZE, IV_SIZE + SALT_SIZE - 1])
def test_cfb_truncated_input(cfb_engine, length):
    ct, _ = cfb_engine.encrypt(b"hello world")
    with pytest.raises(MalformedInputError):
        cfb_engine.decrypt(ct[:length])


def test_cfb_minimal_envelope_decrypts_to_empty(cfb_engine):
    ct, _ = cfb_engine.encrypt(b"")
    assert len(ct) == IV_SIZE + SALT_SIZE
    assert cfb_engine.decrypt(ct) == b""


def test_cfb_wrong_passphrase_gives_different_plaintext(cfb_engine):
    ct, _ = cfb_engine.encrypt(b"hello world")
    other = EncryptionEngine.from_passphrase("battery staple", Protocol.CFB)
    assert other.decrypt(ct) != b"hello world"


def test_cfb_matches_manual_derivation():
    ct = protocrypt.encrypt_cfb(b"known plaintext", b"pw")
    salt = ct[-SALT_SIZE:]
    key = protocrypt.derive_key(b"pw", salt)
    assert len(key) == 32
    assert protocrypt.derive_key(b"pw", salt) == key
    assert protocrypt.decrypt_cfb(ct, b"pw") == b"known plaintext"


# --- RSA -------------------------------------------------------------------


def test_rsa_capacity_boundary(rsa_engine, rsa_secret):
    pair = protocrypt.import_rsa_secret(rsa_secret)
    capacity = protocrypt.rsa_capacity(pair.public_key)
    assert capacity == 256 - 11

    at_limit = os.urandom(capacity)
    ct, _ = rsa_engine.encrypt(at_limit)
    assert rsa_engine.decrypt(ct) == at_limit

    with pytest.raises(InputTooLargeError):
        rsa_engine.encrypt(os.urandom(capacity + 1))
    with pytest.raises(InputTooLargeError):
        rsa_engine.encrypt(os.urandom(257))


def test_rsa_is_randomized(rsa_engine):
    ct1, _ = rsa_engine.encrypt(b"same")
    ct2, _ = rsa_engine.encrypt(b"same")
    assert ct1 != ct2


def test_rsa_wrong_length_ciphertext(rsa_engine):
    ct, _ = rsa_engine.encrypt(b"hello")
    with pytest.raises(CryptographicFailureError):
        rsa_engine.decrypt(ct[:-1])


def test_rsa_tampered_ciphertext_never_yields_plaintext(rsa_engine):
    ct, _ = rsa_engine.encrypt(b"hello")
    tampered = bytearray(ct)
    tampered[5] ^= 0x01
    try:
        recovered = rsa_engine.decrypt(bytes(tampered))
    except CryptographicFailureError:
        return
    # implicit rejection: same-length garbage decrypts to unrelated bytes
    assert recovered != b"hello"


def test_rsa_secret_envelope_layout(rsa_secret):
    raw = base64.b64decode(rsa_secret.value)
    assert raw[:2] == b"\x08\x00"
    assert raw[2:3] == b"\x12"


def test_rsa_accepts_bare_der(rsa_secret, rsa_engine):
    pair = protocrypt.import_rsa_secret(rsa_secret)
    der = pair.private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    bare = EncryptionEngine(RsaPrivateKeySecret(base64.b64encode(der)), Protocol.RSA)
    ct, _ = rsa_engine.encrypt(b"interop")
    assert bare.decrypt(ct) == b"interop"


def test_rsa_export_import_roundtrip(rsa_secret):
    pair = protocrypt.import_rsa_secret(rsa_secret)
    again = protocrypt.export_rsa_secret(pair.private_key)
    assert again == rsa_secret


@pytest.mark.parametrize(
    "value",
    [
        b"not base64!!",
        base64.b64encode(b"\x08\x00\x12\x05abc"),
        base64.b64encode(b"\x08\x00"),
    ],
)
def test_rsa_badly_encoded_secret(value):
    engine = EncryptionEngine(RsaPrivateKeySecret(value), Protocol.RSA)
    with pytest.raises(MalformedInputError):
        engine.encrypt(b"data")


@pytest.mark.parametrize(
    "value",
    [
        base64.b64encode(b"\x08\x01\x12\x03abc"),
        base64.b64encode(b"\x08\x00\x12\x03abc"),
        base64.b64encode(b"\x30\x03\x02\x01\x00"),
    ],
)
def test_rsa_unparseable_key(value):
    engine = EncryptionEngine(RsaPrivateKeySecret(value), Protocol.RSA)
    with pytest.raises(CryptographicFailureError):
        engine.encrypt(b"data")


def test_rsa_from_passphrase_uses_key_secret(rsa_secret):
    engine = EncryptionEngine.from_passphrase(rsa_secret.as_text(), "RSA")
    ct, _ = engine.encrypt(b"legacy")
    assert engine.decrypt(ct) == b"legacy"


def test_generate_rsa_secret_rejects_small_keys():
    with pytest.raises(ConfigurationError):
        protocrypt.generate_rsa_secret(1024)


# --- Configuration ---------------------------------------------------------


def test_no_protocol():
    engine = EncryptionEngine(PasswordSecret(b"pw"))
    with pytest.raises(ConfigurationError, match="no protocol specified"):
        engine.encrypt(b"data")
    with pytest.raises(ConfigurationError, match="no protocol specified"):
        engine.decrypt(b"data")


def test_unknown_protocol():
    with pytest.raises(ConfigurationError):
        EncryptionEngine(PasswordSecret(b"pw"), "AES128-ECB")


@pytest.mark.parametrize("name", ["GCM", "cfb", "AES256-CFB", Protocol.CFB])
def test_protocol_names_and_values(name):
    assert protocrypt._coerce_protocol(name) in (Protocol.GCM, Protocol.CFB)


def test_secret_kind_mismatch(rsa_secret):
    with pytest.raises(ConfigurationError):
        EncryptionEngine(rsa_secret, Protocol.CFB)
    with pytest.raises(ConfigurationError):
        EncryptionEngine(PasswordSecret(b"pw"), Protocol.RSA)
    with pytest.raises(ConfigurationError):
        EncryptionEngine(rsa_secret, Protocol.GCM)
    with pytest.raises(ConfigurationError):
        EncryptionEngine(None, Protocol.CFB)


def test_empty_passphrase_rejected():
    with pytest.raises(ConfigurationError):
        PasswordSecret(b"")


def test_decrypt_parameters_only_for_gcm(cfb_engine):
    params = GCMParameters(cipher_key="00" * 32, nonce="00" * NONCE_SIZE)
    with pytest.raises(ConfigurationError):
        cfb_engine.decrypt(b"\x00" * 64, params)


@pytest.mark.parametrize("source", [None, object(), io.StringIO("text")])
def test_invalid_sources(cfb_engine, source):
    with pytest.raises(MalformedInputError):
        cfb_engine.encrypt(source)


def test_engine_repr_hides_secret():
    engine = EncryptionEngine.from_passphrase("hunter2", Protocol.CFB)
    assert "hunter2" not in repr(engine)
    assert "hunter2" not in repr(PasswordSecret(b"hunter2"))
