"""
Protocrypt Encryption/Decryption Engine
=======================================

Protocol-dispatch encryption helper with three interchangeable schemes:

- ``AES256-GCM`` — fresh random key + 24-byte nonce per call, returned to the
  caller as hex-encoded :class:`GCMParameters`
- ``AES256-CFB`` — PBKDF2-HMAC-SHA512 password-derived key, self-describing
  envelope with the salt appended
- ``RSA`` — PKCS#1 v1.5 encryption with a base64, network-serialized
  private key

Uses the ``cryptography`` library exclusively.

Format specification
--------------------
::

    AES256-CFB envelope
      IV        : 16 bytes
      Ciphertext: N bytes (same length as the plaintext)
      Salt      : 32 bytes (PBKDF2 salt, 4096 iterations, SHA-512)

    AES256-GCM
      Ciphertext+tag only.  Key (32 bytes) and nonce (24 bytes) travel
      out of band as hex strings, optionally wrapped as the CFB
      encryption of ``"Nonce:\\t<hex>\\nCipherKey:\\t<hex>"``.

    RSA secret
      base64( 0x08 <key type varint> 0x12 <len varint> <PKCS#1 DER> )
      key type 0 = RSA
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Optional, Tuple, Union

from cryptography.exceptions import InvalidTag, UnsupportedAlgorithm
from cryptography.hazmat.decrepit.ciphers import modes as decrepit_modes
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding as asym_padding
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import (
    RSAPrivateKey,
    RSAPublicKey,
)
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# These must match every other node speaking the same envelope format,
# otherwise previously encrypted data becomes undecryptable.
KEY_SIZE: int = 32        # AES-256
SALT_SIZE: int = 32       # PBKDF2 salt appended to CFB envelopes
NONCE_SIZE: int = 24      # non-default GCM nonce length
IV_SIZE: int = 16         # AES block size
TAG_SIZE: int = 16        # GCM authentication tag
PBKDF2_ITERATIONS: int = 4096

PKCS1V15_OVERHEAD: int = 11
MIN_RSA_KEY_SIZE: int = 2048
KEY_TYPE_RSA: int = 0

_PARAM_NONCE = "Nonce"
_PARAM_CIPHER_KEY = "CipherKey"


class Protocol(str, Enum):
    """Encryption protocol an engine dispatches on."""

    GCM = "AES256-GCM"
    CFB = "AES256-CFB"
    RSA = "RSA"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ProtocryptError(Exception):
    """Base exception for all Protocrypt errors."""


class ConfigurationError(ProtocryptError):
    """No/unknown protocol, or key material of the wrong kind."""


class DecryptionError(ProtocryptError):
    """Plaintext cannot be recovered."""


class MissingParametersError(ConfigurationError, DecryptionError):
    """GCM decryption was requested without a key/nonce record."""


class MalformedInputError(DecryptionError):
    """Input is truncated or not in the expected encoding."""


class InputTooLargeError(ProtocryptError):
    """Plaintext does not fit in a single RSA block."""


class CryptographicFailureError(DecryptionError):
    """Authentication tag or padding check failed."""


# ---------------------------------------------------------------------------
# Key material & parameter records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PasswordSecret:
    """Human passphrase used for PBKDF2 key derivation."""

    value: bytes = field(repr=False)

    def __post_init__(self) -> None:
        _check_secret_bytes(self.value, "Passphrase")


@dataclass(frozen=True)
class RsaPrivateKeySecret:
    """Base64 text of a network-serialized RSA private key."""

    value: bytes = field(repr=False)

    def __post_init__(self) -> None:
        _check_secret_bytes(self.value, "RSA secret")

    def as_text(self) -> str:
        return self.value.decode("ascii")


Secret = Union[PasswordSecret, RsaPrivateKeySecret]


@dataclass(frozen=True)
class GCMParameters:
    """Hex-encoded AES-256-GCM key and nonce needed to decrypt."""

    cipher_key: str = field(repr=False)
    nonce: str

    def format(self) -> str:
        """Render as the tab-separated text block used for wrapping."""
        return f"{_PARAM_NONCE}:\t{self.nonce}\n{_PARAM_CIPHER_KEY}:\t{self.cipher_key}"

    @classmethod
    def parse(cls, text: str) -> "GCMParameters":
        """
        Parse the output of :meth:`format`.

        Raises
        ------
        MalformedInputError
            If a line is not ``Name:<tab>value`` or a field is missing.
        """
        fields = {}
        for line in text.strip().splitlines():
            name, sep, value = line.partition(":")
            if not sep:
                raise MalformedInputError("GCM parameter line is missing a ':' separator.")
            fields[name.strip()] = value.strip()
        try:
            return cls(cipher_key=fields[_PARAM_CIPHER_KEY], nonce=fields[_PARAM_NONCE])
        except KeyError as exc:
            raise MalformedInputError(f"GCM parameters are missing the {exc.args[0]} field.") from exc


class EncryptResult(NamedTuple):
    ciphertext: bytes
    parameters: Optional[GCMParameters] = None


class RsaKeyPair(NamedTuple):
    private_key: RSAPrivateKey
    public_key: RSAPublicKey


# ---------------------------------------------------------------------------
# Input helpers
# ---------------------------------------------------------------------------


def _read_all(source) -> bytes:
    """Drain a readable byte source (or accept a bytes-like object)."""
    if source is None:
        raise MalformedInputError("invalid content provided")
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    read = getattr(source, "read", None)
    if read is None:
        raise MalformedInputError("invalid content provided")
    data = read()
    if not isinstance(data, (bytes, bytearray)):
        raise MalformedInputError("Reader must yield bytes, not text.")
    return bytes(data)


def _unhex(value: str, what: str) -> bytes:
    try:
        return binascii.unhexlify(value)
    except (binascii.Error, TypeError, ValueError) as exc:
        raise MalformedInputError(f"GCM {what} is not valid hex.") from exc


# ---------------------------------------------------------------------------
# RSA secret envelope (protobuf: 1 = key type, 2 = key bytes)
# ---------------------------------------------------------------------------


def _encode_varint(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _decode_varint(data: bytes, offset: int) -> Tuple[int, int]:
    result = 0
    shift = 0
    while offset < len(data) and shift < 64:
        byte = data[offset]
        offset += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result, offset
        shift += 7
    raise MalformedInputError("Truncated varint in RSA secret envelope.")


def _marshal_key_envelope(key_type: int, key_bytes: bytes) -> bytes:
    return (
        b"\x08" + _encode_varint(key_type)
        + b"\x12" + _encode_varint(len(key_bytes)) + key_bytes
    )


def _unmarshal_key_envelope(data: bytes) -> Tuple[int, bytes]:
    """Return ``(key_type, key_bytes)`` from a serialized private key."""
    key_type: Optional[int] = None
    key_bytes: Optional[bytes] = None
    offset = 0
    while offset < len(data):
        tag, offset = _decode_varint(data, offset)
        field_no, wire_type = tag >> 3, tag & 0x07
        if wire_type == 0:
            value, offset = _decode_varint(data, offset)
            if field_no == 1:
                key_type = value
        elif wire_type == 2:
            length, offset = _decode_varint(data, offset)
            chunk = data[offset : offset + length]
            if len(chunk) != length:
                raise MalformedInputError("Truncated key bytes in RSA secret envelope.")
            offset += length
            if field_no == 2:
                key_bytes = chunk
        else:
            raise MalformedInputError(f"Unsupported wire type {wire_type} in RSA secret envelope.")
    if key_type is None or key_bytes is None:
        raise MalformedInputError("RSA secret envelope is missing the key type or key bytes.")
    return key_type, key_bytes


# ---------------------------------------------------------------------------
# RSA key generation & serialization
# ---------------------------------------------------------------------------


def generate_rsa_secret(key_size: int = MIN_RSA_KEY_SIZE) -> RsaPrivateKeySecret:
    """Generate a fresh RSA key and return it as a serialized secret."""
    if key_size < MIN_RSA_KEY_SIZE:
        raise ConfigurationError(f"RSA key size must be at least {MIN_RSA_KEY_SIZE} bits.")
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    return export_rsa_secret(private_key)


def export_rsa_secret(private_key: RSAPrivateKey) -> RsaPrivateKeySecret:
    """Serialize *private_key* as base64(envelope(PKCS#1 DER))."""
    der = private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return RsaPrivateKeySecret(base64.b64encode(_marshal_key_envelope(KEY_TYPE_RSA, der)))


def import_rsa_secret(secret: RsaPrivateKeySecret) -> RsaKeyPair:
    """
    Deserialize an RSA secret into a key pair.

    A bare PKCS#1 / PKCS#8 DER body (no envelope) is accepted as well.

    Raises
    ------
    MalformedInputError
        If the secret is not base64 or its envelope is truncated.
    CryptographicFailureError
        If the key bytes do not parse as an RSA private key.
    """
    try:
        raw = base64.b64decode(secret.value.strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedInputError("RSA secret is not valid base64.") from exc

    if raw[:1] == b"\x30":  # DER SEQUENCE
        der = raw
    else:
        key_type, der = _unmarshal_key_envelope(raw)
        if key_type != KEY_TYPE_RSA:
            raise CryptographicFailureError(f"RSA secret holds key type {key_type}, not RSA.")

    try:
        private_key = serialization.load_der_private_key(der, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise CryptographicFailureError(f"Invalid RSA secret: {exc}") from exc
    if not isinstance(private_key, RSAPrivateKey):
        raise CryptographicFailureError("Secret does not contain an RSA private key.")
    return RsaKeyPair(private_key, private_key.public_key())


def rsa_capacity(public_key: RSAPublicKey) -> int:
    """Largest plaintext (bytes) PKCS#1 v1.5 can encrypt under *public_key*."""
    return (public_key.key_size + 7) // 8 - PKCS1V15_OVERHEAD


# ---------------------------------------------------------------------------
# Password-derived AES-256-CFB
# ---------------------------------------------------------------------------


def derive_key(passphrase: bytes, salt: bytes) -> bytes:
    """PBKDF2-HMAC-SHA512, 4096 iterations, 32-byte output."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA512(),
        length=KEY_SIZE,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )
    return kdf.derive(passphrase)


def encrypt_cfb(plaintext: bytes, passphrase: bytes) -> bytes:
    """
    Encrypt with a password-derived key.

    Output layout: ``iv(16) || ciphertext || salt(32)``
    """
    salt = os.urandom(SALT_SIZE)
    key = derive_key(passphrase, salt)
    iv = os.urandom(IV_SIZE)
    encryptor = Cipher(algorithms.AES(key), decrepit_modes.CFB(iv)).encryptor()
    return iv + encryptor.update(plaintext) + encryptor.finalize() + salt


def decrypt_cfb(data: bytes, passphrase: bytes) -> bytes:
    """
    Decrypt an envelope produced by :func:`encrypt_cfb`.

    CFB carries no authentication tag, so a wrong passphrase returns
    garbage rather than raising.
    """
    if len(data) < IV_SIZE + SALT_SIZE:
        raise MalformedInputError(
            f"CFB envelope too short: {len(data)} bytes, "
            f"need at least {IV_SIZE + SALT_SIZE}."
        )
    salt = data[-SALT_SIZE:]
    body = data[:-SALT_SIZE]
    key = derive_key(passphrase, salt)
    decryptor = Cipher(algorithms.AES(key), decrepit_modes.CFB(body[:IV_SIZE])).decryptor()
    return decryptor.update(body[IV_SIZE:]) + decryptor.finalize()


# ---------------------------------------------------------------------------
# GCM parameter wrapping
# ---------------------------------------------------------------------------


def wrap_parameters(parameters: GCMParameters, passphrase: Union[str, bytes]) -> bytes:
    """Encrypt the formatted key/nonce record under *passphrase* (CFB)."""
    return encrypt_cfb(parameters.format().encode("utf-8"), _passphrase_bytes(passphrase))


def unwrap_parameters(blob: bytes, passphrase: Union[str, bytes]) -> GCMParameters:
    """Reverse :func:`wrap_parameters`."""
    text = decrypt_cfb(blob, _passphrase_bytes(passphrase))
    try:
        return GCMParameters.parse(text.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise MalformedInputError("Wrapped GCM parameters did not decrypt to text; wrong passphrase?") from exc


# ---------------------------------------------------------------------------
# Protocol handlers
# ---------------------------------------------------------------------------


class ProtocolHandler:
    """Common interface every protocol handler implements."""

    protocol: Protocol

    def encrypt(self, plaintext: bytes) -> EncryptResult:
        raise NotImplementedError

    def decrypt(self, data: bytes, parameters: Optional[GCMParameters] = None) -> bytes:
        raise NotImplementedError


class GCMHandler(ProtocolHandler):
    protocol = Protocol.GCM

    def encrypt(self, plaintext: bytes) -> EncryptResult:
        key = os.urandom(KEY_SIZE)
        nonce = os.urandom(NONCE_SIZE)
        ciphertext = AESGCM(key).encrypt(nonce, plaintext, None)
        return EncryptResult(ciphertext, GCMParameters(cipher_key=key.hex(), nonce=nonce.hex()))

    def decrypt(self, data: bytes, parameters: Optional[GCMParameters] = None) -> bytes:
        if parameters is None:
            raise MissingParametersError("no gcm decryption parameters given")
        key = _unhex(parameters.cipher_key, "cipher key")
        nonce = _unhex(parameters.nonce, "nonce")
        if len(key) != KEY_SIZE or len(nonce) != NONCE_SIZE:
            raise MalformedInputError(
                f"GCM parameters must decode to a {KEY_SIZE}-byte key "
                f"and a {NONCE_SIZE}-byte nonce."
            )
        try:
            return AESGCM(key).decrypt(nonce, data, None)
        except InvalidTag as exc:
            raise CryptographicFailureError(
                "Authentication failed: wrong parameters or corrupted data."
            ) from exc


class CFBHandler(ProtocolHandler):
    protocol = Protocol.CFB

    def __init__(self, secret: PasswordSecret):
        self._secret = secret

    def encrypt(self, plaintext: bytes) -> EncryptResult:
        return EncryptResult(encrypt_cfb(plaintext, self._secret.value))

    def decrypt(self, data: bytes, parameters: Optional[GCMParameters] = None) -> bytes:
        return decrypt_cfb(data, self._secret.value)


class RSAHandler(ProtocolHandler):
    """PKCS#1 v1.5; the key pair is re-imported on every call."""

    protocol = Protocol.RSA

    def __init__(self, secret: RsaPrivateKeySecret):
        self._secret = secret

    def encrypt(self, plaintext: bytes) -> EncryptResult:
        pair = import_rsa_secret(self._secret)
        capacity = rsa_capacity(pair.public_key)
        if len(plaintext) > capacity:
            raise InputTooLargeError(
                f"Can't encrypt {len(plaintext)} bytes with a "
                f"{pair.public_key.key_size}-bit RSA key (limit {capacity} bytes)."
            )
        try:
            ciphertext = pair.public_key.encrypt(plaintext, asym_padding.PKCS1v15())
        except ValueError as exc:
            logger.warning("RSA encryption failed: %s", exc)
            raise CryptographicFailureError("RSA encryption failed.") from exc
        return EncryptResult(ciphertext)

    def decrypt(self, data: bytes, parameters: Optional[GCMParameters] = None) -> bytes:
        """
        PKCS#1 v1.5 decryption with implicit rejection.

        A tampered ciphertext of the right length decrypts to unrelated
        bytes instead of raising, so no padding oracle is exposed. Only a
        wrong-length ciphertext raises :class:`CryptographicFailureError`.
        """
        pair = import_rsa_secret(self._secret)
        try:
            return pair.private_key.decrypt(data, asym_padding.PKCS1v15())
        except ValueError as exc:
            logger.warning("RSA decryption failed: %s", exc)
            raise CryptographicFailureError("RSA decryption failed.") from exc


# ---------------------------------------------------------------------------
# EncryptionEngine
# ---------------------------------------------------------------------------


class EncryptionEngine:
    """
    Protocol-dispatch encryption engine.

    Instances are immutable: encrypting never changes the engine, and the
    GCM key/nonce are handed back in the :class:`EncryptResult`.

    Parameters
    ----------
    secret : PasswordSecret | RsaPrivateKeySecret, optional
        ``PasswordSecret`` for CFB (optional for GCM, where it is only used
        to wrap parameters); ``RsaPrivateKeySecret`` for RSA.
    protocol : Protocol | str, optional
        Protocol value (``"AES256-GCM"``) or member name (``"GCM"``).
    gcm_parameters : GCMParameters, optional
        Default parameters for GCM decryption.
    """

    def __init__(
        self,
        secret: Optional[Secret] = None,
        protocol: Union[Protocol, str, None] = None,
        gcm_parameters: Optional[GCMParameters] = None,
    ):
        self._protocol = _coerce_protocol(protocol)
        _check_secret_kind(self._protocol, secret)
        self._secret = secret
        self._gcm_parameters = gcm_parameters

    def __repr__(self) -> str:
        proto = self._protocol.value if self._protocol else None
        return f"EncryptionEngine(protocol={proto!r})"

    @classmethod
    def from_passphrase(
        cls,
        passphrase: Union[str, bytes],
        protocol: Union[Protocol, str],
    ) -> "EncryptionEngine":
        """
        Build an engine from a single passphrase field.

        For RSA the passphrase is the base64 serialized private key; for the
        AES protocols it is a password.
        """
        proto = _coerce_protocol(protocol)
        value = _passphrase_bytes(passphrase)
        secret: Secret
        if proto is Protocol.RSA:
            secret = RsaPrivateKeySecret(value)
        else:
            secret = PasswordSecret(value)
        return cls(secret, proto)

    @property
    def protocol(self) -> Optional[Protocol]:
        return self._protocol

    @property
    def gcm_parameters(self) -> Optional[GCMParameters]:
        return self._gcm_parameters

    def with_gcm(self, parameters: GCMParameters) -> "EncryptionEngine":
        """Return a copy configured for AES256-GCM with decrypt *parameters*."""
        return EncryptionEngine(self._secret, Protocol.GCM, parameters)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _handler(self) -> ProtocolHandler:
        if self._protocol is Protocol.GCM:
            return GCMHandler()
        if self._protocol is Protocol.CFB:
            return CFBHandler(self._secret)
        if self._protocol is Protocol.RSA:
            return RSAHandler(self._secret)
        raise ConfigurationError("no protocol specified")

    def encrypt(self, reader) -> EncryptResult:
        """
        Encrypt everything *reader* yields.

        Returns
        -------
        EncryptResult
            ``(ciphertext, parameters)``; ``parameters`` is set for GCM only.
        """
        handler = self._handler()
        plaintext = _read_all(reader)
        result = handler.encrypt(plaintext)
        logger.debug(
            "%s: encrypted %d bytes -> %d bytes",
            handler.protocol.value, len(plaintext), len(result.ciphertext),
        )
        return result

    def decrypt(self, reader, parameters: Optional[GCMParameters] = None) -> bytes:
        """
        Decrypt everything *reader* yields.

        *parameters* overrides the engine's configured GCM parameters and is
        only meaningful for AES256-GCM.

        Raises
        ------
        DecryptionError
            Any failure to recover the plaintext (see subclasses).
        """
        handler = self._handler()
        if parameters is not None and handler.protocol is not Protocol.GCM:
            raise ConfigurationError(
                f"Decrypt parameters only apply to {Protocol.GCM.value}, "
                f"not {handler.protocol.value}."
            )
        data = _read_all(reader)
        plaintext = handler.decrypt(data, parameters or self._gcm_parameters)
        logger.debug(
            "%s: decrypted %d bytes -> %d bytes",
            handler.protocol.value, len(data), len(plaintext),
        )
        return plaintext

    def wrap_parameters(self, parameters: GCMParameters) -> bytes:
        """Wrap *parameters* under this engine's passphrase."""
        if not isinstance(self._secret, PasswordSecret):
            raise ConfigurationError("Wrapping GCM parameters requires a passphrase.")
        return wrap_parameters(parameters, self._secret.value)

    def unwrap_parameters(self, blob: bytes) -> GCMParameters:
        if not isinstance(self._secret, PasswordSecret):
            raise ConfigurationError("Unwrapping GCM parameters requires a passphrase.")
        return unwrap_parameters(blob, self._secret.value)


# ---------------------------------------------------------------------------
# Validation helpers (module-private)
# ---------------------------------------------------------------------------


def _coerce_protocol(value: Union[Protocol, str, None]) -> Optional[Protocol]:
    if value is None or isinstance(value, Protocol):
        return value
    try:
        return Protocol(value)
    except ValueError:
        pass
    try:
        return Protocol[str(value).upper()]
    except KeyError:
        choices = ", ".join(p.value for p in Protocol)
        raise ConfigurationError(f"Unknown protocol {value!r} (expected one of {choices}).")


def _check_secret_kind(protocol: Optional[Protocol], secret: Optional[Secret]) -> None:
    if protocol is Protocol.CFB and not isinstance(secret, PasswordSecret):
        raise ConfigurationError(f"{protocol.value} requires a PasswordSecret.")
    if protocol is Protocol.RSA and not isinstance(secret, RsaPrivateKeySecret):
        raise ConfigurationError(f"{protocol.value} requires an RsaPrivateKeySecret.")
    if protocol is Protocol.GCM and isinstance(secret, RsaPrivateKeySecret):
        raise ConfigurationError(f"{protocol.value} takes a PasswordSecret or no secret.")


def _check_secret_bytes(value: bytes, what: str) -> None:
    if not isinstance(value, bytes):
        raise ConfigurationError(f"{what} must be bytes.")
    if len(value) == 0:
        raise ConfigurationError(f"{what} must not be empty.")


def _passphrase_bytes(passphrase: Union[str, bytes]) -> bytes:
    if isinstance(passphrase, str):
        return passphrase.encode("utf-8")
    return passphrase


# ---------------------------------------------------------------------------
# Self-test / verification (run with: python protocrypt.py)
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import sys

    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    passed = 0
    failed = 0

    def _test(name: str, fn):
        global passed, failed
        try:
            fn()
            print(f"  [PASS] {name}")
            passed += 1
        except Exception as exc:
            print(f"  [FAIL] {name}: {exc}")
            failed += 1

    print("=" * 60)
    print("Protocrypt Self-Test")
    print("=" * 60)

    def test_cfb():
        engine = EncryptionEngine.from_passphrase("correct horse", Protocol.CFB)
        ct, params = engine.encrypt(b"hello world")
        assert params is None
        assert len(ct) == IV_SIZE + 11 + SALT_SIZE
        assert engine.decrypt(ct) == b"hello world"

    _test("AES256-CFB round-trip", test_cfb)

    def test_gcm():
        engine = EncryptionEngine.from_passphrase("correct horse", Protocol.GCM)
        ct, params = engine.encrypt(b"hello world")
        assert engine.decrypt(ct, params) == b"hello world"
        assert engine.unwrap_parameters(engine.wrap_parameters(params)) == params

    _test("AES256-GCM round-trip + parameter wrapping", test_gcm)

    def test_rsa():
        engine = EncryptionEngine(generate_rsa_secret(), Protocol.RSA)
        ct, _ = engine.encrypt(b"hello world")
        assert engine.decrypt(ct) == b"hello world"

    _test("RSA PKCS#1 v1.5 round-trip", test_rsa)

    print("\n" + "=" * 60)
    print(f"Results: {passed}/{passed + failed} passed, {failed} failed")
    print("=" * 60)
    if failed:
        sys.exit(1)
