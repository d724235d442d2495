"""
Vault Crypto Core — Key derivation, encryption/decryption, and serialization.

Implements the authenticated envelope used for configuration values:
    PBKDF2-HMAC-SHA256(secret, salt) → AES-256-CBC/PKCS7 → HMAC-SHA256 tag

The envelope carries four base64/hex text fields (salt, iv, cipherText, mac)
and is serialized as compact JSON. The tag is checked before the cipher runs,
so a wrong key or a tampered envelope never reaches the decryptor.

Security Note:
    Never log plaintext, ciphertext or secret values.
    A fresh salt and IV are drawn on every encryption; the derived key is
    never reused across two plaintexts.
"""
import base64
import binascii
import hashlib
import hmac
import logging
from typing import Optional, Union

import orjson
from pydantic import BaseModel, Field, ValidationError
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..exceptions import (
    EnvcryptError,
    InvalidParameter,
    EncryptionFailure,
    EmptyCipherText,
    InvalidEnvelopeFormat,
    IntegrityCheckFailed,
    DecryptionFailed,
)
from ..reporter import Reporter, LoggingReporter, report_failure
from .params import ParamGenerator

logger = logging.getLogger("envcrypt.vault")

PBKDF2_ITERATIONS = 100_000
KEY_LENGTH = 32  # AES-256

DECRYPTION_FAILED_MESSAGE = "Decryption failed. Invalid key or ciphertext."


class CryptoEnvelope(BaseModel):
    """One encrypted value: salt, IV, ciphertext and integrity tag."""

    salt: str = Field(min_length=1)
    iv: str = Field(min_length=1)
    cipher_text: str = Field(alias="cipherText", min_length=1)
    mac: str = Field(min_length=1)

    model_config = {"frozen": True, "extra": "ignore", "populate_by_name": True}


# ---------------------------------------------------------------------------
# Key derivation and integrity tag
# ---------------------------------------------------------------------------

def derive_key(
    secret: Union[str, bytes],
    salt: str,
    iterations: int = PBKDF2_ITERATIONS,
) -> bytes:
    """Derive a 32-byte encryption key using PBKDF2-HMAC-SHA256.

    Args:
        secret: Root secret supplied by the caller.
        salt: Base64-encoded salt, decoded to raw bytes before derivation.
        iterations: PBKDF2 iteration count.

    Returns:
        32-byte derived key.

    Raises:
        binascii.Error: If ``salt`` is not valid base64.
    """
    if isinstance(secret, str):
        secret = secret.encode("utf-8")
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=base64.b64decode(salt, validate=True),
        iterations=iterations,
    )
    return kdf.derive(secret)


def generate_mac(salt: str, iv: str, cipher_text: str, key: bytes) -> str:
    """Compute the hex HMAC-SHA256 tag of an envelope.

    The message is the colon-joined base64 text ``salt:iv:cipherText`` and
    the HMAC key is the base64 text of the derived key. Both are kept in
    their text form so existing envelopes keep verifying.
    """
    mac_key = base64.b64encode(key)
    message = f"{salt}:{iv}:{cipher_text}".encode("utf-8")
    return hmac.new(mac_key, message, hashlib.sha256).hexdigest()


def verify_mac(envelope: CryptoEnvelope, key: bytes) -> bool:
    expected = generate_mac(envelope.salt, envelope.iv, envelope.cipher_text, key)
    return hmac.compare_digest(
        expected.encode("utf-8"), envelope.mac.encode("utf-8")
    )


# ---------------------------------------------------------------------------
# AES-256-CBC with PKCS7 padding
# ---------------------------------------------------------------------------

def aes_encrypt(plaintext: str, key: bytes, iv: str) -> str:
    """Encrypt ``plaintext`` and return the base64 ciphertext."""
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
    encryptor = Cipher(
        algorithms.AES(key), modes.CBC(base64.b64decode(iv, validate=True))
    ).encryptor()
    ct = encryptor.update(padded) + encryptor.finalize()
    return base64.b64encode(ct).decode("ascii")


def aes_decrypt(cipher_text: str, key: bytes, iv: str) -> str:
    """Decrypt a base64 ciphertext back to text.

    Raises:
        ValueError: On bad base64, IV length, block alignment, padding or
            UTF-8 data.
    """
    decryptor = Cipher(
        algorithms.AES(key), modes.CBC(base64.b64decode(iv, validate=True))
    ).decryptor()
    padded = (
        decryptor.update(base64.b64decode(cipher_text, validate=True))
        + decryptor.finalize()
    )
    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    raw = unpadder.update(padded) + unpadder.finalize()
    return raw.decode("utf-8")


# ---------------------------------------------------------------------------
# Envelope serialization
# ---------------------------------------------------------------------------

def encode_envelope(envelope: CryptoEnvelope) -> str:
    """Serialize an envelope to compact JSON (salt, iv, cipherText, mac)."""
    return orjson.dumps(envelope.model_dump(by_alias=True)).decode("utf-8")


def decode_envelope(data: Union[str, bytes]) -> CryptoEnvelope:
    """Parse and validate a serialized envelope.

    Unknown fields are ignored; missing, empty or non-string fields are not.

    Raises:
        InvalidEnvelopeFormat: If ``data`` is not a JSON object carrying all
            four envelope fields.
    """
    try:
        parsed = orjson.loads(data)
    except orjson.JSONDecodeError as err:
        raise InvalidEnvelopeFormat(
            f"Invalid encrypted data format. Unable to parse JSON: {err}"
        ) from err
    if not isinstance(parsed, dict):
        raise InvalidEnvelopeFormat(
            "Invalid encrypted data format. Expected a JSON object "
            "with salt, iv, cipherText and mac."
        )
    try:
        return CryptoEnvelope.model_validate(parsed)
    except ValidationError as err:
        fields = sorted({
            ".".join(str(p) for p in e["loc"]) for e in err.errors()
        })
        raise InvalidEnvelopeFormat(
            "Missing required properties in encrypted data: "
            f"{', '.join(fields)}"
        ) from err


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------

class EnvelopeCodec:
    """Encrypts values into envelopes and decrypts them back.

    Every failure is reported with the originating method and re-raised as
    one of the typed envcrypt errors; nothing is retried.
    """

    def __init__(
        self,
        params: Optional[ParamGenerator] = None,
        reporter: Optional[Reporter] = None,
        iterations: int = PBKDF2_ITERATIONS,
    ):
        self.reporter = reporter or LoggingReporter(logger)
        self.params = params or ParamGenerator(self.reporter)
        self.iterations = iterations

    def _check_secret(self, secret_key: Union[str, bytes], method: str) -> None:
        if not secret_key:
            err = InvalidParameter("Secret key is required.")
            report_failure(self.reporter, err, method)
            raise err

    def encrypt(self, plaintext: str, secret_key: Union[str, bytes]) -> CryptoEnvelope:
        """Encrypt ``plaintext`` under a key derived from ``secret_key``.

        Args:
            plaintext: Non-empty text to encrypt.
            secret_key: Root secret used for key derivation.

        Returns:
            A new CryptoEnvelope with fresh salt and IV.

        Raises:
            InvalidParameter: If ``plaintext`` or ``secret_key`` is empty.
            EncryptionFailure: If any encryption step fails.
        """
        if not plaintext:
            err = InvalidParameter("Plaintext is required.")
            report_failure(self.reporter, err, "encrypt")
            raise err
        self._check_secret(secret_key, "encrypt")
        try:
            salt = self.params.generate_salt()
            iv = self.params.generate_iv()
            key = derive_key(secret_key, salt, self.iterations)
            cipher_text = aes_encrypt(plaintext, key, iv)
            mac = generate_mac(salt, iv, cipher_text, key)
            return CryptoEnvelope(salt=salt, iv=iv, cipher_text=cipher_text, mac=mac)
        except Exception as err:
            report_failure(self.reporter, err, "encrypt", "Failed to encrypt text")
            raise EncryptionFailure(f"Failed to encrypt text: {err}") from err

    def encrypt_to_text(self, plaintext: str, secret_key: Union[str, bytes]) -> str:
        """Encrypt and serialize in one step."""
        return encode_envelope(self.encrypt(plaintext, secret_key))

    def decrypt(
        self,
        encrypted: Union[str, bytes, CryptoEnvelope],
        secret_key: Union[str, bytes],
    ) -> str:
        """Verify and decrypt a serialized envelope.

        Args:
            encrypted: Serialized envelope (or an already parsed one).
            secret_key: Root secret the envelope was created with.

        Returns:
            The decrypted plaintext.

        Raises:
            EmptyCipherText: If ``encrypted`` is empty.
            InvalidEnvelopeFormat: If the envelope cannot be parsed.
            IntegrityCheckFailed: If the tag does not match (wrong key or
                tampered envelope). The cipher is never run in this case.
            DecryptionFailed: If the cipher step fails or yields nothing.
        """
        try:
            return self._decrypt(encrypted, secret_key)
        except EnvcryptError as err:
            report_failure(self.reporter, err, "decrypt", "Failed to decrypt text")
            raise

    def _decrypt(
        self,
        encrypted: Union[str, bytes, CryptoEnvelope],
        secret_key: Union[str, bytes],
    ) -> str:
        if not encrypted:
            raise EmptyCipherText("Encrypted data is required.")
        if isinstance(encrypted, CryptoEnvelope):
            envelope = encrypted
        else:
            envelope = decode_envelope(encrypted)
        if not secret_key:
            raise InvalidParameter("Secret key is required.")

        try:
            key = derive_key(secret_key, envelope.salt, self.iterations)
        except (binascii.Error, ValueError) as err:
            # a salt that does not decode cannot be authenticated
            raise IntegrityCheckFailed(
                "MAC verification failed. The data may have been tampered with."
            ) from err

        if not verify_mac(envelope, key):
            raise IntegrityCheckFailed(
                "MAC verification failed. The data may have been tampered with."
            )

        try:
            plaintext = aes_decrypt(envelope.cipher_text, key, envelope.iv)
        except ValueError as err:
            # covers binascii.Error and UnicodeDecodeError as well
            raise DecryptionFailed(DECRYPTION_FAILED_MESSAGE) from err
        if not plaintext:
            raise DecryptionFailed(DECRYPTION_FAILED_MESSAGE)
        return plaintext
