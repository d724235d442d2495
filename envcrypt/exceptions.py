"""
Exceptions for envcrypt.

Every error carries an ``ErrorKind`` tag so callers can branch on the kind
without depending on the concrete class hierarchy.
"""
from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure kinds."""

    INVALID_PARAMETER = "invalid_parameter"
    GENERATION_FAILURE = "generation_failure"
    ENCRYPTION_FAILURE = "encryption_failure"
    EMPTY_CIPHER_TEXT = "empty_cipher_text"
    INVALID_ENVELOPE_FORMAT = "invalid_envelope_format"
    INTEGRITY_CHECK_FAILED = "integrity_check_failed"
    DECRYPTION_FAILED = "decryption_failed"
    EMPTY_DOCUMENT = "empty_document"
    KEY_GENERATION_FAILED = "key_generation_failed"
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    DISK_ERROR = "disk_error"
    CONFIGURATION_ERROR = "configuration_error"


class EnvcryptError(Exception):
    """Base class for all envcrypt errors."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __repr__(self) -> str:
        return f"<{type(self).__name__} kind={self.kind.value} message={self.message!r}>"


class InvalidParameter(EnvcryptError):
    # bad length or argument, caller bug
    kind = ErrorKind.INVALID_PARAMETER


class GenerationFailure(EnvcryptError):
    # entropy source failure
    kind = ErrorKind.GENERATION_FAILURE


class EncryptionFailure(EnvcryptError):
    kind = ErrorKind.ENCRYPTION_FAILURE


class DecryptError(EnvcryptError):
    """Common parent of the decrypt-path failures."""


class EmptyCipherText(DecryptError):
    kind = ErrorKind.EMPTY_CIPHER_TEXT


class InvalidEnvelopeFormat(DecryptError):
    kind = ErrorKind.INVALID_ENVELOPE_FORMAT


class IntegrityCheckFailed(DecryptError):
    # raised on a MAC mismatch, always before the cipher runs
    kind = ErrorKind.INTEGRITY_CHECK_FAILED


class DecryptionFailed(DecryptError):
    # wrong key or corrupted ciphertext, deliberately not told apart
    kind = ErrorKind.DECRYPTION_FAILED


class EmptyDocument(EnvcryptError):
    kind = ErrorKind.EMPTY_DOCUMENT


class KeyGenerationFailed(EnvcryptError):
    kind = ErrorKind.KEY_GENERATION_FAILED


class StoreError(EnvcryptError):
    """Raised when a configuration store cannot be read or written."""


class ConfigNotFound(StoreError):
    kind = ErrorKind.NOT_FOUND


class ConfigPermissionDenied(StoreError):
    kind = ErrorKind.PERMISSION_DENIED


class DiskError(StoreError):
    kind = ErrorKind.DISK_ERROR


class ConfigurationError(EnvcryptError):
    # raised when the environment does not provide what is needed
    kind = ErrorKind.CONFIGURATION_ERROR
