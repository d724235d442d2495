"""
Crypto Params — Secure random salt, IV and key material.

All values are returned base64-encoded so they can be stored in text
documents and fed back to the envelope codec unchanged.
"""
import base64
import logging
import secrets
from typing import Optional

from ..exceptions import InvalidParameter, GenerationFailure
from ..reporter import Reporter, LoggingReporter, report_failure

logger = logging.getLogger("envcrypt.vault")

IV_LENGTH = 16  # AES block size
SALT_LENGTH = 32
KEY_LENGTH = 32  # 256-bit root secret


class ParamGenerator:
    """Generates cryptographically secure random parameters."""

    def __init__(self, reporter: Optional[Reporter] = None):
        self.reporter = reporter or LoggingReporter(logger)

    def _random_b64(self, length: int, method: str, label: str) -> str:
        if isinstance(length, bool) or not isinstance(length, int) or length <= 0:
            err = InvalidParameter(f"{label} length must be greater than zero.")
            report_failure(self.reporter, err, method)
            raise err
        try:
            raw = secrets.token_bytes(length)
        except (OSError, NotImplementedError) as exc:
            report_failure(
                self.reporter, exc, method,
                f"Failed to generate {label.lower()} of length {length}",
            )
            raise GenerationFailure(
                f"Failed to generate {label.lower()} of length {length}"
            ) from exc
        return base64.b64encode(raw).decode("ascii")

    def generate_iv(self, length: int = IV_LENGTH) -> str:
        """Return ``length`` random bytes for use as an IV, base64-encoded."""
        return self._random_b64(length, "generate_iv", "IV")

    def generate_salt(self, length: int = SALT_LENGTH) -> str:
        """Return ``length`` random bytes for use as a PBKDF2 salt, base64-encoded."""
        return self._random_b64(length, "generate_salt", "Salt")

    def generate_key(self, length: int = KEY_LENGTH) -> str:
        """Return a new random root secret, base64-encoded."""
        return self._random_b64(length, "generate_key", "Key")
