"""
Key Manager — Mints root secrets and stores them in the base env document.

This is the only path that writes root secrets. A generated secret is handed
to the store straight away and returned to the caller; it is not kept on the
manager.

Security Note:
    Never log the generated secret. Only log key names and paths.
"""
import logging
from pathlib import Path
from typing import Optional, Union

from ..exceptions import EnvcryptError, InvalidParameter, KeyGenerationFailed
from ..reporter import Reporter, LoggingReporter, report_event, report_failure
from ..store import ConfigStore
from .document import find_key, is_valid_key, parse_document, render_document, upsert
from .params import ParamGenerator

logger = logging.getLogger("envcrypt.vault")


class KeyManager:
    """Generates secret keys and upserts them into a config document.

    Args:
        store: Store holding the base environment document.
        path: Location of the base environment document in ``store``.
        params: Source of random key material.
        reporter: Sink for events and failures.
    """

    def __init__(
        self,
        store: ConfigStore,
        path: Union[str, Path],
        params: Optional[ParamGenerator] = None,
        reporter: Optional[Reporter] = None,
    ):
        self.store = store
        self.path = path
        self.reporter = reporter or LoggingReporter(logger)
        self.params = params or ParamGenerator(self.reporter)

    def _validate_key_name(self, key_name: str) -> None:
        if not key_name or not is_valid_key(key_name):
            raise InvalidParameter(
                f"Invalid key name {key_name!r}: use letters, digits and underscores"
            )

    def generate_and_store(self, key_name: str) -> str:
        """Generate a new secret and store it as ``key_name``.

        An existing ``key_name`` line is overwritten in place; otherwise a
        new line is appended.

        Returns:
            The generated secret (base64 text).

        Raises:
            InvalidParameter: If ``key_name`` is not a valid identifier.
            KeyGenerationFailed: If no key material was produced.
        """
        try:
            self._validate_key_name(key_name)
            secret = self.params.generate_key()
            if not secret:
                raise KeyGenerationFailed("Failed to generate secret key")
            self.store_key(key_name, secret)
            return secret
        except EnvcryptError as err:
            report_failure(
                self.reporter, err, "generate_and_store",
                "Failed to generate and store secret key",
            )
            raise

    def store_key(self, key_name: str, value: str) -> None:
        """Upsert ``key_name=value`` into the store document."""
        self._validate_key_name(key_name)
        self.store.ensure_exists(self.path)
        lines = parse_document(self.store.read(self.path))
        self.store.write(self.path, render_document(upsert(lines, key_name, value)))
        report_event(self.reporter, "info", f"{key_name} written to {self.path}")

    def get_key_value(self, key_name: str) -> Optional[str]:
        """Return the stored value of ``key_name``, or None if not declared."""
        self._validate_key_name(key_name)
        self.store.ensure_exists(self.path)
        line = find_key(parse_document(self.store.read(self.path)), key_name)
        return line.value if line is not None else None
