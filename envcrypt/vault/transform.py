"""
Line Transform — Applies the envelope codec to configuration documents.

``encrypt_document`` replaces the value of every ``key=value`` line with a
serialized envelope; ``decrypt_document`` and ``decrypt_value`` resolve them
back. Blank lines, comments and bare keys pass through untouched. Lines that
are not ``key=value`` are reported and dropped from the encrypted output
without aborting the document.

Security Note:
    Diagnostics include the text of malformed lines, which by definition
    carry no ``=`` and therefore no value. Values are never reported.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence, Union

from ..exceptions import EnvcryptError, EmptyDocument, InvalidParameter
from ..reporter import Reporter, LoggingReporter, report_event, report_failure
from ..store import ConfigStore
from .crypto import EnvelopeCodec
from .document import LineKind, parse_lines

logger = logging.getLogger("envcrypt.vault")


def invalid_format_message(number: int, line: str) -> str:
    """Diagnostic for a line without variables; ``number`` is 1-based."""
    return (
        f"Line {number} doesn't contain any variables "
        f"or has invalid format: {line}"
    )


@dataclass
class TransformResult:
    """Output of a document encryption."""

    lines: list[str]
    diagnostics: list[str] = field(default_factory=list)
    encrypted: int = 0

    @property
    def has_errors(self) -> bool:
        return bool(self.diagnostics)


class LineTransform:
    """Encrypts and decrypts the values of a key=value document.

    Args:
        secret_key: Root secret used for every value of the document.
        codec: Envelope codec; a default one is built when omitted.
        reporter: Sink for diagnostics and failures.
    """

    def __init__(
        self,
        secret_key: str,
        codec: Optional[EnvelopeCodec] = None,
        reporter: Optional[Reporter] = None,
    ):
        self.reporter = reporter or LoggingReporter(logger)
        if not secret_key:
            err = InvalidParameter("Secret key is required.")
            report_failure(self.reporter, err, "get_secret_key", "Failed to get secret key")
            raise err
        self._secret_key = secret_key
        self.codec = codec or EnvelopeCodec(reporter=self.reporter)

    # ------------------------------------------------------------------
    # Encryption
    # ------------------------------------------------------------------

    def transform(self, lines: Sequence[str]) -> TransformResult:
        """Encrypt every value of ``lines`` and collect diagnostics.

        Raises:
            InvalidParameter: If ``lines`` is not a sequence of strings.
            EmptyDocument: If every line is blank.
            EncryptionFailure: If a value cannot be encrypted.
        """
        try:
            if isinstance(lines, (str, bytes)):
                raise InvalidParameter("Input must be a sequence of strings.")
            lines = list(lines)
            if not all(isinstance(line, str) for line in lines):
                raise InvalidParameter("Input must be a sequence of strings.")
            if all(not line.strip() for line in lines):
                raise EmptyDocument(
                    "File is completely empty or contains only whitespace."
                )

            result = TransformResult(lines=[])
            for record in parse_lines(lines):
                if record.kind is LineKind.MALFORMED:
                    message = invalid_format_message(record.number, record.raw)
                    report_event(self.reporter, "error", message)
                    result.diagnostics.append(message)
                    continue
                if record.kind is LineKind.PAIR:
                    envelope = self.codec.encrypt_to_text(record.value, self._secret_key)
                    result.lines.append(record.with_value(envelope).raw)
                    result.encrypted += 1
                    continue
                result.lines.append(record.raw)
        except EnvcryptError as err:
            report_failure(self.reporter, err, "encrypt_document", "Failed to encrypt lines")
            raise

        if result.has_errors:
            report_event(
                self.reporter, "error",
                "[Method: encrypt_document] Failed to encrypt some lines: "
                + "\n".join(result.diagnostics)
            )
        return result

    def encrypt_document(self, lines: Sequence[str]) -> list[str]:
        """Encrypt a document and return its transformed lines."""
        return self.transform(lines).lines

    # ------------------------------------------------------------------
    # Decryption
    # ------------------------------------------------------------------

    def decrypt_value(self, encrypted: str, secret_key: Optional[str] = None) -> str:
        """Decrypt a single serialized envelope.

        ``secret_key`` defaults to the secret this transform was built with.
        """
        return self.codec.decrypt(encrypted, secret_key or self._secret_key)

    def decrypt_document(self, lines: Sequence[str]) -> list[str]:
        """Resolve every encrypted value of ``lines`` back to plaintext."""
        output: list[str] = []
        for record in parse_lines(lines):
            if record.kind is LineKind.PAIR:
                output.append(record.with_value(self.decrypt_value(record.value)).raw)
            else:
                output.append(record.raw)
        return output

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def encrypt_file(self, store: ConfigStore, path: Union[str, Path]) -> TransformResult:
        """Encrypt the document at ``path`` in place.

        Reads the document, encrypts its values and writes it back. The
        caller must make sure no one else writes ``path`` concurrently.
        """
        try:
            content = store.read(path)
            result = self.transform(content.split("\n"))
            store.write(path, "\n".join(result.lines))
        except EnvcryptError as err:
            report_failure(
                self.reporter, err, "encrypt_file",
                "Failed to encrypt environment parameters",
            )
            raise
        report_event(
            self.reporter, "info",
            f"Encryption complete. Successfully encrypted {result.encrypted} "
            f"variable(s) in the {path} file."
        )
        return result
