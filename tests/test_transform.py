"""
Tests for LineTransform.

Tests cover:
- Document encryption (pairs, bare keys, blanks, comments, malformed lines)
- Aggregated diagnostics
- Empty-document precondition
- Single-value and document decryption
- File-level encryption through a ConfigStore
"""
import orjson
import pytest

from envcrypt.exceptions import (
    ErrorKind,
    EmptyDocument,
    InvalidParameter,
    IntegrityCheckFailed,
    ConfigNotFound,
)
from envcrypt.store import FileConfigStore
from envcrypt.vault.transform import LineTransform, invalid_format_message


@pytest.fixture
def transform(secret, codec, reporter):
    return LineTransform(secret, codec=codec, reporter=reporter)


class TestEncryptDocument:
    """Encryption of whole documents."""

    def test_reference_document(self, transform, secret):
        lines = ["A=1", "B=", "", "garbage", "C=secret"]
        result = transform.encrypt_document(lines)

        assert len(result) == 4
        assert result[1] == "B="
        assert result[2] == ""
        key_a, _, envelope_a = result[0].partition("=")
        key_c, _, envelope_c = result[3].partition("=")
        assert key_a == "A"
        assert key_c == "C"
        assert set(orjson.loads(envelope_a)) == {"salt", "iv", "cipherText", "mac"}
        assert transform.decrypt_value(envelope_a) == "1"
        assert transform.decrypt_value(envelope_c, secret) == "secret"

    def test_malformed_line_reported(self, transform, reporter):
        result = transform.transform(["A=1", "B=", "", "garbage", "C=secret"])
        expected = invalid_format_message(4, "garbage")
        assert expected == (
            "Line 4 doesn't contain any variables or has invalid format: garbage"
        )
        assert result.diagnostics == [expected]
        assert result.encrypted == 2
        errors = reporter.messages("error")
        assert expected in errors
        assert any(
            m.startswith("[Method: encrypt_document] Failed to encrypt some lines:")
            for m in errors
        )

    def test_no_diagnostics_no_error_event(self, transform, reporter):
        result = transform.transform(["A=1"])
        assert not result.has_errors
        assert reporter.messages("error") == []

    def test_output_length(self, transform):
        lines = ["bad1", "A=1", "bad2", "", "B=2"]
        assert len(transform.encrypt_document(lines)) == len(lines) - 2

    def test_comments_preserved(self, transform):
        lines = ["# credentials", "USER=alice"]
        result = transform.encrypt_document(lines)
        assert result[0] == "# credentials"
        assert result[1].startswith("USER={")

    def test_whitespace_blank_line_preserved_verbatim(self, transform):
        result = transform.encrypt_document(["A=1", "   "])
        assert result[1] == "   "

    def test_value_containing_separator(self, transform):
        result = transform.encrypt_document(["URL=https://x?a=b"])
        _, _, envelope = result[0].partition("=")
        assert transform.decrypt_value(envelope) == "https://x?a=b"

    def test_accepts_any_iterable(self, transform):
        result = transform.encrypt_document(line for line in ["A=1", "B="])
        assert result[1] == "B="


class TestPreconditions:
    """Documents that cannot be transformed at all."""

    @pytest.mark.parametrize("lines", [[], [""], ["", "   ", "\t"]])
    def test_empty_document(self, transform, reporter, lines):
        with pytest.raises(EmptyDocument) as exc_info:
            transform.encrypt_document(lines)
        assert exc_info.value.kind is ErrorKind.EMPTY_DOCUMENT
        assert any("[Method: encrypt_document]" in m for m in reporter.messages("error"))

    def test_non_string_lines(self, transform):
        with pytest.raises(InvalidParameter):
            transform.encrypt_document(["A=1", 2])

    def test_plain_string_rejected(self, transform):
        with pytest.raises(InvalidParameter):
            transform.encrypt_document("A=1")

    def test_secret_required(self, reporter):
        with pytest.raises(InvalidParameter):
            LineTransform("", reporter=reporter)


class TestDecrypt:
    """Resolving encrypted values back to plaintext."""

    def test_decrypt_document(self, transform):
        lines = ["A=1", "B=", "", "# note", "C=secret"]
        encrypted = transform.encrypt_document(lines)
        assert transform.decrypt_document(encrypted) == lines

    def test_decrypt_value_wrong_key(self, transform):
        encrypted = transform.encrypt_document(["A=1"])
        _, _, envelope = encrypted[0].partition("=")
        with pytest.raises(IntegrityCheckFailed):
            transform.decrypt_value(envelope, "not-the-secret")

    def test_decrypt_document_propagates_errors(self, transform, secret, codec, reporter):
        encrypted = transform.encrypt_document(["A=1"])
        other = LineTransform("other-secret", codec=codec, reporter=reporter)
        with pytest.raises(IntegrityCheckFailed):
            other.decrypt_document(encrypted)


class TestEncryptFile:
    """Read, transform and write a document through a store."""

    def test_encrypt_file(self, transform, store, tmp_path, reporter):
        (tmp_path / ".env.dev").write_text("USER=alice\nPASS=\n\nnope\n", encoding="utf-8")

        result = transform.encrypt_file(store, ".env.dev")

        written = (tmp_path / ".env.dev").read_text(encoding="utf-8").split("\n")
        assert written == result.lines
        assert written[0].startswith("USER={")
        assert written[1:] == ["PASS=", "", ""]
        assert transform.decrypt_document(written)[0] == "USER=alice"
        assert (
            "Encryption complete. Successfully encrypted 1 variable(s) "
            "in the .env.dev file."
        ) in reporter.messages("info")

    def test_missing_file(self, transform, store, reporter):
        with pytest.raises(ConfigNotFound):
            transform.encrypt_file(store, "missing.env")
        assert any("[Method: encrypt_file]" in m for m in reporter.messages("error"))


class TestFailingReporter:
    """A reporter that raises never breaks the transform."""

    class Broken:
        def info(self, message):
            raise RuntimeError("sink down")

        warn = info
        error = info

    def test_malformed_lines_with_broken_reporter(self, secret, codec):
        transform = LineTransform(secret, codec=codec, reporter=self.Broken())
        result = transform.transform(["USER=alice", "nope"])
        assert len(result.lines) == 1
        assert result.diagnostics == [invalid_format_message(2, "nope")]

    def test_encrypt_file_with_broken_reporter(self, secret, codec, tmp_path):
        broken = self.Broken()
        store = FileConfigStore(root=tmp_path, reporter=broken)
        (tmp_path / ".env.dev").write_text("USER=alice\n", encoding="utf-8")
        transform = LineTransform(secret, codec=codec, reporter=broken)

        result = transform.encrypt_file(store, ".env.dev")

        assert result.encrypted == 1
