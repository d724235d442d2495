"""
Tests for KeyManager.

Tests cover:
- Generating and storing secrets in the base env document
- Upsert semantics (replace in place, append otherwise)
- Failure handling for empty key material and invalid key names
"""
import base64
from unittest import mock

import pytest

from envcrypt.exceptions import ErrorKind, KeyGenerationFailed, InvalidParameter
from envcrypt.vault.keys import KeyManager


@pytest.fixture
def env_path(tmp_path):
    return tmp_path / "envs" / ".env"


@pytest.fixture
def manager(store, env_path, params, reporter):
    return KeyManager(store, env_path, params=params, reporter=reporter)


class TestGenerateAndStore:
    """Minting secrets."""

    def test_creates_file_and_stores_key(self, manager, env_path):
        secret = manager.generate_and_store("SECRET_KEY_DEV")

        assert len(base64.b64decode(secret)) == 32
        assert env_path.read_text(encoding="utf-8") == f"SECRET_KEY_DEV={secret}\n"

    def test_second_call_overwrites(self, manager, env_path):
        manager.generate_and_store("SECRET_KEY_DEV")
        second = manager.generate_and_store("SECRET_KEY_DEV")

        lines = env_path.read_text(encoding="utf-8").splitlines()
        matches = [line for line in lines if line.startswith("SECRET_KEY_DEV=")]
        assert matches == [f"SECRET_KEY_DEV={second}"]

    def test_other_lines_untouched(self, manager, env_path):
        env_path.parent.mkdir(parents=True)
        env_path.write_text("# keys\nSECRET_KEY_UAT=abc=\nSECRET_KEY_DEV=old\nOTHER=1\n", encoding="utf-8")

        secret = manager.generate_and_store("SECRET_KEY_DEV")

        assert env_path.read_text(encoding="utf-8") == (
            f"# keys\nSECRET_KEY_UAT=abc=\nSECRET_KEY_DEV={secret}\nOTHER=1\n"
        )

    def test_appends_new_key(self, manager, env_path):
        first = manager.generate_and_store("SECRET_KEY_DEV")
        second = manager.generate_and_store("SECRET_KEY_UAT")

        assert env_path.read_text(encoding="utf-8") == (
            f"SECRET_KEY_DEV={first}\nSECRET_KEY_UAT={second}\n"
        )

    def test_logs_key_name_not_secret(self, manager, reporter, env_path):
        secret = manager.generate_and_store("SECRET_KEY_DEV")
        info = reporter.messages("info")
        assert f"SECRET_KEY_DEV written to {env_path}" in info
        assert all(secret not in message for _, message in reporter.events)

    def test_get_key_value(self, manager):
        secret = manager.generate_and_store("SECRET_KEY_DEV")
        assert manager.get_key_value("SECRET_KEY_DEV") == secret
        assert manager.get_key_value("SECRET_KEY_PROD") is None


class TestFailures:
    """Generation and validation failures."""

    def test_empty_key_material(self, manager, params, reporter, env_path):
        with mock.patch.object(params, "generate_key", return_value=""):
            with pytest.raises(KeyGenerationFailed) as exc_info:
                manager.generate_and_store("SECRET_KEY_DEV")
        assert exc_info.value.kind is ErrorKind.KEY_GENERATION_FAILED
        assert not env_path.exists()
        assert any("[Method: generate_and_store]" in m for m in reporter.messages("error"))

    @pytest.mark.parametrize("name", ["", "BAD-NAME", "A=B", "X.*"])
    def test_invalid_key_name(self, manager, name):
        with pytest.raises(InvalidParameter):
            manager.generate_and_store(name)
