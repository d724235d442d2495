"""Shared fixtures for the envcrypt test suite."""
import pytest

from envcrypt.store import FileConfigStore
from envcrypt.vault.params import ParamGenerator
from envcrypt.vault.crypto import EnvelopeCodec


class RecordingReporter:
    """Reporter that keeps every event for inspection."""

    def __init__(self):
        self.events = []

    def info(self, message):
        self.events.append(("info", message))

    def warn(self, message):
        self.events.append(("warn", message))

    def error(self, message):
        self.events.append(("error", message))

    def messages(self, level):
        return [msg for lvl, msg in self.events if lvl == level]


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def params(reporter):
    return ParamGenerator(reporter)


@pytest.fixture
def codec(params, reporter):
    return EnvelopeCodec(params=params, reporter=reporter)


@pytest.fixture
def secret():
    return "c2VjcmV0LWtleS1mb3ItdGVzdGluZy1wdXJwb3Nlcw=="


@pytest.fixture
def store(tmp_path, reporter):
    return FileConfigStore(root=tmp_path, reporter=reporter)
