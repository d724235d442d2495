"""envcrypt.

Encrypts the values of dotenv-style configuration documents with
PBKDF2-derived keys and HMAC-authenticated AES-CBC envelopes.
"""
from .version import __version__
from .exceptions import ErrorKind, EnvcryptError
from .reporter import Reporter, LoggingReporter
from .logging_config import configure_logging
from .store import ConfigStore, FileConfigStore
from .vault import (
    ParamGenerator,
    CryptoEnvelope,
    EnvelopeCodec,
    LineTransform,
    KeyManager,
    EnvcryptConfig,
)

__all__ = [
    "__version__",
    "ErrorKind",
    "EnvcryptError",
    "Reporter",
    "LoggingReporter",
    "configure_logging",
    "ConfigStore",
    "FileConfigStore",
    "ParamGenerator",
    "CryptoEnvelope",
    "EnvelopeCodec",
    "LineTransform",
    "KeyManager",
    "EnvcryptConfig",
]
