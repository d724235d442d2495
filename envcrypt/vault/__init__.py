"""Vault — PBKDF2/AES envelope encryption for configuration values.

Security Note (Threat Model):
    Decrypted values and the root secret live in process memory while in
    use and are not zeroed afterwards. Scrubbing them is left to the caller.
"""

from .params import ParamGenerator
from .crypto import (
    CryptoEnvelope,
    EnvelopeCodec,
    derive_key,
    generate_mac,
    encode_envelope,
    decode_envelope,
)
from .document import ConfigLine, LineKind, parse_document, render_document
from .transform import LineTransform, TransformResult
from .keys import KeyManager
from .config import (
    EnvcryptConfig,
    load_environment,
    read_env_values,
    get_secret_key,
    resolve_value,
)

__all__ = [
    "ParamGenerator",
    "CryptoEnvelope",
    "EnvelopeCodec",
    "derive_key",
    "generate_mac",
    "encode_envelope",
    "decode_envelope",
    "ConfigLine",
    "LineKind",
    "parse_document",
    "render_document",
    "LineTransform",
    "TransformResult",
    "KeyManager",
    "EnvcryptConfig",
    "load_environment",
    "read_env_values",
    "get_secret_key",
    "resolve_value",
]
