"""
Vault Configuration — Environment files and secret key lookup.

Environment documents live in one directory:
    {env_dir}/.env          base document, holds SECRET_KEY_{ENV} entries
    {env_dir}/.env.{env}    per-environment document with encrypted values

The active environment is read from the ``ENV`` variable and the directory
from ``ENVCRYPT_ENV_DIR`` (default ``envs``).

Security Note:
    Never log key material. Only log key names and file paths.
"""
import io
import os
import re
import logging
from pathlib import Path
from typing import Mapping, Optional

from dotenv import dotenv_values
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..exceptions import ConfigurationError, EnvcryptError
from ..reporter import Reporter, LoggingReporter, report_event, report_failure
from ..store import ConfigStore
from .transform import LineTransform

logger = logging.getLogger("envcrypt.vault")

_ENV_NAME_PATTERN = re.compile(r"^[a-z0-9_]+$")

NO_ENV_SPECIFIED_WARNING = (
    "No environment specified in the ENV variable. Defaulting to '.env' "
    "for environment configuration. Specify one of the following "
    'environments: "dev", "uat", or "prod". Example: ENV=uat'
)


class EnvcryptConfig(BaseModel):
    """Validated location of the environment documents."""

    env_dir: str = Field(default="envs", min_length=1)
    env: Optional[str] = None
    base_env_file: str = Field(default=".env", min_length=1)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: Optional[str]) -> Optional[str]:
        """Normalize the environment name; empty means none."""
        if v is None or not v.strip():
            return None
        v = v.strip().lower()
        if not _ENV_NAME_PATTERN.match(v):
            raise ValueError(f"Invalid environment name: {v}")
        return v

    @property
    def base_env_path(self) -> Path:
        return Path(self.env_dir) / self.base_env_file

    @property
    def env_file_path(self) -> Optional[Path]:
        if self.env is None:
            return None
        return Path(self.env_dir) / f"{self.base_env_file}.{self.env}"

    @property
    def secret_key_name(self) -> str:
        """Name of the variable holding the secret of the active environment."""
        if self.env is None:
            raise ConfigurationError(
                "No environment specified; cannot name its secret key"
            )
        return f"SECRET_KEY_{self.env.upper()}"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EnvcryptConfig":
        """Create EnvcryptConfig from environment variables.

        Returns:
            Populated EnvcryptConfig instance.
        """
        environ = os.environ if environ is None else environ
        try:
            return cls(
                env_dir=environ.get("ENVCRYPT_ENV_DIR", "envs"),
                env=environ.get("ENV"),
            )
        except ValidationError as err:
            raise ConfigurationError(f"Invalid envcrypt configuration: {err}") from err


def read_env_values(store: ConfigStore, path: Path) -> dict[str, str]:
    """Parse one env document from ``store`` with python-dotenv.

    Quotes, ``export`` prefixes and inline comments follow dotenv rules.
    Values are taken literally (no ${VAR} expansion) and lines without a
    ``=`` are skipped.
    """
    parsed = dotenv_values(stream=io.StringIO(store.read(path)), interpolate=False)
    return {key: value for key, value in parsed.items() if value is not None}


def load_environment(
    config: EnvcryptConfig,
    store: ConfigStore,
    reporter: Optional[Reporter] = None,
) -> dict[str, str]:
    """Load the base document and overlay the active environment's one.

    The base document is created when missing. A missing environment
    document is a warning, not an error.

    Returns:
        Mapping of every declared key to its raw (possibly encrypted) value.
    """
    reporter = reporter or LoggingReporter(logger)
    try:
        store.ensure_exists(config.base_env_path)
        values = read_env_values(store, config.base_env_path)
        report_event(
            reporter, "info",
            f"Environment variables from {config.base_env_path} loaded successfully"
        )

        env_path = config.env_file_path
        if env_path is None:
            report_event(reporter, "warn", NO_ENV_SPECIFIED_WARNING)
        elif not store.exists(env_path):
            report_event(
                reporter, "warn",
                f"Environment-specific file not found: {env_path}. "
                "Please ensure it exists or is not required."
            )
        else:
            values.update(read_env_values(store, env_path))
            report_event(
                reporter, "info", f"Environment variables from {env_path} loaded successfully"
            )
        return values
    except EnvcryptError as err:
        report_failure(reporter, err, "load_environment", "Failed to set up environment variables")
        raise


def get_secret_key(
    config: EnvcryptConfig,
    values: Optional[Mapping[str, str]] = None,
) -> str:
    """Return the secret of the active environment.

    Looks in ``values`` first (as returned by :func:`load_environment`) and
    then in the process environment.

    Raises:
        ConfigurationError: If the secret is not set anywhere.
    """
    name = config.secret_key_name
    secret = (values or {}).get(name) or os.environ.get(name)
    if not secret:
        raise ConfigurationError(f"{name} not found in {config.base_env_path}")
    return secret


def resolve_value(
    config: EnvcryptConfig,
    store: ConfigStore,
    key_name: str,
    reporter: Optional[Reporter] = None,
) -> Optional[str]:
    """Decrypt one value of the active environment's document.

    Returns:
        The plaintext, the raw value for bare keys, or None if ``key_name``
        is not declared.
    """
    reporter = reporter or LoggingReporter(logger)
    values = load_environment(config, store, reporter)
    env_path = config.env_file_path
    if env_path is None or not store.exists(env_path):
        raise ConfigurationError(
            f"No environment document to resolve {key_name} from"
        )
    value = read_env_values(store, env_path).get(key_name)
    if not value:
        return value
    transform = LineTransform(get_secret_key(config, values), reporter=reporter)
    return transform.decrypt_value(value)
