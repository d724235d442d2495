"""
ConfigStore — Text blob persistence for configuration documents.

The core only needs ``read(path)``, ``write(path, text)`` and
``ensure_exists(path)``; ``FileConfigStore`` provides them over the local
filesystem. Read-modify-write sequences are not locked: callers that share a
document must serialize their writes.
"""
import logging
from pathlib import Path
from typing import Optional, Protocol, Union

from .exceptions import (
    ConfigNotFound,
    ConfigPermissionDenied,
    DiskError,
)
from .reporter import Reporter, LoggingReporter, report_event

logger = logging.getLogger("envcrypt.store")

PathLike = Union[str, Path]


class ConfigStore(Protocol):
    """Persistence contract for configuration documents."""

    def read(self, path: PathLike) -> str:
        ...

    def write(self, path: PathLike, text: str) -> None:
        ...

    def exists(self, path: PathLike) -> bool:
        ...

    def ensure_exists(self, path: PathLike) -> None:
        ...


class FileConfigStore:
    """UTF-8 text files addressed by path.

    Relative paths are resolved against ``root`` when one is given.
    """

    def __init__(
        self,
        root: Optional[PathLike] = None,
        reporter: Optional[Reporter] = None,
    ):
        self.root = Path(root) if root is not None else None
        self.reporter = reporter or LoggingReporter(logger)

    def _resolve(self, path: PathLike) -> Path:
        p = Path(path)
        if self.root is not None and not p.is_absolute():
            return self.root / p
        return p

    def read(self, path: PathLike) -> str:
        target = self._resolve(path)
        try:
            return target.read_text(encoding="utf-8")
        except FileNotFoundError as err:
            raise ConfigNotFound(
                f"Configuration file not found: {target}"
            ) from err
        except PermissionError as err:
            raise ConfigPermissionDenied(
                f"Permission denied reading {target}"
            ) from err
        except OSError as err:
            raise DiskError(f"Failed to read {target}: {err}") from err

    def write(self, path: PathLike, text: str) -> None:
        target = self._resolve(path)
        try:
            target.write_text(text, encoding="utf-8")
        except PermissionError as err:
            raise ConfigPermissionDenied(
                f"Permission denied writing {target}"
            ) from err
        except OSError as err:
            raise DiskError(f"Failed to write {target}: {err}") from err

    def exists(self, path: PathLike) -> bool:
        return self._resolve(path).is_file()

    def ensure_exists(self, path: PathLike) -> None:
        """Create the parent directory and an empty file when missing."""
        target = self._resolve(path)
        try:
            if not target.parent.exists():
                target.parent.mkdir(parents=True, exist_ok=True)
                report_event(self.reporter, "info", f"Directory created at {target.parent}")
            if not target.exists():
                target.write_text("", encoding="utf-8")
                report_event(self.reporter, "info", f"{target.name} file created at {target}")
        except PermissionError as err:
            raise ConfigPermissionDenied(
                f"Permission denied creating {target}"
            ) from err
        except OSError as err:
            raise DiskError(f"Failed to create {target}: {err}") from err
