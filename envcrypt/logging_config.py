"""Logging setup for processes embedding envcrypt."""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"


def configure_logging(
    level: int = logging.INFO,
    log_dir: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """Attach console and, optionally, file handlers to the envcrypt logger.

    With ``log_dir`` set, INFO and above go to ``log_info.log`` and ERROR
    and above to ``log_error.log`` inside that directory.
    """
    logger = logging.getLogger("envcrypt")
    logger.setLevel(level)
    formatter = logging.Formatter(_FORMAT, datefmt=_DATEFMT)

    # Configure once; repeated calls would duplicate output.
    if logger.handlers:
        return logger

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_dir is not None:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        for filename, file_level in (
            ("log_info.log", logging.INFO),
            ("log_error.log", logging.ERROR),
        ):
            handler = logging.FileHandler(directory / filename, encoding="utf-8")
            handler.setLevel(file_level)
            handler.setFormatter(formatter)
            logger.addHandler(handler)
    return logger
