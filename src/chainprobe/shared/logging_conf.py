# src/chainprobe/shared/logging_conf.py
"""
Log Routing - Where chainprobe's Records Go

Modules log through `logging.getLogger(__name__)` and never touch handlers.
`setup_logging` runs once from the CLI and routes records to stdout, to a
size-rotated chainprobe.log, or to both.

Files that USE this module:
- chainprobe.app (setup_logging, called before any command runs)

Files that this module USES:
- None
"""
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, Union
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s :: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILENAME = "chainprobe.log"

NOISY_LOGGERS = ("urllib3", "web3")

PathLike = Union[str, Path]


def _log_path(log_file: Optional[PathLike], log_dir: Optional[PathLike]) -> Optional[Path]:
    """Resolve the log file location; log_dir takes precedence over log_file."""
    if log_dir:
        path = Path(log_dir) / LOG_FILENAME
    elif log_file:
        path = Path(log_file)
    else:
        return None
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def _stdout_enabled(log_stdout: Optional[bool]) -> bool:
    if log_stdout is not None:
        return log_stdout
    return os.environ.get("CHAINPROBE_LOG_STDOUT", "true").lower() == "true"


def setup_logging(
    level=logging.INFO,
    log_file: Optional[PathLike] = None,
    log_dir: Optional[PathLike] = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    log_stdout: Optional[bool] = None,
) -> None:
    """
    Install the root handlers.

    Args:
        level: int level or a name such as "debug"
        log_file: path of the rotating log file
        log_dir: directory that receives chainprobe.log (wins over log_file)
        max_bytes: rotate once the file reaches this size
        backup_count: rotated files to keep
        log_stdout: echo to stdout; None reads $CHAINPROBE_LOG_STDOUT (default true)
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    handlers: List[logging.Handler] = []

    if _stdout_enabled(log_stdout):
        handlers.append(logging.StreamHandler(sys.stdout))

    path = _log_path(log_file, log_dir)
    if path is not None:
        handlers.append(RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"))

    # records must go somewhere
    if not handlers:
        handlers.append(logging.StreamHandler(sys.stdout))

    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=DATE_FORMAT, handlers=handlers, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging to %s at %s", path or "stdout", logging.getLevelName(level)
    )
