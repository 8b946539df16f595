"""
Logging Configuration

Sets up console logging and, when a writable directory is configured,
rotating log files:
- errors.log: ERROR and above
- app_detailed.log: everything from DEBUG up

Modules log through logging.getLogger(__name__) with a bracketed prefix
(e.g. "[Pipeline]") so log lines can be grepped by component.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


CONSOLE_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
DETAILED_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

_configured = False


def _prepare_log_dir(log_dir: str) -> Optional[Path]:
    """Return the directory if it can be written to, else None."""
    path = Path(log_dir)
    try:
        path.mkdir(parents=True, exist_ok=True)
        test_file = path / ".write_test"
        test_file.touch()
        test_file.unlink()
        return path
    except (PermissionError, OSError) as e:
        print(f"Warning: Cannot write to logs directory {path}: {e}")
        print("File logging disabled, using console only.")
        return None


def configure_logging(level: str = "INFO", log_dir: Optional[str] = None) -> None:
    """
    Configure the root logger once per process.

    Args:
        level: Minimum level for the console handler
        log_dir: Optional directory for rotating log files
    """
    global _configured
    if _configured:
        return

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(console_handler)

    logs_path = _prepare_log_dir(log_dir) if log_dir else None
    if logs_path:
        file_handler = RotatingFileHandler(
            logs_path / "errors.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=10,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.ERROR)
        file_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))

        detailed_handler = RotatingFileHandler(
            logs_path / "app_detailed.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding='utf-8'
        )
        detailed_handler.setLevel(logging.DEBUG)
        detailed_handler.setFormatter(logging.Formatter(DETAILED_FORMAT, datefmt=DATE_FORMAT))

        root_logger.addHandler(file_handler)
        root_logger.addHandler(detailed_handler)

    # httpx logs every request at INFO; the adapter already does that
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _configured = True
