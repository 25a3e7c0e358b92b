# Logs process information to a per-session file (and optionally the console), configured once per process

import logging
import os
from datetime import datetime
from typing import Optional

_logger_configured = False
_log_file_path = None

LOG_FORMAT = '%(asctime)s - %(levelname)-8s - %(name)s.%(funcName)s:%(lineno)d - %(message)s'


def setup_logging(
    base_name: str = "optiback",
    level: Optional[int] = None,
    log_dir: Optional[str] = None,
    console: bool = False
) -> str:
    """
    Set up the global logging configuration. Should be called once at application startup.

    The log directory and level can also be set through the OPTIBACK_LOG_DIR and
    OPTIBACK_LOG_LEVEL environment variables; explicit arguments take precedence.

    Returns the log file path.
    """
    global _logger_configured, _log_file_path

    if _logger_configured:
        return _log_file_path

    log_dir = log_dir or os.environ.get("OPTIBACK_LOG_DIR", "logs")
    if level is None:
        level = logging.getLevelName(os.environ.get("OPTIBACK_LOG_LEVEL", "INFO").upper())
        if not isinstance(level, int):
            level = logging.INFO

    os.makedirs(log_dir, exist_ok=True)

    timestamp = datetime.now().strftime('%Y-%m-%d_%H-%M-%S')
    _log_file_path = os.path.join(log_dir, f"{base_name}_{timestamp}.log")

    handlers = [logging.FileHandler(_log_file_path)]
    if console:
        handlers.append(logging.StreamHandler())

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)

    _logger_configured = True
    return _log_file_path


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance. Automatically sets up logging if not already configured.

    Args:
        name: Logger name. If None, uses the calling module's name.
    """
    if not _logger_configured:
        setup_logging()

    if name is None:
        import inspect
        frame = inspect.currentframe().f_back
        name = frame.f_globals.get('__name__', 'unknown')

    return logging.getLogger(name)
