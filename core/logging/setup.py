"""Install the module-dispatch logging handlers on the root logger."""

import logging
import os
from pathlib import Path

from core.logging.handlers import (
    FirstPartyFilter,
    ModuleDispatchHandler,
    ThirdPartyFilter,
    ThirdPartyHandler,
)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_installed: list[logging.Handler] = []


def get_log_dir() -> Path:
    """Log directory from DOCSUM_LOG_DIR (default: logs/)."""
    return Path(os.getenv("DOCSUM_LOG_DIR", "logs"))


def configure_logging(
    level: int = logging.INFO,
    log_dir: Path | None = None,
    console: bool = False,
) -> Path:
    """Route first-party logs to per-module files and library logs to run-3p.log.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Root log level
        log_dir: Directory for log files (default: get_log_dir())
        console: Also echo first-party records to stderr

    Returns:
        The log directory in use
    """
    log_dir = log_dir or get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    for handler in _installed:
        root.removeHandler(handler)
        handler.close()
    _installed.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    module_handler = ModuleDispatchHandler(log_dir)
    module_handler.setFormatter(formatter)
    module_handler.addFilter(FirstPartyFilter())
    _installed.append(module_handler)

    third_party_handler = ThirdPartyHandler(log_dir, delay=True)
    third_party_handler.setFormatter(formatter)
    third_party_handler.addFilter(ThirdPartyFilter())
    # Libraries are noisy at INFO (every HTTP request is logged)
    third_party_handler.setLevel(logging.WARNING)
    _installed.append(third_party_handler)

    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        stream_handler.addFilter(FirstPartyFilter())
        _installed.append(stream_handler)

    for handler in _installed:
        root.addHandler(handler)
    root.setLevel(level)

    return log_dir
