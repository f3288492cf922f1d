"""Module-based logging with run-based rotation.

Usage:
    # At run entry points (CLI, service calls, tests):
    from core.logging import configure_logging, start_run, end_run

    configure_logging()
    start_run("summary-123")
    try:
        # ... do work ...
    finally:
        end_run()

    # In modules:
    import logging
    logger = logging.getLogger(__name__)
    logger.info("This goes to the appropriate module log file")

Log files are created in logs/ (or DOCSUM_LOG_DIR):
    - logs/summarization.log, logs/scheduler.log, etc. (per-module)
    - logs/run-3p.log (all third-party libraries)
    - logs/*.previous.log (previous run's logs)
"""

from core.logging.handlers import ModuleDispatchHandler, ThirdPartyHandler
from core.logging.run_manager import (
    MODULE_TO_LOG,
    end_run,
    get_current_run_id,
    module_to_log_name,
    start_run,
)
from core.logging.setup import configure_logging, get_log_dir

__all__ = [
    "configure_logging",
    "get_log_dir",
    "start_run",
    "end_run",
    "get_current_run_id",
    "module_to_log_name",
    "ModuleDispatchHandler",
    "ThirdPartyHandler",
    "MODULE_TO_LOG",
]
