"""Logging handlers that split output per module.

ModuleDispatchHandler writes first-party records to one file per log name
(resolved through MODULE_TO_LOG). ThirdPartyHandler collects everything
else (httpx, anthropic, langgraph, ...) into run-3p.log.

Both handlers do synchronous file I/O from inside the event loop. Writes
are small and flushed per record.
"""

import logging
from pathlib import Path
from typing import TextIO

from core.logging.run_manager import is_first_party, module_to_log_name, should_rotate


def _rotate_log_file(log_dir: Path, log_name: str, stream: TextIO | None) -> TextIO:
    """Move <name>.log to <name>.previous.log and open a fresh <name>.log."""
    current = log_dir / f"{log_name}.log"
    previous = log_dir / f"{log_name}.previous.log"

    if stream:
        stream.close()

    if previous.exists():
        previous.unlink()
    if current.exists():
        current.rename(previous)

    return current.open("a", encoding="utf-8")


class FirstPartyFilter(logging.Filter):
    """Pass only records from this project's modules."""

    def filter(self, record: logging.LogRecord) -> bool:
        return is_first_party(record.name)


class ThirdPartyFilter(logging.Filter):
    """Pass only records from libraries."""

    def filter(self, record: logging.LogRecord) -> bool:
        return not is_first_party(record.name)


class ModuleDispatchHandler(logging.Handler):
    """Single handler that routes records to per-module log files.

    Files are opened lazily and cached, so the number of open handles is
    bounded by the number of log names rather than the number of loggers.
    At most two files exist per log name (current + previous).

    Usage:
        handler = ModuleDispatchHandler(Path("logs"))
        handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
        logging.getLogger().addHandler(handler)
    """

    def __init__(self, log_dir: Path):
        super().__init__()
        self.log_dir = log_dir
        self._file_cache: dict[str, TextIO] = {}

    def emit(self, record: logging.LogRecord) -> None:
        try:
            log_name = module_to_log_name(record.name)

            if should_rotate(log_name):
                self._rotate_file(log_name)

            file = self._get_or_open_file(log_name)
            file.write(self.format(record) + "\n")
            file.flush()

        except Exception:
            self.handleError(record)

    def _rotate_file(self, log_name: str) -> None:
        existing_stream = self._file_cache.pop(log_name, None)
        self._file_cache[log_name] = _rotate_log_file(
            self.log_dir, log_name, existing_stream
        )

    def _get_or_open_file(self, log_name: str) -> TextIO:
        if log_name not in self._file_cache:
            path = self.log_dir / f"{log_name}.log"
            self._file_cache[log_name] = open(path, "a", encoding="utf-8")
        return self._file_cache[log_name]

    def close(self) -> None:
        """Close all cached file handles."""
        self.acquire()
        try:
            for file in self._file_cache.values():
                file.close()
            self._file_cache.clear()
        finally:
            self.release()
        super().close()


class ThirdPartyHandler(logging.FileHandler):
    """Handler for third-party library logs, written to run-3p.log.

    Rotates at run boundaries like ModuleDispatchHandler.
    """

    LOG_NAME = "run-3p"

    def __init__(self, log_dir: Path, **kwargs):
        self.log_dir = log_dir
        log_file = log_dir / f"{self.LOG_NAME}.log"
        super().__init__(log_file, mode="a", encoding="utf-8", **kwargs)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            if should_rotate(self.LOG_NAME):
                self.stream = _rotate_log_file(self.log_dir, self.LOG_NAME, self.stream)

            super().emit(record)

        except Exception:
            self.handleError(record)
