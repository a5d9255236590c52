"""Logging utilities for enhansome commands."""

from __future__ import annotations

import logging
import os
from pathlib import Path

_LOGGER_NAME = "enhansome"

# Workflow command prefixes understood by the GitHub Actions runner.
_ACTIONS_COMMANDS = {
    logging.DEBUG: "::debug::",
    logging.WARNING: "::warning::",
    logging.ERROR: "::error::",
    logging.CRITICAL: "::error::",
}


class ActionsFormatter(logging.Formatter):
    """Render records as workflow commands so the runner shows them as annotations."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        prefix = _ACTIONS_COMMANDS.get(record.levelno, "")
        if not prefix:
            return message
        # Workflow commands are single-line; the runner decodes %0A back to newlines.
        escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
        return f"{prefix}{escaped}"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the enhansome hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def running_in_actions() -> bool:
    return os.getenv("GITHUB_ACTIONS", "").lower() == "true"


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    actions: bool | None = None,
) -> logging.Logger:
    """Configure the enhansome logger with console output and an optional file sink.

    When ``actions`` is left as ``None`` the format is chosen from the
    ``GITHUB_ACTIONS`` environment variable.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers so repeated CLI invocations in one process do not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    use_actions = running_in_actions() if actions is None else actions
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    if use_actions:
        stream_handler.setFormatter(ActionsFormatter("%(message)s"))
    else:
        stream_handler.setFormatter(logging.Formatter("[enhansome] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["ActionsFormatter", "configure_logging", "get_logger", "running_in_actions"]
