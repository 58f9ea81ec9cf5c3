"""
Handles application configuration for the tlm2api daemon.

This module is responsible for:
- Configuring logging for the application.
- Resolving the path of the telemetry log file the line source tails.
- Providing FastAPI application settings (title, description, root_path).
- Providing line source and frame history settings from environment variables.
"""

import codecs
import logging
import os

import coloredlogs

# ── Logging Configuration ──────────────────────────────────────────────────
module_logger = logging.getLogger(__name__)

# Resolved absolute path of the tailed log file, populated by get_actual_source_path().
ACTUAL_SOURCE_PATH: str | None = None

DEFAULT_SOURCE_PATH = "log.txt"


def configure_logger():
    root_logger = logging.getLogger()
    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()

    log_level_int = getattr(logging, log_level_str, None)
    if not isinstance(log_level_int, int):
        module_logger.warning(f"Invalid LOG_LEVEL '{log_level_str}'. Defaulting to INFO.")
        log_level_int = logging.INFO

    log_format = "%(asctime)s %(name)s[%(process)d] %(levelname)s %(message)s"

    # Root stays at DEBUG; handlers filter on their own level.
    root_logger.setLevel(logging.DEBUG)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    coloredlogs.install(
        level=log_level_int,
        fmt=log_format,
        logger=root_logger,
        reconfigure=True,
    )

    return root_logger


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        module_logger.warning(f"Invalid {name} '{raw}'. Defaulting to {default}.")
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        module_logger.warning(f"Invalid {name} '{raw}'. Defaulting to {default}.")
        return default


def _env_encoding(name: str, default: str) -> str:
    raw = os.getenv(name, default)
    try:
        codecs.lookup(raw)
    except LookupError:
        module_logger.warning(f"Unknown {name} '{raw}'. Defaulting to {default}.")
        return default
    return raw


# ── Line Source Configuration ───────────────────────────────────────────────
def get_actual_source_path():
    """
    Determines and returns the absolute path of the telemetry log file.

    Uses TLM_SOURCE_PATH when set, otherwise ``log.txt`` in the working
    directory. The result is cached in ACTUAL_SOURCE_PATH. A missing file is
    not an error (the line source waits for it) but is logged.

    Returns:
        str: Absolute path of the file the line source tails.
    """
    global ACTUAL_SOURCE_PATH

    if ACTUAL_SOURCE_PATH is not None:
        return ACTUAL_SOURCE_PATH

    source_env = os.getenv("TLM_SOURCE_PATH") or DEFAULT_SOURCE_PATH
    ACTUAL_SOURCE_PATH = os.path.abspath(source_env)

    if not os.path.exists(ACTUAL_SOURCE_PATH):
        module_logger.warning(
            f"Telemetry source '{ACTUAL_SOURCE_PATH}' does not exist yet. "
            f"The line source will wait for it to appear."
        )
    else:
        module_logger.info(f"Telemetry source resolved to: {ACTUAL_SOURCE_PATH}")

    return ACTUAL_SOURCE_PATH


def get_line_source_config():
    """
    Retrieves line source settings from environment variables.

    Returns:
        dict: A dictionary containing:
              - 'path': Absolute path of the tailed file.
              - 'poll_interval': Seconds to sleep when no new data is available.
              - 'from_start': Read the existing content instead of only new lines.
              - 'encoding': Text encoding of the file.
    """
    return {
        "path": get_actual_source_path(),
        "poll_interval": _env_float("TLM_SOURCE_POLL_INTERVAL", 0.1),
        "from_start": os.getenv("TLM_SOURCE_FROM_START", "0") == "1",
        "encoding": _env_encoding("TLM_SOURCE_ENCODING", "utf-8"),
    }


# ── Frame History Configuration ─────────────────────────────────────────────
def get_history_config():
    """
    Retrieves frame history settings from environment variables.

    Returns:
        dict: 'max_length' (frames kept per kind) and 'duration' (seconds).
    """
    return {
        "max_length": _env_int("TLM_HISTORY_LENGTH", 1000),
        "duration": _env_int("TLM_HISTORY_DURATION", 24 * 3600),
    }


# ── FastAPI Configuration ──────────────────────────────────────────────────
def get_fastapi_config():
    """
    Retrieves FastAPI application settings from environment variables.

    Returns:
        dict: A dictionary containing title, server_description, and root_path
              for the FastAPI application.
    """
    return {
        "title": os.getenv("TLM2API_TITLE", "tlm2api"),
        "server_description": os.getenv(
            "TLM2API_SERVER_DESCRIPTION", "Line telemetry to API bridge"
        ),
        "root_path": os.getenv("TLM2API_ROOT_PATH", ""),
    }
