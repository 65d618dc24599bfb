from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

DEFAULT_LOG_PATH = str(Path.home() / ".speedflow" / "install.log")

_CONSOLE_FORMAT = "%(levelname)s %(message)s"


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Configure logging.

    Every command and decision goes to the log file. The console handler is
    what the user sees in plain (silent) mode; interactive mode renders its
    own output and only attaches the console handler for --debug.

    Notes:
    - If the requested file cannot be opened we fall back to the system temp
      directory.

    Returns the actual file path being used.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_speedflow_configured", False):
        return getattr(logger, "_speedflow_log_path", log_path)

    chosen_path = log_path
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler: Optional[logging.Handler] = None
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
    except OSError:
        fallback = str(Path(tempfile.gettempdir()) / f"speedflow-install-{os.getpid()}.log")
        file_handler = logging.FileHandler(fallback)
        chosen_path = fallback
    file_handler.setFormatter(fmt)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_speedflow_configured", True)
    setattr(logger, "_speedflow_log_path", chosen_path)
    setattr(logger, "_speedflow_handlers", handlers)

    logging.getLogger(__name__).debug(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path


def reset_logging() -> None:
    """Detach handlers added by configure_logging()."""

    logger = logging.getLogger()
    for h in getattr(logger, "_speedflow_handlers", []):
        logger.removeHandler(h)
        h.close()
    for attr in ("_speedflow_configured", "_speedflow_log_path", "_speedflow_handlers"):
        if hasattr(logger, attr):
            delattr(logger, attr)
