from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

DEFAULT_LOG_PATH = "/var/log/exporter-installer.log"


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Configure logging.

    Every command and decision is recorded to /var/log/exporter-installer.log.

    Notes:
    - When /var/log is not writable (e.g. during a --dry-run as a normal
      user) we fall back to a file in the current working directory.
    - The console handler prints bare messages; the file keeps timestamps.

    Returns the actual file path being used.
    """

    logger = logging.getLogger()

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_exporter_installer_configured", False):
        return getattr(logger, "_exporter_installer_log_path", log_path)

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
        chosen_path = log_path
    except OSError:
        fallback = str(Path.cwd() / "exporter-installer.log")
        file_handler = logging.FileHandler(fallback)
        chosen_path = fallback
    file_handler.setFormatter(fmt)
    file_handler.setLevel(logging.DEBUG)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter("%(message)s"))
        console.setLevel(level)
        handlers.append(console)

    # The file always receives DEBUG output (command stdout/stderr).
    logger.setLevel(min(level, logging.DEBUG))
    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_exporter_installer_configured", True)
    setattr(logger, "_exporter_installer_log_path", chosen_path)

    logging.getLogger(__name__).debug(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path
