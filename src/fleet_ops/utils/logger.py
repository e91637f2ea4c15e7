# utils/logger.py
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional


def setup_logger(
    name: str,
    log_file: Optional[str] = None,
    level: str = "INFO",
    enable_rotation: bool = True,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> logging.Logger:
    """Setup logger with console output and an optional rotating log file.

    The log directory defaults to ``logs`` and can be moved with the
    ``FLEET_OPS_LOG_DIR`` environment variable.
    """
    logger = logging.getLogger(name)

    # Configure once; later calls keep the level set by the CLI
    if not logger.handlers:
        logger.setLevel(getattr(logging, level.upper()))
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setFormatter(formatter)
        stream_handler.setLevel(logging.INFO)  # Only INFO and above to console
        logger.addHandler(stream_handler)

        if log_file:
            logs_dir = Path(os.environ.get("FLEET_OPS_LOG_DIR", "logs"))
            log_path = logs_dir / log_file

            try:
                logs_dir.mkdir(parents=True, exist_ok=True)
                if enable_rotation:
                    file_handler = logging.handlers.RotatingFileHandler(
                        log_path,
                        maxBytes=max_bytes,
                        backupCount=backup_count,
                        encoding="utf-8",
                    )
                else:
                    file_handler = logging.FileHandler(log_path, encoding="utf-8")

                file_handler.setFormatter(formatter)
                file_handler.setLevel(logging.DEBUG)  # All levels to file
                logger.addHandler(file_handler)

            except (OSError, PermissionError) as e:
                logger.warning(
                    f"Failed to create log file {log_path}: {e}. Logging to console only."
                )

        # Prevent propagation to root logger to avoid duplicate messages
        logger.propagate = False

    return logger


def set_level(logger: logging.Logger, level: str) -> None:
    """Change the level of an already configured logger and its console handler."""
    numeric = getattr(logging, level.upper())
    logger.setLevel(numeric)
    for handler in logger.handlers:
        if not isinstance(handler, logging.FileHandler):
            handler.setLevel(numeric)
