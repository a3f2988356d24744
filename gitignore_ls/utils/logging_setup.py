"""
Logging configuration for the gitignore language server.

Provides environment-aware logging that:
- Uses stderr exclusively, stdout carries the language server protocol stream
- Outputs JSON lines when requested or when running inside a container
- Supports log rotation for file-based logging
- Includes custom TRACE level for per-line parser tracing
"""

import sys
import logging
import json
import os
from datetime import datetime, timezone
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional, Any

# Define TRACE level (lower number = more detailed)
TRACE_LEVEL = 5
logging.addLevelName(TRACE_LEVEL, "TRACE")


def trace(self, message, *args, **kwargs):
    if self.isEnabledFor(TRACE_LEVEL):
        self._log(TRACE_LEVEL, message, args, **kwargs)


logging.Logger.trace = trace


def add_trace_to_logger():
    """Ensure trace method is available on all logger instances"""
    if not hasattr(logging.Logger, 'trace'):
        logging.Logger.trace = trace


class JsonFormatter(logging.Formatter):
    """JSON line formatter for container and log-shipping environments"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'component': record.name,
            'message': record.getMessage(),
            'pid': os.getpid(),
        }

        # Structured fields from log_with_context()
        if hasattr(record, 'context'):
            log_data.update(record.context)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def _in_container() -> bool:
    return (
        os.path.exists('/.dockerenv') or
        os.environ.get('DOCKER_CONTAINER', '').lower() == 'true'
    )


def resolve_level(level_str: Optional[str]) -> int:
    """
    Convert a level name to a numeric level, handling the custom TRACE level.

    Args:
        level_str: Level name such as "debug" or "TRACE"

    Returns:
        Numeric logging level, INFO when the name is unknown
    """
    if not level_str:
        return logging.INFO
    if level_str.upper() == 'TRACE':
        return TRACE_LEVEL
    return getattr(logging, level_str.upper(), logging.INFO)


def configure_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_rotation: bool = True,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    quiet_libraries: bool = True,
) -> None:
    """
    Configure logging based on environment.

    Args:
        log_level: Override log level (defaults to GITIGNORE_LS_LOG_LEVEL, LOG_LEVEL or INFO)
        log_file: Optional path to an additional log file
        log_format: "text" or "json" (json is also chosen automatically in containers)
        enable_rotation: Enable log rotation for file handler
        max_bytes: Maximum size of log file before rotation
        backup_count: Number of backup files to keep
        quiet_libraries: Suppress verbose third-party library logs
    """
    add_trace_to_logger()
    level_str = (
        log_level
        or os.environ.get('GITIGNORE_LS_LOG_LEVEL')
        or os.environ.get('LOG_LEVEL', 'INFO')
    )
    level = resolve_level(level_str)

    use_json = (log_format or '').lower() == 'json' or (log_format is None and _in_container())
    if use_json:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    root_logger = logging.getLogger()
    root_logger.handlers = []

    # Never stdout: the protocol stream lives there
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        if enable_rotation:
            file_handler = RotatingFileHandler(
                str(log_path),
                maxBytes=max_bytes,
                backupCount=backup_count
            )
        else:
            file_handler = logging.FileHandler(str(log_path))
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.setLevel(level)

    if quiet_libraries:
        for lib in ('pygls', 'asyncio'):
            logging.getLogger(lib).setLevel(max(level, logging.WARNING))

    logger = logging.getLogger('gitignore-ls')
    logger.info(f"Logging configured - Level: {level_str.upper()}, JSON: {use_json}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    add_trace_to_logger()
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context: Any
) -> None:
    """
    Log a message with additional context fields.

    Args:
        logger: Logger instance
        level: Log level (e.g., logging.INFO)
        message: Log message
        **context: Additional fields to include in structured logs
    """
    extra = {'context': context} if context else {}
    logger.log(level, message, extra=extra)
