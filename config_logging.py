#!/usr/bin/env python3
"""
Text Compare Configuration & Logging Module
===========================================
Centralized configuration, structured logging, and error types.

Every setting can be supplied through a TC_* environment variable;
the comparison core only ever sees the resolved option values.
"""

import os
import re
import sys
import json
import logging
import uuid
import time
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from pathlib import Path
from dataclasses import dataclass, field
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
import threading

# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================
DEFAULT_MAX_INPUT_MB = 5            # Largest request body the API will diff
DEFAULT_WORD_DIFF_TIMEOUT = 2.0     # Seconds per word-level diff (0 = unlimited)
DEFAULT_ADD_COLOR = "#28a745"
DEFAULT_DELETE_COLOR = "#d73a49"
DEFAULT_MODIFY_COLOR = "#f9c513"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024  # 5MB max per log file
LOG_BACKUP_COUNT = 5                # Number of log backup files to keep

DEFAULT_MAX_INPUT_BYTES = DEFAULT_MAX_INPUT_MB * 1024 * 1024

_COLOR_RE = re.compile(r'^#[0-9a-fA-F]{6}$')

__version__ = "1.0.0"
VERSION = __version__
APP_NAME = "TextCompare"


def _env_flag(name: str, default: str = 'false') -> bool:
    """Read a boolean environment variable."""
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================

@dataclass
class AppConfig:
    """Application configuration with local-only defaults."""

    # Comparison options
    ignore_whitespace: bool = False
    ignore_case: bool = False
    word_diff_timeout: float = DEFAULT_WORD_DIFF_TIMEOUT

    # Highlight colors (#rrggbb)
    highlight_additions: str = DEFAULT_ADD_COLOR
    highlight_deletions: str = DEFAULT_DELETE_COLOR
    highlight_modifications: str = DEFAULT_MODIFY_COLOR

    # Server settings
    host: str = "127.0.0.1"
    port: int = 5060
    debug: bool = False
    max_input_bytes: int = DEFAULT_MAX_INPUT_BYTES
    file_root: Path = field(default_factory=Path.cwd)  # /files and /save stay inside this

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # Options: json, text
    log_to_file: bool = False
    log_to_console: bool = True
    log_dir: Path = field(default_factory=lambda: Path.cwd() / 'logs')

    def __post_init__(self):
        if self.log_to_file:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        if os.environ.get('TC_ENV', 'development').lower() == 'production':
            self.debug = False

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """Load configuration from environment variables."""
        return cls(
            ignore_whitespace=_env_flag('TC_IGNORE_WHITESPACE'),
            ignore_case=_env_flag('TC_IGNORE_CASE'),
            word_diff_timeout=float(os.environ.get('TC_WORD_DIFF_TIMEOUT', str(DEFAULT_WORD_DIFF_TIMEOUT))),
            highlight_additions=os.environ.get('TC_HIGHLIGHT_ADDITIONS', DEFAULT_ADD_COLOR),
            highlight_deletions=os.environ.get('TC_HIGHLIGHT_DELETIONS', DEFAULT_DELETE_COLOR),
            highlight_modifications=os.environ.get('TC_HIGHLIGHT_MODIFICATIONS', DEFAULT_MODIFY_COLOR),
            host=os.environ.get('TC_HOST', '127.0.0.1'),
            port=int(os.environ.get('TC_PORT', '5060')),
            debug=_env_flag('TC_DEBUG'),
            max_input_bytes=int(os.environ.get('TC_MAX_INPUT', str(DEFAULT_MAX_INPUT_BYTES))),
            file_root=Path(os.environ.get('TC_FILE_ROOT', str(Path.cwd()))),
            log_level=os.environ.get('TC_LOG_LEVEL', 'INFO'),
            log_format=os.environ.get('TC_LOG_FORMAT', 'json'),
            log_to_file=_env_flag('TC_LOG_TO_FILE'),
            log_dir=Path(os.environ.get('TC_LOG_DIR', str(Path.cwd() / 'logs'))),
        )

    @property
    def colors(self) -> Dict[str, str]:
        """Highlight colors keyed by row classification."""
        return {
            'added': self.highlight_additions,
            'removed': self.highlight_deletions,
            'modified': self.highlight_modifications,
        }

    def validate(self) -> tuple:
        """Validate configuration and return (is_valid, errors)."""
        errors = []

        for name, value in (('highlight_additions', self.highlight_additions),
                            ('highlight_deletions', self.highlight_deletions),
                            ('highlight_modifications', self.highlight_modifications)):
            if not _COLOR_RE.match(value or ''):
                errors.append(f"{name} must be a #rrggbb color, got {value!r}")

        if self.word_diff_timeout < 0:
            errors.append("word_diff_timeout cannot be negative")

        if self.max_input_bytes <= 0:
            errors.append("max_input_bytes must be positive")

        if not Path(self.file_root).is_dir():
            errors.append(f"file_root is not a directory: {self.file_root}")

        if self.log_format not in ('json', 'text'):
            errors.append(f"Invalid log_format: {self.log_format}. Must be 'json' or 'text'")

        if not hasattr(logging, self.log_level.upper()):
            errors.append(f"Invalid log_level: {self.log_level}")

        return (len(errors) == 0, errors)


# Global config instance
_config: Optional[AppConfig] = None

def get_config() -> AppConfig:
    """Get or create the global configuration."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def reset_config():
    """Reset the global configuration (for testing)."""
    global _config
    _config = None


# =============================================================================
# STRUCTURED LOGGING
# =============================================================================

_request_state = threading.local()


def new_correlation_id() -> str:
    """Start a new correlation ID for the current thread (one per request)."""
    _request_state.correlation_id = uuid.uuid4().hex[:12]
    return _request_state.correlation_id


def current_correlation_id() -> str:
    """Correlation ID of the current thread, or a throwaway one."""
    return getattr(_request_state, 'correlation_id', None) or uuid.uuid4().hex[:8]


# LogRecord attributes that are not user-supplied context
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {'message', 'asctime', 'taskName'}


class JsonFormatter(logging.Formatter):
    """One JSON object per line: app, version, level, logger, message, context."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'ts': datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace('+00:00', 'Z'),
            'app': APP_NAME,
            'version': VERSION,
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        entry.update(
            (key, value) for key, value in vars(record).items()
            if key not in _RECORD_ATTRS
        )
        if record.exc_info:
            entry['traceback'] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _build_handlers(name: str, config: AppConfig) -> List[logging.Handler]:
    """Console and/or rotating-file handlers for one logger."""
    if config.log_format == 'json':
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter('%(asctime)s %(levelname)-8s %(name)s: %(message)s')

    handlers: List[logging.Handler] = []
    if config.log_to_console:
        handlers.append(logging.StreamHandler(sys.stderr))
    if config.log_to_file:
        handlers.append(RotatingFileHandler(
            config.log_dir / f"{name.replace('.', '_')}.log",
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding='utf-8'
        ))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


class StructuredLogger:
    """
    Wraps a stdlib logger so keyword arguments become structured
    context and every entry carries the request correlation ID.
    """

    def __init__(self, name: str, config: Optional[AppConfig] = None):
        self.name = name
        self.config = config or get_config()
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, self.config.log_level.upper(), logging.INFO))
        self.logger.propagate = False
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()
        for handler in _build_handlers(name, self.config):
            self.logger.addHandler(handler)

    def _log(self, level: int, message: str, exc_info: bool = False, **context):
        context.setdefault('correlation_id', current_correlation_id())
        self.logger.log(level, message, exc_info=exc_info, extra=context)

    def debug(self, message: str, **context):
        self._log(logging.DEBUG, message, **context)

    def info(self, message: str, **context):
        self._log(logging.INFO, message, **context)

    def warning(self, message: str, **context):
        self._log(logging.WARNING, message, **context)

    def error(self, message: str, exc_info: bool = False, **context):
        self._log(logging.ERROR, message, exc_info=exc_info, **context)

    def exception(self, message: str, **context):
        self._log(logging.ERROR, message, exc_info=True, **context)

    @contextmanager
    def log_operation(self, operation: str, **context):
        """Time a block; log completion at info, failure at error, then re-raise."""
        started = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = round((time.perf_counter() - started) * 1000, 2)
            self.error(f"{operation} failed after {elapsed}ms: {e}", exc_info=True,
                       operation=operation, duration_ms=elapsed, **context)
            raise
        elapsed = round((time.perf_counter() - started) * 1000, 2)
        self.info(f"{operation} took {elapsed}ms", operation=operation,
                  duration_ms=elapsed, **context)


_loggers: Dict[str, StructuredLogger] = {}
_loggers_lock = threading.Lock()


def get_logger(name: str) -> StructuredLogger:
    """Logger for a module; rebuilt when the global config is reset."""
    with _loggers_lock:
        logger = _loggers.get(name)
        if logger is None or logger.config is not get_config():
            logger = _loggers[name] = StructuredLogger(name, get_config())
        return logger


# =============================================================================
# ERROR HANDLING
# =============================================================================

class TextCompareError(Exception):
    """Base exception for TextCompare."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR",
                 status_code: int = 500, details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to API response dict."""
        return {
            'success': False,
            'error': {
                'code': self.code,
                'message': self.message,
                'details': self.details
            }
        }


class ValidationError(TextCompareError):
    """Input validation error."""
    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, code="VALIDATION_ERROR", status_code=400,
                         details={'field': field, **kwargs})


_FILE_ERROR_CODES = {403: "FILE_FORBIDDEN", 404: "FILE_NOT_FOUND"}


class FileError(TextCompareError):
    """File handling error."""
    def __init__(self, message: str, filename: Optional[str] = None,
                 status_code: int = 400, **kwargs):
        super().__init__(message, code=_FILE_ERROR_CODES.get(status_code, "FILE_ERROR"),
                         status_code=status_code,
                         details={'filename': filename, **kwargs})


class ProcessingError(TextCompareError):
    """Comparison processing error."""
    def __init__(self, message: str, stage: Optional[str] = None, **kwargs):
        super().__init__(message, code="PROCESSING_ERROR", status_code=500,
                         details={'stage': stage, **kwargs})
