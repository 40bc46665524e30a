"""Structured logging for the storefront.

structlog renders every record; stdlib logging carries them to stdout and, outside
tests, to rotating files. Production and staging emit JSON lines, everything else
gets Rich-formatted console output. Request middleware binds ``request_id`` and
friends through contextvars so they appear on every line logged for that request.
"""

import logging
import logging.handlers
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog

_DEFAULT_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

# Third-party loggers that are too chatty below WARNING
_QUIET_LOGGERS = ("protean", "sqlalchemy.engine", "asyncio", "urllib3")

_MAX_LOG_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True)
class LogSettings:
    environment: str = "development"
    level: str = "DEBUG"
    log_dir: Path = Path("logs")

    @classmethod
    def from_env(cls) -> "LogSettings":
        environment = (
            os.getenv("ENVIRONMENT") or os.getenv("ENV") or os.getenv("PROTEAN_ENV") or "development"
        ).lower()
        return cls(
            environment=environment,
            level=os.getenv("LOG_LEVEL", _DEFAULT_LEVELS.get(environment, "INFO")).upper(),
            log_dir=Path(os.getenv("STORE_LOG_DIR", "logs")),
        )

    @property
    def renders_json(self) -> bool:
        return self.environment in ("production", "staging")

    @property
    def writes_files(self) -> bool:
        return self.environment != "test"


def _rotating_file(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path, maxBytes=_MAX_LOG_BYTES, backupCount=5, encoding="utf-8"
    )
    handler.setLevel(level)
    return handler


def _handlers(settings: LogSettings) -> list[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(settings.level)
    if not settings.writes_files:
        return [console]

    settings.log_dir.mkdir(parents=True, exist_ok=True)
    return [
        console,
        _rotating_file(settings.log_dir / "storefront.log", settings.level),
        _rotating_file(settings.log_dir / "storefront_error.log", logging.ERROR),
    ]


def _renderer(settings: LogSettings):
    if settings.renders_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=True,
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=2),
    )


def configure_logging(settings: LogSettings | None = None) -> LogSettings:
    """Wire stdlib handlers and the structlog pipeline. Safe to call more than once."""
    settings = settings or LogSettings.from_env()

    root = logging.getLogger()
    root.setLevel(settings.level)
    root.handlers = _handlers(settings)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                ]
            ),
            _renderer(settings),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return settings


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request_context(**kwargs: Any) -> None:
    """Attach key/value pairs (request id, customer id) to every log line of this request."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
