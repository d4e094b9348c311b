import logging
import logging.config
import structlog
from datetime import datetime, timezone
import uuid
from typing import Any, Dict, Optional
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_logging_config(log_level: str = "INFO", log_file: Optional[str] = None) -> Dict[str, Any]:
    """
    Build the stdlib logging dictConfig used by configure_logging.

    Console output always goes to stdout; a rotating file handler is added to
    the root and "planner" loggers when `log_file` is set.
    """
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": log_level,
            "formatter": "detailed",
            "stream": sys.stdout,
        }
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": log_level,
            "formatter": "detailed",
            "filename": log_file,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"detailed": {"format": LOG_FORMAT}},
        "handlers": handlers,
        "loggers": {
            name: {"level": log_level, "handlers": list(handlers), "propagate": False}
            for name in ("", "planner")
        },
    }


def configure_logging(log_level: str = "INFO", log_file: Optional[str] = None):
    """
    Configure structured logging for the application.

    structlog renders each event as JSON and hands it to stdlib logging, which
    routes it through the handlers from build_logging_config.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path. If None, logs to stdout only.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(build_logging_config(log_level, log_file))

    logger = structlog.get_logger("planner")
    logger.info("Logging configured", level=log_level, file=log_file)

    return logger


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


class SchedulingContext:
    """Logs the start, duration and outcome of one scheduling pass under a short pass id."""

    def __init__(self, pass_type: str, pass_id: Optional[str] = None, **fields):
        self.pass_type = pass_type
        self.pass_id = pass_id or str(uuid.uuid4())[:8]
        self.fields = fields
        self.logger = get_logger("planner.scheduling")
        self.start_time = None

    def __enter__(self):
        self.start_time = datetime.now(timezone.utc)
        self.logger.info(
            "Scheduling pass started",
            pass_type=self.pass_type,
            pass_id=self.pass_id,
            start_time=self.start_time.isoformat(),
            **self.fields
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = (datetime.now(timezone.utc) - self.start_time).total_seconds()
        outcome = {
            "pass_type": self.pass_type,
            "pass_id": self.pass_id,
            "duration_seconds": duration,
        }

        if exc_type is None:
            self.logger.info("Scheduling pass completed", status="success", **outcome)
        else:
            self.logger.error(
                "Scheduling pass failed",
                status="error",
                error_type=exc_type.__name__,
                error_message=str(exc_val),
                **outcome
            )

        return False  # Don't suppress exceptions
