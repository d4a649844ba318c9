"""
Structured logging for nexuschain

Every module logs through a child of the ``nexuschain`` logger. Records are
emitted as JSON lines (python-json-logger) or as plain text for local runs,
always on stderr so command output on stdout stays machine readable.

Extra fields that could carry credentials (wallet keys, API tokens) are
masked before a record is written.
"""
import logging
import os
import sys
import time

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "nexuschain"

REDACTED = "***"
SENSITIVE_FIELDS = frozenset({"private_key", "api_token", "authorization", "password"})

JSON_FORMAT = "%(timestamp)s %(level)s %(logger)s %(component)s %(message)s"
TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


def component_of(logger_name: str) -> str:
    """
    Short component label for a logger name.

    Examples:
        >>> component_of("nexuschain.services.registration")
        'registration'
        >>> component_of("nexuschain")
        'nexuschain'
    """
    return logger_name.rsplit(".", 1)[-1]


class ProvenanceJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter adding service and component fields and masking secrets
    """

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["component"] = component_of(record.name)
        log_record["service"] = SERVICE_NAME

        for key in SENSITIVE_FIELDS.intersection(log_record):
            log_record[key] = REDACTED


class RedactingTextFormatter(logging.Formatter):
    """Text formatter that appends extra fields as key=value, masking secrets"""

    RESERVED = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = {
            key: (REDACTED if key in SENSITIVE_FIELDS else value)
            for key, value in vars(record).items()
            if key not in self.RESERVED
        }
        if extras:
            line += " " + " ".join(f"{key}={value}" for key, value in sorted(extras.items()))
        return line


def _level(level: str | None) -> int:
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def setup_logger(
    name: str = SERVICE_NAME,
    level: str | None = None,
    format_type: str | None = None,
) -> logging.Logger:
    """
    Setup and configure a logger

    Args:
        name: Logger name
        level: Log level name; defaults to env var LOG_LEVEL, then INFO
        format_type: "json" or "text"; defaults to env var LOG_FORMAT, then json

    Returns:
        Configured logger instance
    """
    log_level = _level(level)
    format_type = (format_type or os.getenv("LOG_FORMAT", "json")).lower()

    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    if format_type == "json":
        handler.setFormatter(ProvenanceJsonFormatter(fmt=JSON_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    else:
        handler.setFormatter(RedactingTextFormatter(fmt=TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)

    # Handlers live on each nexuschain logger; don't double-log via root
    logger.propagate = False

    return logger


def get_logger(name: str = SERVICE_NAME) -> logging.Logger:
    """Get a logger, configuring it from the environment on first use."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        return setup_logger(name)
    return logger


def configure_logging(level: str | None = None, format_type: str | None = None) -> None:
    """
    Reconfigure every nexuschain logger created so far.

    Module-level loggers are created at import time with environment
    defaults; entry points call this once settings are loaded.
    """
    for name in list(logging.Logger.manager.loggerDict):
        if name == SERVICE_NAME or name.startswith(f"{SERVICE_NAME}."):
            setup_logger(name, level=level, format_type=format_type)


class log_operation:
    """
    Context manager logging the outcome and duration of one workflow step

    Usage:
        with log_operation("create_product", logger=logger, product_key="SKU-1"):
            record_client.create_product(registration)

    Start is logged at DEBUG, success at INFO. A failure is logged at WARNING
    with the exception class and re-raised; callers decide whether it is fatal.
    """

    def __init__(self, operation_name: str, logger: logging.Logger | None = None, **extra_fields):
        self.operation_name = operation_name
        self.logger = logger or get_logger()
        self.extra_fields = extra_fields
        self.start_time = None

    def _extra(self, **fields) -> dict:
        return {"operation": self.operation_name, **fields, **self.extra_fields}

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.debug(f"Starting: {self.operation_name}", extra=self._extra())
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = round(time.perf_counter() - self.start_time, 3)

        if exc_type is None:
            self.logger.info(
                f"Completed: {self.operation_name}",
                extra=self._extra(duration_seconds=duration, status="success"),
            )
        else:
            self.logger.warning(
                f"Failed: {self.operation_name}",
                extra=self._extra(
                    duration_seconds=duration,
                    status="error",
                    error_type=exc_type.__name__,
                    error_message=str(exc_val),
                ),
            )
        return False
