"""Logging configuration for cosign-trust."""

from __future__ import annotations

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

# Custom log format with service name
DEFAULT_LOG_FORMAT = (
    "%(asctime)s - %(levelname)s - [%(service_name)s] - [%(name)s] - "
    "[%(module)s.%(funcName)s:%(lineno)d] - %(message)s"
)

JSON_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

LOG_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "NOTSET": logging.NOTSET,
}

DEFAULT_LOG_LEVEL = "INFO"
LOG_OFF_LEVEL = "OFF"  # Special string to turn off logging


class ServiceNameFilter(logging.Filter):
    """Filter to inject service name into log records."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = self.service_name
        return True


class CosignJSONFormatter(JsonFormatter):
    """JSON formatter adding service, level and logger fields."""

    def add_fields(self, log_record, record, message_dict) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["service"] = getattr(record, "service_name", "unknown")
        log_record["level"] = record.levelname
        log_record["logger"] = record.name


def setup_logging(
    service_name: str = "cosign-trust",
    log_level: str = DEFAULT_LOG_LEVEL,
    json_format: bool = False,
) -> None:
    """
    Configure the root logger.

    Args:
        service_name: Value injected as service_name into every record
        log_level: One of LOG_LEVELS, or "OFF" to disable logging
        json_format: Emit JSON lines instead of the text format
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    level_name = log_level.upper()
    if level_name == LOG_OFF_LEVEL:
        logging.disable(logging.CRITICAL)
        return
    logging.disable(logging.NOTSET)

    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(ServiceNameFilter(service_name))
    if json_format:
        handler.setFormatter(CosignJSONFormatter(JSON_LOG_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))

    root_logger.addHandler(handler)
    root_logger.setLevel(LOG_LEVELS.get(level_name, logging.INFO))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
