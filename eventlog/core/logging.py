"""JSON logging for the event log backend."""
from __future__ import annotations

import logging
from datetime import UTC, datetime

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "eventlog"


class EventLogFormatter(jsonlogger.JsonFormatter):
    """One JSON object per record, stamped with service, env and a UTC timestamp.

    Fields passed through ``extra`` (``event_type``, ``object_uuid``, ``log_uuid``,
    ``actor`` ...) land at the top level of the object.
    """

    def __init__(self, env: str = "dev"):
        super().__init__("%(levelname)s %(name)s %(message)s")
        self.env = env

    def add_fields(self, log_record, record, message_dict) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.fromtimestamp(record.created, tz=UTC).isoformat()
        log_record["level"] = log_record.pop("levelname", record.levelname)
        log_record["service"] = SERVICE_NAME
        log_record["env"] = self.env


def setup_logging(level: str = "INFO", env: str = "dev") -> None:
    """Route the root logger to stderr through :class:`EventLogFormatter`."""

    root_logger = logging.getLogger()
    # Drop handlers installed by a previous call (reloads, repeated test startups).
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.setLevel(level.upper())

    handler = logging.StreamHandler()
    handler.setFormatter(EventLogFormatter(env=env))
    root_logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["EventLogFormatter", "get_logger", "setup_logging"]
