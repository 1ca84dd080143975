"""
Logging setup for the Cash Drawer API.

JSON lines on stdout in deployment, plain text for local development.
Every JSON record carries timestamp, level, logger name, message and the
service identifier.
"""

import logging
import sys
from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "cashdrawer-api"


class CustomJsonFormatter(JsonFormatter):
    """JSON formatter that stamps the standard fields on every record."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["name"] = record.name
        log_record["service"] = SERVICE_NAME
        if "message" not in log_record:
            log_record["message"] = record.getMessage()


def setup_logging(level="INFO", format_as_json=True):
    """
    Configure the root logger.

    Args:
        level: Level name or number
        format_as_json: JSON output when True, plain text otherwise
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    if format_as_json:
        formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Quiet chatty libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)