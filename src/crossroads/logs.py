from __future__ import annotations

import logging
from os import getenv
from typing import Any

from pythonjsonlogger.json import JsonFormatter

FORMAT = (
    "%(asctime)s %(levelname)s [%(name)s] [%(filename)s:%(lineno)d] "
    "[dd.service=%(dd.service)s "
    "dd.env=%(dd.env)s "
    "dd.version=%(dd.version)s "
    "dd.trace_id=%(dd.trace_id)s "
    "dd.span_id=%(dd.span_id)s] "
    "- %(message)s"
)
DATE_FMT = "%Y-%m-%d %H:%M:%S"
DD_ENV = getenv("DD_ENV", "dev")  # read directly so this module imports nothing of ours


class DatadogJsonFormatter(JsonFormatter):
    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.setdefault("status", record.levelname)
        log_record["env"] = log_record.get("environment") or DD_ENV


# Note: call this before importing any application modules.
def configure_logging(level: int | str = "INFO") -> None:  # pragma: no cover
    if DD_ENV == "dev":
        logging.basicConfig(level=level)
        return
    handler = logging.StreamHandler()
    handler.setFormatter(DatadogJsonFormatter(fmt=FORMAT, datefmt=DATE_FMT))
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # discord.py's gateway chatter is not useful at INFO in production
    logging.getLogger("discord.gateway").setLevel(logging.WARNING)
