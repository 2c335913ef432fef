# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

"""
Splunk compatible json log format.

Every record is rendered as a single json object. If the message of a record is a
`SplunkExtendedLogEntry` its fields are added to the top level of that object.
"""

import json
import logging
import datetime
from enum import Enum

from pydantic import BaseModel


class SplunkExtendedLogEntry(BaseModel):
    """Log message carrying additional, machine readable fields."""

    message: str

    def extended_fields(self) -> dict:
        return {k: v.value if isinstance(v, Enum) else str(v) for k, v in self if k != "message" and v is not None}

    def __str__(self) -> str:
        fields = " ".join(f"{k}={v}" for k, v in self.extended_fields().items())
        return f"{self.message} {fields}" if fields else self.message


class SplunkFormatter(logging.Formatter):
    """
    Formats records as json with the keys
    `@timestamp`, `level`, `app`, `hash` (correlation id), `logger`, `message` and, on exceptions, `exception`
    """

    def __init__(self, defaults: dict[str, str] | None = None) -> None:
        super().__init__()
        self._defaults = defaults or {}

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        created = datetime.datetime.fromtimestamp(record.created).astimezone()
        return created.isoformat(timespec="milliseconds")

    def format(self, record: logging.LogRecord) -> str:
        data = {
            "@timestamp": self.formatTime(record),
            "level": record.levelname,
            "app": self._defaults.get("app_name"),
            "hash": getattr(record, "correlation_id", None) or self._defaults.get("correlation_id"),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if isinstance(record.msg, SplunkExtendedLogEntry):
            data.update(record.msg.extended_fields())
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data)
