# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

import logging
import sys

from asgi_correlation_id import CorrelationIdFilter, correlation_id

from common.config import Config
from common.logging import splunk

_correlation_id_length = 16

_PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"

_QUIET_LIBRARIES = ("httpx", "httpcore")
"""Libraries logging every request to the hosting services at INFO"""


def get_log_id() -> str:
    return (correlation_id.get() or "")[:_correlation_id_length]


def _create_formatter(config: Config) -> logging.Formatter:
    if config.enable_splunk_log:
        return splunk.SplunkFormatter(defaults={"app_name": config.app_name})
    return logging.Formatter(_PLAIN_FORMAT)


def configure_logging(config: Config) -> None:
    console_handler = logging.StreamHandler(stream=sys.stdout)

    _cid_filter = CorrelationIdFilter(uuid_length=_correlation_id_length)
    # Add correlation id to handlers
    console_handler.addFilter(_cid_filter)
    console_handler.setFormatter(_create_formatter(config))

    logging.basicConfig(handlers=[console_handler], level=config.log_level, force=True)

    if not config.enable_debug_mode:
        for library in _QUIET_LIBRARIES:
            logging.getLogger(library).setLevel(logging.WARNING)

    # Configure all loggers to use the console logger
    for logger in logging.root.manager.loggerDict.values():
        if isinstance(logger, logging.Logger):
            if console_handler not in logger.handlers:
                logger.handlers = [console_handler]
                logger.propagate = False
