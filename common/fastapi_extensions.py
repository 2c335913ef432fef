# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

import logging
import contextlib
from typing import Type, Callable

from fastapi import FastAPI, Request, HTTPException
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware

from common.logging.setup import configure_logging, get_log_id
from common.version import get_version
from common import config as conf

_logger = logging.getLogger(__name__)

LifespanFunction = Callable[["ExtendedFastAPI"], contextlib.AbstractAsyncContextManager]
"""Called with the app at startup, the returned context is left at shutdown"""


@contextlib.asynccontextmanager
async def _logging_lifespan(app: "ExtendedFastAPI"):
    configure_logging(app.config_instance)
    yield


class ExtendedFastAPI(FastAPI):
    """
    FastAPI app configured from a `Config` class.

    Features toggled by the config:
     - documentation endpoints
     - app title and version
     - logging output
     - CORS
    Additional startup / shutdown work is registered as `lifespan_functions`,
    entered in order of registration after logging has been configured.
    """

    @staticmethod
    @contextlib.asynccontextmanager
    async def lifespan(app: "ExtendedFastAPI"):
        async with contextlib.AsyncExitStack() as stack:
            for lifespan_function in app.lifespan_functions:
                await stack.enter_async_context(lifespan_function(app))
            yield

    def __init__(
        self,
        config: Type[conf.Config],
        lifespan_functions: list[LifespanFunction] | None = None,
        *args,
        **kwargs,
    ) -> None:
        self.config_instance = config()
        self.lifespan_functions: list[LifespanFunction] = [_logging_lifespan, *(lifespan_functions or [])]

        if not self.config_instance.enable_documentation_endpoints:
            _logger.info("Deactivate documentation endpoints.")
            kwargs.update(docs_url=None, redoc_url=None, openapi_url=None)
        kwargs.setdefault("title", self.config_instance.app_name)
        kwargs.setdefault("version", get_version())
        kwargs.setdefault("lifespan", ExtendedFastAPI.lifespan)

        super().__init__(*args, **kwargs)

        if self.config_instance.enable_cors:
            _logger.info("Activate CORs support.")
            self.add_middleware(
                CORSMiddleware,
                allow_origins=self._allowed_origins(),
                allow_credentials=True,
                allow_methods=["*"],
                allow_headers=["*"],
            )
        self.add_exception_handler(Exception, self.unhandled_exception_handler)

    def _allowed_origins(self) -> list[str]:
        origins = [self.config_instance.external_url or "*"]
        if self.config_instance.additional_allowed_origins:
            origins += self.config_instance.additional_allowed_origins.split(",")
        return origins

    async def unhandled_exception_handler(self, request: Request, exc: Exception):
        if not isinstance(exc, HTTPException):
            # starlette logs the traceback of the original error
            _logger.error("Unhandled exception detected.")
            exc = HTTPException(
                500,
                f"Could not process the request. Please contact support with request id {get_log_id()}",
            )
        return await http_exception_handler(request, exc)
