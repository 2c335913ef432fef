# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

from enum import Enum

from pydantic import BaseModel

from fastapi import APIRouter, status, Response


class HealthStatus(Enum):
    """Indicator of system health."""

    healthy = "HEALTHY"
    unhealthy = "UNHEALTHY"


class HealthResponse(BaseModel):
    """Response body model for health request operation.

    May only contain `HealthStatus` fields. Those can be set with boolean values,
    those get converted before the model is returned to the client."""

    http_server_connectivity: HealthStatus = HealthStatus.unhealthy

    def convert_from_bool(self) -> None:
        '''Converts every boolean field into its `HealthStatus` representation.'''
        for k, v in iter(self):
            if isinstance(v, bool):
                setattr(self, k, HealthStatus.healthy if v else HealthStatus.unhealthy)

    def is_healthy(self) -> bool:
        """Summarizes all checks performed into the status field."""
        return all([v == HealthStatus.healthy for _, v in iter(self)])


class HealthAPIRouter(APIRouter):
    """Create a api router for common health endpoints
    `/health/debug`, `/health/liveness` and `/health/readiness`.

    To add application specific checks create a child class of `HealthResponse`
    and `HealthAPIRouter` and overwrite the `_build_*` methods. Endpoints needing
    further dependencies overwrite the matching `get_*` method as well.
    """

    def __init__(
        self,
        readiness_response_model: type[HealthResponse] = HealthResponse,
        liveness_response_model: type[HealthResponse] = HealthResponse,
        debug_response_model: type[HealthResponse] = HealthResponse,
        *args,
        **kwargs,
    ) -> None:
        """Create a api router for common health endpoints.

        Args:
            readiness_response_model (type, optional): Response model of `/health/readiness`. Defaults to HealthResponse.
            liveness_response_model (type, optional): Response model of `/health/liveness`. Defaults to HealthResponse.
            debug_response_model (type, optional): Response model of `/health/debug`. Defaults to HealthResponse.
        """
        super().__init__(prefix="/health", tags=["Health"], *args, **kwargs)
        probes = (
            ("/debug", self.get_debug_probe, debug_response_model),
            ("/liveness", self.get_liveness_probe, liveness_response_model),
            ("/readiness", self.get_readiness_probe, readiness_response_model),
        )
        for path, endpoint, model in probes:
            self.add_api_route(
                path,
                endpoint=endpoint,
                responses={
                    status.HTTP_200_OK: {"model": model},
                    status.HTTP_503_SERVICE_UNAVAILABLE: {"model": model},
                },
            )

    def _resolve_probe(self, result: HealthResponse, response: Response) -> HealthResponse:
        """Evaluates the `result` and sets the http code on `response` accordingly."""
        result.http_server_connectivity = HealthStatus.healthy
        result.convert_from_bool()
        if result.is_healthy():
            response.status_code = status.HTTP_200_OK
        else:
            response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return result

    async def _build_debug_probe(self, result: HealthResponse, response: Response) -> HealthResponse:
        return self._resolve_probe(result, response)

    async def get_debug_probe(self, response: Response) -> HealthResponse:
        """Provides information regarding debug and config states."""
        return await self._build_debug_probe(HealthResponse(), response)

    async def _build_liveness_probe(self, result: HealthResponse, response: Response) -> HealthResponse:
        """Provides information regarding issues which could be
        resolved through a application instance restart."""
        return self._resolve_probe(result, response)

    async def get_liveness_probe(self, response: Response) -> HealthResponse:
        """Determines whether the application instance needs to be restarted."""
        return await self._build_liveness_probe(HealthResponse(), response)

    async def _build_readiness_probe(self, result: HealthResponse, response: Response) -> HealthResponse:
        """Provides information regarding issues which prevent the application to function properly.
        Therefore if any probe fails the system should not receive any data."""
        return self._resolve_probe(result, response)

    async def get_readiness_probe(self, response: Response) -> HealthResponse:
        """Determines whether the application instance is ready to accept requests."""
        return await self._build_readiness_probe(HealthResponse(), response)
