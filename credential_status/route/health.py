# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

"""This file defines the custom health checks for the application."""
import logging

from fastapi import Response

from common import health

from credential_status import dependencies
import credential_status.config as conf
from credential_status.manager import CredentialStatusManager

_logger = logging.getLogger(__name__)


class DebugHealthResponse(health.HealthResponse):
    """Response body model for health request operation."""

    config_did_seed_present: health.HealthStatus = health.HealthStatus.unhealthy
    config_access_token_present: health.HealthStatus = health.HealthStatus.unhealthy


class ReadinessHealthResponse(health.HealthResponse):
    """Response body model for health request operation."""

    status_documents_consistency: health.HealthStatus = health.HealthStatus.unhealthy


class LivenessHealthResponse(health.HealthResponse):
    """Response body model for health request operation."""

    signing_key_is_available: health.HealthStatus = health.HealthStatus.unhealthy


class CredentialStatusHealthAPIRouter(health.HealthAPIRouter):
    def __init__(self) -> None:
        super().__init__(
            readiness_response_model=ReadinessHealthResponse,
            liveness_response_model=LivenessHealthResponse,
            debug_response_model=DebugHealthResponse,
        )

    async def _build_readiness_probe(
        self,
        result: ReadinessHealthResponse,
        response: Response,
        manager: CredentialStatusManager,
    ) -> ReadinessHealthResponse:
        # Does not raise, read failures count as inconsistent
        result.status_documents_consistency = await manager.verify_consistency()
        return await super()._build_readiness_probe(result, response)

    async def get_readiness_probe(self, response: Response, manager: dependencies.inject) -> ReadinessHealthResponse:
        """Determines whether the application instance is ready to accept requests."""
        return await self._build_readiness_probe(ReadinessHealthResponse(), response, manager)

    async def _build_liveness_probe(
        self,
        result: LivenessHealthResponse,
        response: Response,
        manager: CredentialStatusManager,
    ) -> LivenessHealthResponse:
        try:
            manager.get_signing_material()
            result.signing_key_is_available = health.HealthStatus.healthy
        except Exception:
            _logger.exception("Cannot resolve the signing key.")
        return await super()._build_liveness_probe(result, response)

    async def get_liveness_probe(self, response: Response, manager: dependencies.inject) -> LivenessHealthResponse:
        """Determines whether the application instance needs to be restarted."""
        return await self._build_liveness_probe(LivenessHealthResponse(), response, manager)

    async def _build_debug_probe(
        self,
        result: DebugHealthResponse,
        response: Response,
        config: conf.CredentialStatusConfig,
    ) -> DebugHealthResponse:
        result.config_did_seed_present = bool(config.did_seed)
        result.config_access_token_present = bool(config.access_token)
        return await super()._build_debug_probe(result, response)

    async def get_debug_probe(self, response: Response, config: conf.inject) -> DebugHealthResponse:
        """Provides information regarding debug and config states."""
        return await self._build_debug_probe(DebugHealthResponse(), response, config)


router = CredentialStatusHealthAPIRouter()
