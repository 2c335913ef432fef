# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

"""
Backend keeping all documents in the memory of the running process.

Documents are stored in their json form and parsed on every read, the same way
the hosting services return them. Every call yields to the event loop once so
concurrent callers interleave as they would against a remote service.
"""

import asyncio
import copy
import logging
import secrets

from credential_status.backend.base import dump_document
from credential_status.errors import BackendFailure
from credential_status.models import StatusConfig, StatusLog, StatusCredential

_logger = logging.getLogger(__name__)


class MemoryStorageBackend:
    def __init__(self, status_url: str, access_token: str | None = None):
        self._status_url = status_url.rstrip("/")
        self._access_token = access_token
        self.location_created = False
        self.published = False
        self.config_data: dict | None = None
        self.log_data: list | None = None
        self.status_data: dict[str, dict] = {}
        """Status credentials by status list id"""

    @property
    def status_url(self) -> str:
        return self._status_url

    async def _ensure_location(self) -> None:
        await asyncio.sleep(0)
        if not self.location_created:
            raise BackendFailure("Status location has not been created")

    async def location_exists(self) -> bool:
        await asyncio.sleep(0)
        return self.location_created

    async def create_location(self) -> None:
        await asyncio.sleep(0)
        if self.location_created:
            raise BackendFailure("Status location already exists")
        self.location_created = True

    async def read_config(self) -> StatusConfig:
        await self._ensure_location()
        if self.config_data is None:
            raise BackendFailure("Config does not exist")
        return StatusConfig.model_validate(copy.deepcopy(self.config_data))

    async def create_config(self, config: StatusConfig) -> None:
        await self._ensure_location()
        if self.config_data is not None:
            raise BackendFailure("Config already exists")
        self.config_data = dump_document(config)

    async def update_config(self, config: StatusConfig) -> None:
        await self._ensure_location()
        if self.config_data is None:
            raise BackendFailure("Config does not exist")
        self.config_data = dump_document(config)

    async def read_log(self) -> StatusLog:
        await self._ensure_location()
        if self.log_data is None:
            raise BackendFailure("Log does not exist")
        return StatusLog.model_validate(copy.deepcopy(self.log_data))

    async def create_log(self, log: StatusLog) -> None:
        await self._ensure_location()
        if self.log_data is not None:
            raise BackendFailure("Log already exists")
        self.log_data = dump_document(log)

    async def update_log(self, log: StatusLog) -> None:
        await self._ensure_location()
        if self.log_data is None:
            raise BackendFailure("Log does not exist")
        self.log_data = dump_document(log)

    async def read_status(self, status_list_id: str) -> StatusCredential:
        await self._ensure_location()
        if status_list_id not in self.status_data:
            raise BackendFailure(f"Status credential {status_list_id} does not exist")
        return StatusCredential.model_validate(copy.deepcopy(self.status_data[status_list_id]))

    async def create_status(self, status_list_id: str, status_credential: StatusCredential) -> None:
        await self._ensure_location()
        if status_list_id in self.status_data:
            raise BackendFailure(f"Status credential {status_list_id} already exists")
        self.status_data[status_list_id] = dump_document(status_credential)

    async def update_status(self, status_list_id: str, status_credential: StatusCredential) -> None:
        await self._ensure_location()
        if status_list_id not in self.status_data:
            raise BackendFailure(f"Status credential {status_list_id} does not exist")
        self.status_data[status_list_id] = dump_document(status_credential)

    async def has_authority(self, access_token: str | None) -> bool:
        if not access_token or not self._access_token:
            return False
        return secrets.compare_digest(access_token, self._access_token)

    async def publish(self) -> None:
        _logger.info(f"Status credentials are served under {self._status_url}")
        self.published = True

    async def reconcile(self) -> None:
        # Nothing is held outside of this process
        pass

    async def close(self) -> None:
        pass
