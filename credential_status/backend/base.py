# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

"""
Contract between the credential status manager and the hosting service of its documents.

Three document families are stored:
* config - `StatusConfig`, a single document
* log - `StatusLog`, a single document growing with every allocation and update
* status - one `StatusCredential` per status list id, publicly reachable under `status_url`

Implementations are structural, they do not inherit from `StorageBackend`.
Every failure to reach or modify a document is raised as `BackendFailure`.
"""

from enum import Enum
from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from credential_status.config import CredentialStatusConfig
from credential_status.errors import InvalidConfiguration
from credential_status.models import StatusConfig, StatusLog, StatusCredential

CONFIG_FILE = "config.json"
LOG_FILE = "log.json"


class StorageService(str, Enum):
    memory = "memory"
    github = "github"
    gitlab = "gitlab"


@runtime_checkable
class StorageBackend(Protocol):
    @property
    def status_url(self) -> str:
        """Base url the status credentials are published under, without trailing slash"""
        ...

    async def location_exists(self) -> bool:
        """True if the repositories have been created before"""
        ...

    async def create_location(self) -> None: ...

    async def read_config(self) -> StatusConfig: ...

    async def create_config(self, config: StatusConfig) -> None: ...

    async def update_config(self, config: StatusConfig) -> None: ...

    async def read_log(self) -> StatusLog: ...

    async def create_log(self, log: StatusLog) -> None: ...

    async def update_log(self, log: StatusLog) -> None: ...

    async def read_status(self, status_list_id: str) -> StatusCredential: ...

    async def create_status(self, status_list_id: str, status_credential: StatusCredential) -> None: ...

    async def update_status(self, status_list_id: str, status_credential: StatusCredential) -> None: ...

    async def has_authority(self, access_token: str | None) -> bool:
        """True if the bearer of the token may change the status of credentials"""
        ...

    async def publish(self) -> None:
        """Makes the status credentials publicly available, no-op where the service has nothing to set up"""
        ...

    async def reconcile(self) -> None:
        """Brings an existing deployment into a usable state on startup"""
        ...

    async def close(self) -> None: ...


def dump_document(document: BaseModel) -> dict | list:
    """Json compatible representation of a document as stored by the backends"""
    return document.model_dump(mode="json", by_alias=True, exclude_none=True)


def create_backend(config: CredentialStatusConfig) -> StorageBackend:
    """Creates the backend for the configured hosting service"""
    try:
        service = StorageService(config.service)
    except ValueError:
        raise InvalidConfiguration(f'"service" must be one of the following values: {", ".join(repr(s.value) for s in StorageService)}.')

    if service is StorageService.memory:
        from credential_status.backend.memory import MemoryStorageBackend

        return MemoryStorageBackend(
            status_url=f"{(config.external_url or 'http://localhost:8000').rstrip('/')}/status-lists",
            access_token=config.access_token,
        )
    if service is StorageService.github:
        from credential_status.backend.github import GithubStorageBackend

        return GithubStorageBackend(
            repo_owner=config.repo_owner,
            access_token=config.access_token,
            repo_name=config.repo_name,
            meta_repo_name=config.meta_repo_name,
            repo_visibility=config.repo_visibility,
            api_url=config.get_api_url("https://api.github.com"),
            verify=config.enable_ssl_verification,
        )
    if service is StorageService.gitlab:
        from credential_status.backend.gitlab import GitlabStorageBackend

        return GitlabStorageBackend(
            repo_owner=config.repo_owner,
            repo_owner_id=config.repo_owner_id,
            access_token=config.access_token,
            repo_name=config.repo_name,
            meta_repo_name=config.meta_repo_name,
            repo_visibility=config.repo_visibility,
            api_url=config.get_api_url("https://gitlab.com/api/v4"),
            verify=config.enable_ssl_verification,
        )
