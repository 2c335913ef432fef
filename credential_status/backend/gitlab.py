# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

"""
Backend storing the documents in two GitLab projects
https://docs.gitlab.com/ee/api/rest/

Same layout as the GitHub backend. Publishing commits a pages pipeline to the
status project. Every read remembers the last commit id of the file, the next
update of that file sends it and GitLab rejects the write if the file was
changed since the read.
"""

import logging
import urllib.parse

import httpx

from credential_status.backend import http
from credential_status.backend.base import CONFIG_FILE, LOG_FILE, dump_document
from credential_status.errors import InvalidConfiguration
from credential_status.models import StatusConfig, StatusLog, StatusCredential

_logger = logging.getLogger(__name__)

_SERVICE = "GitLab"
_BRANCH = "main"
_PAGES_FILE = ".gitlab-ci.yml"
_PAGES_PIPELINE = """\
pages:
  stage: deploy
  script:
    - mkdir .public && cp -r * .public && mv .public public
  artifacts:
    paths:
      - public
  only:
    - main
"""

MAINTAINER_ACCESS_LEVEL = 40


def _create_headers(access_token: str) -> dict:
    return {"Authorization": f"Bearer {access_token}"}


class GitlabStorageBackend:
    def __init__(
        self,
        repo_owner: str,
        repo_owner_id: str,
        access_token: str,
        repo_name: str = "credential-status",
        meta_repo_name: str = "credential-status-metadata",
        repo_visibility: str = "public",
        api_url: str = "https://gitlab.com/api/v4",
        verify: bool = True,
        client: httpx.AsyncClient | None = None,
    ):
        """
        * repo_owner: path of the group owning both projects
        * repo_owner_id: numeric namespace id of that group, required to create the projects
        * client: preconfigured client, eg. for testing. Must use api_url as base_url
        """
        if not repo_owner or not repo_owner_id or not access_token:
            raise InvalidConfiguration("GitLab backend requires repository owner, owner id and access token")
        self.repo_owner = repo_owner
        self.repo_owner_id = repo_owner_id
        self.repo_name = repo_name
        self.meta_repo_name = meta_repo_name
        self.repo_visibility = repo_visibility
        self._client = client or httpx.AsyncClient(base_url=api_url, verify=verify, headers=_create_headers(access_token))
        self._read_versions: dict[tuple[str, str], str] = {}
        """Last commit id per (project, path) of the last read"""

    @property
    def status_url(self) -> str:
        return f"https://{self.repo_owner.lower()}.gitlab.io/{self.repo_name}"

    def _project_path(self, repo: str) -> str:
        return f"/projects/{urllib.parse.quote(f'{self.repo_owner}/{repo}', safe='')}"

    def _file_path(self, repo: str, path: str) -> str:
        return f"{self._project_path(repo)}/repository/files/{urllib.parse.quote(path, safe='')}"

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        return await http.send(self._client, _SERVICE, method, url, **kwargs)

    async def _project_exists(self, repo: str) -> bool:
        response = await self._send("GET", self._project_path(repo), allowed_status=(404,))
        return response.status_code != 404

    async def location_exists(self) -> bool:
        return await self._project_exists(self.repo_name) and await self._project_exists(self.meta_repo_name)

    async def create_location(self) -> None:
        for repo, visibility in ((self.repo_name, self.repo_visibility), (self.meta_repo_name, "private")):
            if await self._project_exists(repo):
                continue
            _logger.info(f"Creating {visibility} project {self.repo_owner}/{repo}")
            await self._send(
                "POST",
                "/projects",
                json={"name": repo, "path": repo, "namespace_id": self.repo_owner_id, "visibility": visibility},
            )

    async def _read_file(self, repo: str, path: str) -> dict | list:
        """Returns the parsed json content and remembers the last commit id of the file"""
        response = await self._send("GET", self._file_path(repo, path), params={"ref": _BRANCH})
        body = response.json()
        data = http.decode_content(body["content"])
        self._read_versions[(repo, path)] = body["last_commit_id"]
        return data

    async def _create_file(self, repo: str, path: str, content: str, message: str) -> None:
        body = {"branch": _BRANCH, "content": content, "commit_message": message}
        await self._send("POST", self._file_path(repo, path), json=body)

    async def _update_file(self, repo: str, path: str, data: dict | list, message: str) -> None:
        if (repo, path) not in self._read_versions:
            await self._read_file(repo, path)
        last_commit_id = self._read_versions.pop((repo, path))
        body = {
            "branch": _BRANCH,
            "content": http.encode_content(data),
            "encoding": "base64",
            "commit_message": message,
            "last_commit_id": last_commit_id,
        }
        await self._send("PUT", self._file_path(repo, path), json=body)

    async def _create_json_file(self, repo: str, path: str, data: dict | list, message: str) -> None:
        body = {"branch": _BRANCH, "content": http.encode_content(data), "encoding": "base64", "commit_message": message}
        await self._send("POST", self._file_path(repo, path), json=body)

    async def read_config(self) -> StatusConfig:
        data = await self._read_file(self.meta_repo_name, CONFIG_FILE)
        return StatusConfig.model_validate(data)

    async def create_config(self, config: StatusConfig) -> None:
        await self._create_json_file(self.meta_repo_name, CONFIG_FILE, dump_document(config), "Create status config")

    async def update_config(self, config: StatusConfig) -> None:
        await self._update_file(self.meta_repo_name, CONFIG_FILE, dump_document(config), "Update status config")

    async def read_log(self) -> StatusLog:
        data = await self._read_file(self.meta_repo_name, LOG_FILE)
        return StatusLog.model_validate(data)

    async def create_log(self, log: StatusLog) -> None:
        await self._create_json_file(self.meta_repo_name, LOG_FILE, dump_document(log), "Create status log")

    async def update_log(self, log: StatusLog) -> None:
        await self._update_file(self.meta_repo_name, LOG_FILE, dump_document(log), "Update status log")

    async def read_status(self, status_list_id: str) -> StatusCredential:
        data = await self._read_file(self.repo_name, status_list_id)
        return StatusCredential.model_validate(data)

    async def create_status(self, status_list_id: str, status_credential: StatusCredential) -> None:
        await self._create_json_file(self.repo_name, status_list_id, dump_document(status_credential), f"Create status list {status_list_id}")

    async def update_status(self, status_list_id: str, status_credential: StatusCredential) -> None:
        await self._update_file(self.repo_name, status_list_id, dump_document(status_credential), f"Update status list {status_list_id}")

    async def has_authority(self, access_token: str | None) -> bool:
        """The token has to grant at least maintainer access to the status project"""
        if not access_token:
            return False
        response = await self._send(
            "GET",
            self._project_path(self.repo_name),
            headers=_create_headers(access_token),
            allowed_status=(401, 403, 404),
        )
        if response.is_error:
            return False
        permissions = response.json().get("permissions") or {}
        access_levels = [(permissions.get(access) or {}).get("access_level", 0) for access in ("project_access", "group_access")]
        return max(access_levels) >= MAINTAINER_ACCESS_LEVEL

    async def _pages_pipeline_exists(self) -> bool:
        response = await self._send("GET", self._file_path(self.repo_name, _PAGES_FILE), params={"ref": _BRANCH}, allowed_status=(404,))
        return response.status_code != 404

    async def publish(self) -> None:
        """Commits the pages pipeline, GitLab deploys the status project on every following commit"""
        if await self._pages_pipeline_exists():
            _logger.info(f"GitLab Pages pipeline already present in {self.repo_owner}/{self.repo_name}")
            return
        await self._create_file(self.repo_name, _PAGES_FILE, _PAGES_PIPELINE, "Add pages pipeline")
        _logger.info(f"Added GitLab Pages pipeline to {self.repo_owner}/{self.repo_name}, serving {self.status_url}")

    async def reconcile(self) -> None:
        if not await self._pages_pipeline_exists():
            _logger.warning(f"GitLab Pages pipeline missing in {self.repo_owner}/{self.repo_name}, adding")
            await self.publish()

    async def close(self) -> None:
        await self._client.aclose()
