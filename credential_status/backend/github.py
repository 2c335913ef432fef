# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

"""
Backend storing the documents in two GitHub repositories
https://docs.github.com/en/rest

* status repository (public): one file per status list id, published with GitHub Pages
* metadata repository (private): config.json & log.json

Every read remembers the blob sha of the file. The next update of that file
sends this sha, GitHub rejects the write with 409 if the file was changed since
the read.

Files larger than 1 MB are returned without content by the contents api, their
content is fetched with the raw media type.
"""

import logging

import httpx

from credential_status.backend import http
from credential_status.backend.base import CONFIG_FILE, LOG_FILE, dump_document
from credential_status.errors import InvalidConfiguration
from credential_status.models import StatusConfig, StatusLog, StatusCredential

_logger = logging.getLogger(__name__)

_SERVICE = "GitHub"
_RAW_MEDIA_TYPE = "application/vnd.github.raw+json"


def _create_headers(access_token: str) -> dict:
    return {
        "Authorization": f"Bearer {access_token}",
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }


class GithubStorageBackend:
    def __init__(
        self,
        repo_owner: str,
        access_token: str,
        repo_name: str = "credential-status",
        meta_repo_name: str = "credential-status-metadata",
        repo_visibility: str = "public",
        api_url: str = "https://api.github.com",
        verify: bool = True,
        client: httpx.AsyncClient | None = None,
    ):
        """
        * repo_owner: organization owning both repositories
        * access_token: token with admin rights on the organization repositories
        * client: preconfigured client, eg. for testing. Must use api_url as base_url
        """
        if not repo_owner or not access_token:
            raise InvalidConfiguration("GitHub backend requires repository owner and access token")
        self.repo_owner = repo_owner
        self.repo_name = repo_name
        self.meta_repo_name = meta_repo_name
        self.repo_visibility = repo_visibility
        self._client = client or httpx.AsyncClient(base_url=api_url, verify=verify, headers=_create_headers(access_token))
        self._read_versions: dict[tuple[str, str], str] = {}
        """Blob sha per (repository, path) of the last read"""

    @property
    def status_url(self) -> str:
        return f"https://{self.repo_owner.lower()}.github.io/{self.repo_name}"

    def _repo_path(self, repo: str) -> str:
        return f"/repos/{self.repo_owner}/{repo}"

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        return await http.send(self._client, _SERVICE, method, url, **kwargs)

    async def _repo_exists(self, repo: str) -> bool:
        response = await self._send("GET", self._repo_path(repo), allowed_status=(404,))
        return response.status_code != 404

    async def location_exists(self) -> bool:
        return await self._repo_exists(self.repo_name) and await self._repo_exists(self.meta_repo_name)

    async def create_location(self) -> None:
        for repo, visibility in ((self.repo_name, self.repo_visibility), (self.meta_repo_name, "private")):
            if await self._repo_exists(repo):
                continue
            _logger.info(f"Creating {visibility} repository {self.repo_owner}/{repo}")
            await self._send(
                "POST",
                f"/orgs/{self.repo_owner}/repos",
                json={"name": repo, "visibility": visibility, "auto_init": True},
            )

    async def _read_file(self, repo: str, path: str) -> dict | list:
        """Returns the parsed json content and remembers the blob sha of the file"""
        url = f"{self._repo_path(repo)}/contents/{path}"
        body = (await self._send("GET", url)).json()
        if body.get("encoding") == "none" or not body.get("content"):
            # Files over 1 MB come without content
            raw = await self._send("GET", url, headers={"Accept": _RAW_MEDIA_TYPE})
            data = http.load_json(raw.content)
        else:
            data = http.decode_content(body["content"])
        self._read_versions[(repo, path)] = body["sha"]
        return data

    async def _write_file(self, repo: str, path: str, data: dict | list, message: str, sha: str | None = None) -> None:
        body = {"message": message, "content": http.encode_content(data)}
        if sha:
            body["sha"] = sha
        await self._send("PUT", f"{self._repo_path(repo)}/contents/{path}", json=body)

    async def _update_file(self, repo: str, path: str, data: dict | list, message: str) -> None:
        """Writes against the version of the last read, a file never read is read first"""
        if (repo, path) not in self._read_versions:
            await self._read_file(repo, path)
        sha = self._read_versions.pop((repo, path))
        await self._write_file(repo, path, data, message, sha)

    async def read_config(self) -> StatusConfig:
        data = await self._read_file(self.meta_repo_name, CONFIG_FILE)
        return StatusConfig.model_validate(data)

    async def create_config(self, config: StatusConfig) -> None:
        await self._write_file(self.meta_repo_name, CONFIG_FILE, dump_document(config), "Create status config")

    async def update_config(self, config: StatusConfig) -> None:
        await self._update_file(self.meta_repo_name, CONFIG_FILE, dump_document(config), "Update status config")

    async def read_log(self) -> StatusLog:
        data = await self._read_file(self.meta_repo_name, LOG_FILE)
        return StatusLog.model_validate(data)

    async def create_log(self, log: StatusLog) -> None:
        await self._write_file(self.meta_repo_name, LOG_FILE, dump_document(log), "Create status log")

    async def update_log(self, log: StatusLog) -> None:
        await self._update_file(self.meta_repo_name, LOG_FILE, dump_document(log), "Update status log")

    async def read_status(self, status_list_id: str) -> StatusCredential:
        data = await self._read_file(self.repo_name, status_list_id)
        return StatusCredential.model_validate(data)

    async def create_status(self, status_list_id: str, status_credential: StatusCredential) -> None:
        await self._write_file(self.repo_name, status_list_id, dump_document(status_credential), f"Create status list {status_list_id}")

    async def update_status(self, status_list_id: str, status_credential: StatusCredential) -> None:
        await self._update_file(self.repo_name, status_list_id, dump_document(status_credential), f"Update status list {status_list_id}")

    async def has_authority(self, access_token: str | None) -> bool:
        """The token has to grant admin permission on the status repository"""
        if not access_token:
            return False
        response = await self._send(
            "GET",
            self._repo_path(self.repo_name),
            headers=_create_headers(access_token),
            allowed_status=(401, 403, 404),
        )
        if response.is_error:
            return False
        return bool(response.json().get("permissions", {}).get("admin", False))

    async def publish(self) -> None:
        """Enables GitHub Pages on the default branch of the status repository"""
        repo = (await self._send("GET", self._repo_path(self.repo_name))).json()
        response = await self._send(
            "POST",
            f"{self._repo_path(self.repo_name)}/pages",
            json={"source": {"branch": repo["default_branch"], "path": "/"}},
            allowed_status=(409,),
        )
        if response.status_code == 409:
            _logger.info(f"GitHub Pages already enabled for {self.repo_owner}/{self.repo_name}")
        else:
            _logger.info(f"Enabled GitHub Pages for {self.repo_owner}/{self.repo_name} at {self.status_url}")

    async def reconcile(self) -> None:
        response = await self._send("GET", f"{self._repo_path(self.repo_name)}/pages", allowed_status=(404,))
        if response.status_code == 404:
            _logger.warning(f"GitHub Pages missing for {self.repo_owner}/{self.repo_name}, enabling")
            await self.publish()

    async def close(self) -> None:
        await self._client.aclose()
