# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

"""
Helpers shared by the backends storing documents as files in hosted git repositories
"""

import json
import base64

import httpx

import common.httpx_wrapper as httpxw

from credential_status.errors import BackendFailure


async def send(client: httpx.AsyncClient, service: str, method: str, url: str, allowed_status: tuple[int, ...] = (), **kwargs) -> httpx.Response:
    """
    Sends the request, converting transport errors and unexpected status codes into BackendFailure.
    Responses with a status in `allowed_status` are returned without raising.
    """
    try:
        response = await httpxw.request(client, method, url, **kwargs)
    except httpx.HTTPError as e:
        raise BackendFailure(f"{service} {method} {url} could not be sent: {e}") from e
    if response.status_code in allowed_status:
        return response
    if response.is_error:
        raise BackendFailure(f"{service} {method} {url} failed with status {response.status_code}: {response.text}")
    return response


def encode_content(data: dict | list) -> str:
    """File content as base64 of the indented json"""
    return base64.b64encode(json.dumps(data, indent=2).encode()).decode()


def load_json(data: bytes) -> dict | list:
    try:
        return json.loads(data)
    except ValueError as e:
        raise BackendFailure(f"File content is not valid json: {e}") from e


def decode_content(content: str) -> dict | list:
    """Inverse of encode_content. The hosting services wrap their base64 output over several lines"""
    try:
        data = base64.b64decode("".join(content.split()))
    except ValueError as e:
        raise BackendFailure(f"File content is not valid base64: {e}") from e
    return load_json(data)
