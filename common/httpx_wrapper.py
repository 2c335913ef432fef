# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

"""Wrapper for httpx functions to add additional context"""

import logging

import httpx
from httpx import ConnectError

_logger = logging.getLogger(__name__)


async def request(client: httpx.AsyncClient, method: str, url: str, **kwargs) -> httpx.Response:
    """Wrapper for httpx.AsyncClient.request call, on error adds additional information to exception
    By default httpx.Connection error only provides '[Errno -2] Name or service not known'
    Throws httpx.ConnectError with method & URL on failure to get connection to the service
    """
    try:
        response = await client.request(method, url, **kwargs)
    except ConnectError as e:
        error_msg = f"Failed to {method} {url=} using {client.base_url=}"
        e.add_note(error_msg)
        raise
    _logger.debug(f"{method} {response.request.url} -> {response.status_code}")
    return response
