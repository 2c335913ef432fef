# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

from typing import Annotated

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader

from credential_status.manager import CredentialStatusManager


def get_status_manager(request: Request) -> CredentialStatusManager:
    """Manager created by the lifespan of the app"""
    return request.app.state.status_manager


inject = Annotated[CredentialStatusManager, Depends(get_status_manager)]


async def require_access_token(
    manager: inject,
    access_token: str = Security(APIKeyHeader(name="x-access-token", auto_error=False)),
) -> None:
    if not await manager.has_authority(access_token):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or missing access token")
