# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

"""
Status management of issued credentials, restricted to bearers of an access token
the storage backend grants authority.
"""

from typing import Annotated

import fastapi
from fastapi import Body

from common.model.exception import ErrorResponse

from credential_status import dependencies
from credential_status.models import StatusLogEntry, UpdateStatusRequest

TAG = "Credential Status"

router = fastapi.APIRouter(
    prefix="/credentials",
    dependencies=[fastapi.Security(dependencies.require_access_token)],
    tags=[TAG],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)


@router.post("/status/allocate")
async def allocate_status(credential: Annotated[dict | str, Body()], manager: dependencies.inject) -> dict:
    """
    Reserves a slot in the latest status list for the credential and returns the
    credential with the matching credentialStatus.
    Credentials without id get a generated urn:uuid id.
    Compact JWT credentials are not supported.
    """
    return await manager.allocate_status(credential)


@router.post("/status")
async def update_status(status_request: UpdateStatusRequest, manager: dependencies.inject) -> dict:
    """
    Revokes or reactivates the credential, returns the updated status list credential
    """
    status_credential = await manager.update_status(status_request.credentialId, status_request.credentialStatus)
    return status_credential.to_document()


@router.get("/{credential_id:path}/status")
async def check_status(credential_id: str, manager: dependencies.inject) -> StatusLogEntry:
    return await manager.check_status(credential_id)
