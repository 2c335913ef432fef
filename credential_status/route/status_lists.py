# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

import fastapi

from common.model.exception import ErrorResponse

from credential_status import dependencies

TAG = "Status List"

router = fastapi.APIRouter(prefix="/status-lists", tags=[TAG])


@router.get("/{status_list_id}", responses={502: {"model": ErrorResponse}})
async def get_status_list(status_list_id: str, manager: dependencies.inject) -> dict:
    """
    Current StatusList2021Credential of the list.
    Served for the memory service, the hosting services publish the lists themselves.
    """
    status_credential = await manager.read_status_credential(status_list_id)
    return status_credential.to_document()
