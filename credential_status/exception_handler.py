# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.model.exception import ErrorResponse

from credential_status import errors

_logger = logging.getLogger(__name__)

_STATUS_CODES: dict[type[errors.CredentialStatusError], int] = {
    errors.UnsupportedCredentialFormat: status.HTTP_400_BAD_REQUEST,
    errors.UnknownCredentialId: status.HTTP_404_NOT_FOUND,
    errors.InvalidTargetState: 422,
    errors.BackendFailure: status.HTTP_502_BAD_GATEWAY,
}


def get_status_code(exc: errors.CredentialStatusError) -> int:
    for error_type, status_code in _STATUS_CODES.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def configure_exception_handlers(app: FastAPI) -> None:
    """
    Renders errors of the credential status manager as `ErrorResponse`.
    Failures of the service itself (backend, signing, configuration) are logged.
    """

    @app.exception_handler(errors.CredentialStatusError)
    async def credential_status_exception_handler(request: Request, exc: errors.CredentialStatusError):
        status_code = get_status_code(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            _logger.error(f"{exc.error} on {request.method} {request.url.path}: {exc.detail}")
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(error=exc.error, detail=exc.detail).model_dump(),
        )
