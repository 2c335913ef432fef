# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

from pydantic import BaseModel


class HTTPError(BaseModel):
    """
    General HTTPException raised
    """
    detail: str


class ErrorResponse(HTTPError):
    """
    Domain error rendered to the caller
    * error: Machine readable name of the error, eg. unknown_credential_id
    * detail: Human readable description
    """
    error: str
