# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

"""
Credential Status Manager
Using Specifications

StatusList2021
https://www.w3.org/TR/2023/WD-vc-status-list-20230427/

W3C Verifiable Credential
https://www.w3.org/TR/vc-data-model/

JsonWebSignature2020
https://w3c-ccg.github.io/lds-jws2020/
"""

import contextlib

# FastAPI
from asgi_correlation_id import CorrelationIdMiddleware

from common.fastapi_extensions import ExtendedFastAPI

from credential_status.exception_handler import configure_exception_handlers
from credential_status.factory import create_status_manager
import credential_status.route.credentials as credentials
import credential_status.route.status_lists as status_lists
import credential_status.route.health as health
import credential_status.config as conf


@contextlib.asynccontextmanager
async def status_manager_lifespan(app: ExtendedFastAPI):
    """Bootstraps or reconciles the storage location before the first request"""
    app.state.status_manager = await create_status_manager(app.config_instance)
    try:
        yield
    finally:
        await app.state.status_manager.close()


app = ExtendedFastAPI(
    conf.CredentialStatusConfig,
    lifespan_functions=[status_manager_lifespan],
)

app.include_router(credentials.router)
app.include_router(status_lists.router)
app.include_router(health.router)

configure_exception_handlers(app)

app.add_middleware(
    CorrelationIdMiddleware,
)
