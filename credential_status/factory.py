# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

"""
Creation of a ready to use CredentialStatusManager.

On first start the storage location is bootstrapped with an empty config, log
and status credential. On later starts the deployment is reconciled, eg. the
publishing of the status repository is restored.
"""

import logging

from credential_status.backend import StorageBackend, create_backend
from credential_status.config import CredentialStatusConfig
from credential_status.errors import InvalidConfiguration
from credential_status.logging import StatusOperationsLogEntry
from credential_status.manager import CredentialStatusManager
from credential_status.models import StatusConfig, StatusLog
from credential_status.signing import DidMethod

_logger = logging.getLogger(__name__)


def _validate_config(config: CredentialStatusConfig) -> None:
    try:
        did_method = DidMethod(config.did_method)
    except ValueError:
        raise InvalidConfiguration(f'"did_method" must be one of the following values: {", ".join(repr(m.value) for m in DidMethod)}.')
    if not config.did_seed:
        raise InvalidConfiguration("DID seed is required")
    if did_method is DidMethod.web and not config.did_web_url:
        raise InvalidConfiguration("DID web url is required for did:web")
    if config.status_list_size <= 0:
        raise InvalidConfiguration(f"Status list size must be positive, got {config.status_list_size}")


async def _bootstrap(manager: CredentialStatusManager) -> None:
    """Creates config, empty log and the first status list in a new location"""
    backend = manager.backend
    material = manager.get_signing_material()
    status_list_id = manager.generate_status_list_id()
    # Signed before anything is created, a signing failure leaves the location untouched
    status_credential = manager.compose_status_credential(material.issuer_did, manager.get_status_list_url(status_list_id))

    await backend.create_location()
    await backend.create_config(StatusConfig(credentialsIssued=0, latestList=status_list_id))
    await backend.create_log(StatusLog())
    await backend.create_status(status_list_id, status_credential)
    await backend.publish()

    _logger.info(
        StatusOperationsLogEntry(
            message=f"Bootstrapped credential status location {backend.status_url}",
            status=StatusOperationsLogEntry.Status.success,
            operation=StatusOperationsLogEntry.Operation.setup,
            step=StatusOperationsLogEntry.Step.setup_bootstrap,
            status_list_id=status_list_id,
        )
    )


async def _reconcile(manager: CredentialStatusManager) -> None:
    await manager.backend.reconcile()
    _logger.info(
        StatusOperationsLogEntry(
            message=f"Reconciled credential status location {manager.backend.status_url}",
            status=StatusOperationsLogEntry.Status.success,
            operation=StatusOperationsLogEntry.Operation.setup,
            step=StatusOperationsLogEntry.Step.setup_reconcile,
        )
    )


async def create_status_manager(config: CredentialStatusConfig, backend: StorageBackend | None = None) -> CredentialStatusManager:
    """
    Creates the manager for the configured storage service.
    A backend can be given to bypass the service selection, eg. for testing.
    """
    _validate_config(config)
    backend = backend or create_backend(config)
    manager = CredentialStatusManager(
        backend=backend,
        did_method=config.did_method,
        did_seed=config.did_seed,
        did_web_url=config.did_web_url,
        sign_user_credential=config.sign_user_credential,
        sign_status_credential=config.sign_status_credential,
        list_size=config.status_list_size,
    )
    # Fails on an unusable seed before the location is touched
    manager.get_signing_material()

    if await backend.location_exists():
        await _reconcile(manager)
    else:
        await _bootstrap(manager)
    return manager
