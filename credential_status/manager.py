# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

"""
Credential status manager
StatusList2021 https://www.w3.org/TR/2023/WD-vc-status-list-20230427/

Keeps three documents of the storage backend consistent:
* config - counter of slots used in the latest status list
* log - every allocation and status change, the latest entry of a credential is its truth
* status credential - one bitstring per status list, bit i set means the credential at index i is revoked

Indices are handed out starting at 1, index 0 of a list is never used. The
bitstring therefore holds list_size + 1 positions.

All mutations go through `allocate_status` and `update_status`, which are
serialized by a lock per manager instance.
"""

import copy
import uuid
import string
import logging
import secrets

from common import status_list as sl
from common.parsing import get_date_string

from credential_status.backend.base import StorageBackend
from credential_status.errors import CredentialStatusError, InvalidTargetState, UnknownCredentialId, UnsupportedCredentialFormat
from credential_status.lock import ManagerLock
from credential_status.logging import StatusOperationsLogEntry
from credential_status.models import (
    CREDENTIAL_STATUS_LIST_SIZE,
    DEFAULT_STATUS_PURPOSE,
    CredentialState,
    CredentialStatusClaim,
    StatusConfig,
    StatusCredential,
    StatusLogEntry,
)
from credential_status.signing import DidMethod, SigningMaterial, resolve_signing_material, sign_credential

_logger = logging.getLogger(__name__)

_STATUS_LIST_ID_ALPHABET = string.ascii_uppercase + string.digits
_STATUS_LIST_ID_LENGTH = 10


class CredentialStatusManager:
    def __init__(
        self,
        backend: StorageBackend,
        did_method: DidMethod | str,
        did_seed: str,
        did_web_url: str | None = None,
        sign_user_credential: bool = False,
        sign_status_credential: bool = False,
        list_size: int = CREDENTIAL_STATUS_LIST_SIZE,
    ):
        self.backend = backend
        self.did_method = did_method
        self.did_seed = did_seed
        self.did_web_url = did_web_url
        self.sign_user_credential = sign_user_credential
        self.sign_status_credential = sign_status_credential
        self.list_size = list_size
        self._lock = ManagerLock(f"credential-status {backend.status_url}")

    @staticmethod
    def generate_status_list_id() -> str:
        return "".join(secrets.choice(_STATUS_LIST_ID_ALPHABET) for _ in range(_STATUS_LIST_ID_LENGTH))

    def get_status_list_url(self, status_list_id: str) -> str:
        return f"{self.backend.status_url}/{status_list_id}"

    def get_signing_material(self) -> SigningMaterial:
        return resolve_signing_material(self.did_method, self.did_seed, self.did_web_url)

    def _sign(self, document: dict) -> dict:
        return sign_credential(document, self.did_method, self.did_seed, self.did_web_url)

    def compose_status_credential(self, issuer_did: str, credential_id: str, status_list: sl.StatusList2021 | None = None) -> StatusCredential:
        """
        Creates the StatusList2021Credential, signed if configured.
        Without a status list an empty one is created.
        """
        if status_list is None:
            status_list = sl.create_empty(self.list_size + 1)
        document = sl.build_status_list_credential(credential_id, status_list, DEFAULT_STATUS_PURPOSE)
        document["issuer"] = issuer_did
        document["issuanceDate"] = get_date_string()
        if self.sign_status_credential:
            document = self._sign(document)
        return StatusCredential.model_validate(document)

    ##############
    # Allocation #
    ##############

    async def allocate_status(self, credential: dict) -> dict:
        """
        Returns a copy of the credential with the credentialStatus of its slot.
        A credential without id gets a generated one. A credential already tracked
        in the log keeps its slot; the allocation is logged in any case.
        """
        if not isinstance(credential, dict):
            raise UnsupportedCredentialFormat("This library does not support compact JWT credentials.")
        async with self._lock:
            try:
                return await self._allocate_status(credential)
            except CredentialStatusError as e:
                _log_failure(StatusOperationsLogEntry.Operation.allocation, StatusOperationsLogEntry.Step.allocation_abort, e, credential.get("id"))
                raise

    async def _allocate_status(self, credential: dict) -> dict:
        credential = copy.deepcopy(credential)
        if not credential.get("id"):
            # Collision with an id already in the log is not checked
            credential["id"] = f"urn:uuid:{uuid.uuid4()}"
        credential_id = credential["id"]

        log = await self.backend.read_log()
        material = self.get_signing_material()

        config: StatusConfig | None = None
        new_status_credential: StatusCredential | None = None
        log_entry = log.find_latest(credential_id)
        if log_entry:
            status_list_id, status_list_index = log_entry.statusListId, log_entry.statusListIndex
            step = StatusOperationsLogEntry.Step.allocation_reuse
        else:
            config = await self.backend.read_config()
            step = StatusOperationsLogEntry.Step.allocation_reserve
            if config.credentialsIssued >= self.list_size:
                config = StatusConfig(credentialsIssued=0, latestList=self.generate_status_list_id())
                new_status_credential = self.compose_status_credential(material.issuer_did, self.get_status_list_url(config.latestList))
                step = StatusOperationsLogEntry.Step.allocation_rollover
            config.credentialsIssued += 1
            status_list_id, status_list_index = config.latestList, config.credentialsIssued

        claim = CredentialStatusClaim.compose(self.backend.status_url, status_list_id, status_list_index)
        credential_with_status = _embed_credential_status(credential, claim)
        if self.sign_user_credential:
            credential_with_status = self._sign(credential_with_status)

        # Nothing is written before all signatures are created
        if config:
            await self.backend.update_config(config)
        if new_status_credential:
            await self.backend.create_status(status_list_id, new_status_credential)
        log.append(
            StatusLogEntry(
                timestamp=get_date_string(),
                credentialId=credential_id,
                credentialIssuer=material.issuer_did,
                credentialSubject=_subject_id(credential),
                credentialState=CredentialState.active,
                verificationMethod=material.verification_method,
                statusListId=status_list_id,
                statusListIndex=status_list_index,
            )
        )
        await self.backend.update_log(log)

        _logger.info(
            StatusOperationsLogEntry(
                message="Allocated credential status",
                status=StatusOperationsLogEntry.Status.success,
                operation=StatusOperationsLogEntry.Operation.allocation,
                step=step,
                credential_id=credential_id,
                status_list_id=status_list_id,
                status_list_index=status_list_index,
            )
        )
        return credential_with_status

    ##########
    # Update #
    ##########

    async def update_status(self, credential_id: str, credential_status: CredentialState | str) -> StatusCredential:
        """
        Sets (revoked) or clears (active) the bit of the credential and returns the new status credential
        """
        try:
            state = CredentialState(credential_status)
        except ValueError:
            allowed = ", ".join(f"'{s.value}'" for s in CredentialState)
            raise InvalidTargetState(f'"credentialStatus" must be one of the following values: {allowed}.')
        async with self._lock:
            try:
                return await self._update_status(credential_id, state)
            except CredentialStatusError as e:
                _log_failure(StatusOperationsLogEntry.Operation.update, StatusOperationsLogEntry.Step.update_abort, e, credential_id)
                raise

    async def _update_status(self, credential_id: str, state: CredentialState) -> StatusCredential:
        log = await self.backend.read_log()
        log_entry = log.find_latest(credential_id)
        if not log_entry:
            raise UnknownCredentialId(credential_id)

        material = self.get_signing_material()
        status_credential = await self.backend.read_status(log_entry.statusListId)
        status_list = sl.from_string(status_credential.credentialSubject.encodedList)
        # revoked credentials are represented as 1 bit, active ones as 0 bit
        status_list.set_bit(log_entry.statusListIndex, state is CredentialState.revoked)
        new_status_credential = self.compose_status_credential(material.issuer_did, status_credential.id, status_list)

        await self.backend.update_status(log_entry.statusListId, new_status_credential)
        log.append(log_entry.model_copy(update={"timestamp": get_date_string(), "credentialState": state}))
        await self.backend.update_log(log)

        _logger.info(
            StatusOperationsLogEntry(
                message="Updated credential status",
                status=StatusOperationsLogEntry.Status.success,
                operation=StatusOperationsLogEntry.Operation.update,
                step=StatusOperationsLogEntry.Step.update_revoke if state is CredentialState.revoked else StatusOperationsLogEntry.Step.update_reactivate,
                credential_id=credential_id,
                status_list_id=log_entry.statusListId,
                status_list_index=log_entry.statusListIndex,
            )
        )
        return new_status_credential

    #########
    # Reads #
    #########

    async def check_status(self, credential_id: str) -> StatusLogEntry:
        """Latest log entry of the credential"""
        log = await self.backend.read_log()
        log_entry = log.find_latest(credential_id)
        if not log_entry:
            raise UnknownCredentialId(credential_id)
        return log_entry

    async def read_status_credential(self, status_list_id: str) -> StatusCredential:
        return await self.backend.read_status(status_list_id)

    async def has_authority(self, access_token: str | None) -> bool:
        return await self.backend.has_authority(access_token)

    async def verify_consistency(self) -> bool:
        """
        Checks whether config, log and latest status credential fit together.
        Any failure, including failing to read a document, results in False.

        Only log entries of the latest list are counted against credentialsIssued,
        since the counter restarts with every new list.
        """
        try:
            config = await self.backend.read_config()
            log = await self.backend.read_log()
            status_credential = await self.backend.read_status(config.latestList)

            subject = status_credential.credentialSubject
            checks = {
                "status list id": status_credential.id.endswith(config.latestList),
                "status list type": sl.STATUS_LIST_CREDENTIAL_TYPE in status_credential.type,
                "status list subject id": subject.id.startswith(self.get_status_list_url(config.latestList)),
                "status list subject type": subject.type == sl.STATUS_LIST_SUBJECT_TYPE,
                "status purpose": subject.statusPurpose == DEFAULT_STATUS_PURPOSE,
                "log entries": len(log.credential_ids(config.latestList)) == config.credentialsIssued,
            }
        except Exception:
            _logger.exception("Unable to verify the status documents")
            return False

        failed = [name for name, passed in checks.items() if not passed]
        if failed:
            _logger.warning(f"Status documents are inconsistent, failed checks: {', '.join(failed)}")
            return False
        return True

    async def close(self) -> None:
        await self.backend.close()


def _log_failure(
    operation: StatusOperationsLogEntry.Operation,
    step: StatusOperationsLogEntry.Step,
    error: CredentialStatusError,
    credential_id: str | None,
) -> None:
    _logger.info(
        StatusOperationsLogEntry(
            message=error.detail,
            status=StatusOperationsLogEntry.Status.error,
            operation=operation,
            step=step,
            error_code=error.error,
            credential_id=credential_id,
        )
    )


def _embed_credential_status(credential: dict, claim: CredentialStatusClaim) -> dict:
    context = credential.get("@context", [])
    if isinstance(context, str):
        context = [context]
    if sl.STATUS_LIST_CONTEXT_V1 not in context:
        context = [*context, sl.STATUS_LIST_CONTEXT_V1]
    return {**credential, "@context": context, "credentialStatus": claim.model_dump()}


def _subject_id(credential: dict) -> str | None:
    subject = credential.get("credentialSubject")
    if isinstance(subject, dict):
        return subject.get("id")
    return None
