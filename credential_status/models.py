# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

"""
Documents persisted by the credential status manager.

Field names follow the json documents as stored in the status repositories,
which is why they are camelCase.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, RootModel

CREDENTIAL_STATUS_LIST_SIZE = 100000
"""Number of credentials tracked in a single status list"""

CREDENTIAL_STATUS_TYPE = "StatusList2021Entry"

DEFAULT_STATUS_PURPOSE = "revocation"


class CredentialState(str, Enum):
    """States of a credential resulting from caller actions, tracked in the status log"""

    active = "active"
    revoked = "revoked"


class StatusConfig(BaseModel):
    """
    Singleton config document of a deployment
    * credentialsIssued: slots used in the latest list
    * latestList: id of the list new slots are taken from
    """

    credentialsIssued: int = Field(ge=0)
    latestList: str


class StatusLogEntry(BaseModel):
    """Immutable record of an allocation or state change"""

    timestamp: str
    credentialId: str
    credentialIssuer: str
    credentialSubject: Optional[str] = None
    credentialState: CredentialState
    verificationMethod: str
    statusListId: str
    statusListIndex: int


class StatusLog(RootModel[list[StatusLogEntry]]):
    """Append only log, oldest entry first"""

    root: list[StatusLogEntry] = Field(default_factory=list)

    def __iter__(self):
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def append(self, entry: StatusLogEntry) -> None:
        self.root.append(entry)

    def find_latest(self, credential_id: str) -> StatusLogEntry | None:
        """Most recent entry for the credential, None if the credential is not tracked"""
        return next((entry for entry in reversed(self.root) if entry.credentialId == credential_id), None)

    def credential_ids(self, status_list_id: str | None = None) -> set[str]:
        """Distinct credential ids, optionally only those tracked in the given list"""
        return {entry.credentialId for entry in self.root if status_list_id is None or entry.statusListId == status_list_id}


class StatusListSubject(BaseModel):
    model_config = ConfigDict(extra='allow')

    id: str
    type: str
    statusPurpose: str
    encodedList: str


class StatusCredential(BaseModel):
    """
    StatusList2021Credential
    https://www.w3.org/TR/2023/WD-vc-status-list-20230427/#statuslist2021credential
    Additional members (eg. proof) are kept as is.
    """

    model_config = ConfigDict(extra='allow', populate_by_name=True)

    context: list[str] = Field(alias="@context")
    id: str
    type: list[str]
    issuer: Optional[str | dict] = None
    issuanceDate: Optional[str] = None
    credentialSubject: StatusListSubject

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class CredentialStatusClaim(BaseModel):
    """
    StatusList2021Entry as embedded into the credentialStatus of an issued credential
    https://www.w3.org/TR/2023/WD-vc-status-list-20230427/#statuslist2021entry
    """

    id: str
    """
    URL of the entry: <statusListCredential>#<statusListIndex>
    """
    type: str = CREDENTIAL_STATUS_TYPE
    statusPurpose: str = DEFAULT_STATUS_PURPOSE
    statusListIndex: int
    """
    Bit position of the credential in the status list, starting at 1
    """
    statusListCredential: str
    """
    URL of the StatusList2021Credential
    """

    @staticmethod
    def compose(status_url: str, status_list_id: str, status_list_index: int, status_purpose: str = DEFAULT_STATUS_PURPOSE) -> "CredentialStatusClaim":
        status_list_credential = f"{status_url}/{status_list_id}"
        return CredentialStatusClaim(
            id=f"{status_list_credential}#{status_list_index}",
            statusPurpose=status_purpose,
            statusListIndex=status_list_index,
            statusListCredential=status_list_credential,
        )


class UpdateStatusRequest(BaseModel):
    """Request to move a credential into a new state"""

    credentialId: str
    credentialStatus: str
    """
    one of the CredentialState values. Kept as string so invalid states reach the manager
    """
