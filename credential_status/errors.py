# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

"""
Errors raised by the credential status manager.
Every error carries a human readable `detail`; `error` is the machine readable name.
"""


class CredentialStatusError(Exception):
    error: str = "credential_status_error"

    def __init__(self, detail: str, *args):
        super().__init__(detail, *args)
        self.detail = detail


class UnsupportedCredentialFormat(CredentialStatusError):
    """Credential was given as opaque token (eg. compact JWT) instead of a json document"""

    error = "unsupported_credential_format"


class UnknownCredentialId(CredentialStatusError):
    """No status log entry exists for the credential id"""

    error = "unknown_credential_id"

    def __init__(self, credential_id: str):
        super().__init__(f'Unable to find credential with given ID "{credential_id}"')
        self.credential_id = credential_id


class InvalidTargetState(CredentialStatusError):
    """Requested credential state is not one of the known states"""

    error = "invalid_target_state"


class BackendFailure(CredentialStatusError):
    """Reading or writing a document in the storage backend failed"""

    error = "backend_failure"


class SigningFailure(CredentialStatusError):
    """DID resolution or signing failed"""

    error = "signing_failure"


class InvalidConfiguration(CredentialStatusError):
    """Configuration can not be used to create a manager"""

    error = "invalid_configuration"
