# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

import os
from typing import Annotated

from fastapi import Depends

import common.config as conf
from common.parsing import interpret_as_bool

from credential_status.models import CREDENTIAL_STATUS_LIST_SIZE


class CredentialStatusConfig(conf.Config):
    def __init__(self):
        super().__init__()
        self.app_name = os.getenv("APP_NAME", "Credential Status Manager")

        # Storage
        self.service = os.getenv("STATUS_SERVICE", "memory")
        """Hosting service of the status repositories: memory, github or gitlab"""
        self.repo_name = os.getenv("STATUS_REPO_NAME", "credential-status")
        """Public repository holding the status credentials"""
        self.meta_repo_name = os.getenv("STATUS_META_REPO_NAME", "credential-status-metadata")
        """Private repository holding config and log"""
        self.repo_owner = os.getenv("STATUS_REPO_OWNER")
        """Organization (github) or group (gitlab) owning both repositories"""
        self.repo_owner_id = os.getenv("STATUS_REPO_OWNER_ID")
        """Numeric namespace id of the group, gitlab only"""
        self.repo_visibility = os.getenv("STATUS_REPO_VISIBILITY", "public")
        self.access_token = os.getenv("STATUS_ACCESS_TOKEN")
        """Token used for the hosting api. For the memory service the token callers have to present"""
        self.api_url = os.getenv("STATUS_API_URL")
        """Overrides the default api url of the hosting service, eg. for self hosted gitlab"""
        self.status_list_size = int(os.getenv("STATUS_LIST_SIZE", CREDENTIAL_STATUS_LIST_SIZE))

        # Signing
        self.did_method = os.getenv("DID_METHOD", "key")
        """key or web"""
        self.did_seed = os.getenv("DID_SEED")
        """Secret seed of the signing key, 64 hex characters or multibase"""
        self.did_web_url = os.getenv("DID_WEB_URL")
        """Url the did:web is derived from, required for DID_METHOD=web"""
        self.sign_user_credential: bool = interpret_as_bool(os.environ.get("SIGN_USER_CREDENTIAL", "False"))
        self.sign_status_credential: bool = interpret_as_bool(os.environ.get("SIGN_STATUS_CREDENTIAL", "False"))

    def get_api_url(self, default: str) -> str:
        return (self.api_url or default).rstrip("/")


inject = Annotated[CredentialStatusConfig, Depends(CredentialStatusConfig)]
