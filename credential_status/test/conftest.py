# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

"""
Fixtures for the credential status manager tests, running against the memory backend
"""

import pytest
import pytest_asyncio

from common import key_configuration as key

from credential_status.backend.memory import MemoryStorageBackend
from credential_status.config import CredentialStatusConfig
from credential_status.factory import create_status_manager
from credential_status.manager import CredentialStatusManager

DID_SEED = "9d61b19deffd5a60ba844af492ec2cc44449c5697b326919703bac031cae7f60"
ACCESS_TOKEN = "test-access-token"
EXTERNAL_URL = "https://status.example.com"
STATUS_URL = f"{EXTERNAL_URL}/status-lists"


def t_config() -> CredentialStatusConfig:
    """
    Configuration independent of the environment of the test run
    """
    config = CredentialStatusConfig()
    config.service = "memory"
    config.external_url = EXTERNAL_URL
    config.access_token = ACCESS_TOKEN
    config.did_method = "key"
    config.did_seed = DID_SEED
    config.did_web_url = None
    config.sign_user_credential = False
    config.sign_status_credential = False
    config.status_list_size = 100000
    config.enable_splunk_log = False
    return config


@pytest.fixture()
def config() -> CredentialStatusConfig:
    return t_config()


@pytest.fixture()
def did_seed() -> str:
    return DID_SEED


@pytest.fixture()
def access_token() -> str:
    return ACCESS_TOKEN


@pytest.fixture()
def key_conf() -> key.KeyConfiguration:
    return key.KeyConfiguration.from_seed(DID_SEED)


@pytest.fixture()
def backend() -> MemoryStorageBackend:
    return MemoryStorageBackend(status_url=STATUS_URL, access_token=ACCESS_TOKEN)


@pytest_asyncio.fixture()
async def manager(config: CredentialStatusConfig, backend: MemoryStorageBackend) -> CredentialStatusManager:
    """Manager on a freshly bootstrapped memory backend"""
    return await create_status_manager(config, backend)
