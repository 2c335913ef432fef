# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

import pytest

from common import key_configuration as key

HEX_SEED = "9d61b19deffd5a60ba844af492ec2cc44449c5697b326919703bac031cae7f60"
"""RFC 8032 test vector 1"""
PUBLIC_KEY_HEX = "d75a980182b10ab7d54bfed3c964073a0ee172f3daa62325af021a68f707511a"


def test_hex_seed():
    key_conf = key.KeyConfiguration.from_seed(HEX_SEED)
    assert key_conf.public_key_bytes.hex() == PUBLIC_KEY_HEX
    assert key_conf.fingerprint.startswith("z6Mk"), "Ed25519 did:key fingerprints start with z6Mk"


def test_multibase_seed():
    multibase_seed = key.encode_seed(bytes.fromhex(HEX_SEED))
    assert multibase_seed.startswith("z")
    assert key.decode_seed(multibase_seed) == bytes.fromhex(HEX_SEED)
    assert key.KeyConfiguration.from_seed(multibase_seed).fingerprint == key.KeyConfiguration.from_seed(HEX_SEED).fingerprint


@pytest.mark.parametrize("seed", ["", "abc", "z" + "1" * 10, HEX_SEED[:-2]])
def test_invalid_seed(seed):
    with pytest.raises(ValueError):
        key.decode_seed(seed)


def test_detached_jws():
    key_conf = key.KeyConfiguration.from_seed(HEX_SEED)
    payload = b'{"id":"urn:uuid:1234"}'
    detached = key_conf.encode_detached_jws(payload)
    protected, body, signature = detached.split(".")
    assert body == "", "Payload should be detached"
    assert protected and signature
    assert key_conf.verify_detached_jws(detached, payload)
    assert not key_conf.verify_detached_jws(detached, b'{"id":"urn:uuid:5678"}')
