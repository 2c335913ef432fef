# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

"""
Collection for loading cryptographic keys from a secret seed and signing with them.

Keys are Ed25519, derived deterministically from a 32 byte seed so the same
seed always resolves to the same DID.
"""

import re

import base58
from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.hazmat.primitives import serialization
from jwcrypto import jwk, jws, common as jw_common

SEED_LENGTH = 32

_MULTIBASE_BASE58_BTC = "z"
_MULTIHASH_IDENTITY_HEADER = b"\x00\x20"
"""identity multihash (0x00) with a length of 32 bytes (0x20)"""
_MULTICODEC_ED25519_PUB_HEADER = b"\xed\x01"

_HEX_SEED = re.compile(r"^[0-9a-fA-F]{64}$")


def decode_seed(seed: str) -> bytes:
    """
    Decodes a secret key seed.
    Accepted formats:
    * 64 hex characters
    * multibase base58btc (z...) of an identity multihash holding 32 bytes
    Throws ValueError for anything else
    """
    if not seed:
        raise ValueError("Missing secret key seed")
    if _HEX_SEED.match(seed):
        return bytes.fromhex(seed)
    if seed.startswith(_MULTIBASE_BASE58_BTC):
        decoded = base58.b58decode(seed[1:])
        if decoded[:2] == _MULTIHASH_IDENTITY_HEADER and len(decoded) == SEED_LENGTH + 2:
            return decoded[2:]
        raise ValueError("Multibase seed must hold an identity multihash of 32 bytes")
    raise ValueError("Secret key seed must be 64 hex characters or a base58btc multibase value")


def encode_seed(seed: bytes) -> str:
    """Inverse of decode_seed, producing the multibase format"""
    if len(seed) != SEED_LENGTH:
        raise ValueError(f"Seed must be {SEED_LENGTH} bytes long")
    return _MULTIBASE_BASE58_BTC + base58.b58encode(_MULTIHASH_IDENTITY_HEADER + seed).decode()


class KeyConfiguration:
    """
    Holds the Ed25519 signing key pair
    """

    signing_algorithm: str = "EdDSA"

    @staticmethod
    def from_seed(seed: str) -> "KeyConfiguration":
        private_key = ed25519.Ed25519PrivateKey.from_private_bytes(decode_seed(seed))
        return KeyConfiguration(private_key)

    def __init__(self, private_key: ed25519.Ed25519PrivateKey):
        self._private_key = private_key
        self.private_jwk = jwk.JWK.from_pyca(private_key)
        self.public_jwk = jwk.JWK.from_pyca(private_key.public_key())

    @property
    def public_key_bytes(self) -> bytes:
        return self._private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

    @property
    def fingerprint(self) -> str:
        """
        Multibase encoded, multicodec prefixed public key as used by did:key
        https://w3c-ccg.github.io/did-method-key/#format
        """
        return _MULTIBASE_BASE58_BTC + base58.b58encode(_MULTICODEC_ED25519_PUB_HEADER + self.public_key_bytes).decode()

    def encode_detached_jws(self, payload: bytes, header: dict = None) -> str:
        """
        Signs the payload and returns the compact JWS with the payload part removed (<header>..<signature>)
        https://datatracker.ietf.org/doc/html/rfc7515#appendix-F
        """
        if not header:
            header = {}
        if 'alg' not in header:
            header['alg'] = self.signing_algorithm

        signer = jws.JWS(payload)
        signer.add_signature(key=self.private_jwk, protected=jw_common.json_encode(header))
        protected, _, signature = signer.serialize(compact=True).split(".")
        return f"{protected}..{signature}"

    def verify_detached_jws(self, detached_jws: str, payload: bytes) -> bool:
        """
        Verifies a detached JWS created by encode_detached_jws against the public key
        """
        protected, _, signature = detached_jws.split(".")
        verifier = jws.JWS()
        try:
            verifier.deserialize(f"{protected}.{jw_common.base64url_encode(payload)}.{signature}")
            verifier.verify(self.public_jwk)
        except jws.InvalidJWSSignature:
            return False
        return True
