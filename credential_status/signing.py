# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

"""
DID resolution and signing of credentials

did:key https://w3c-ccg.github.io/did-method-key/
did:web https://w3c-ccg.github.io/did-method-web/
JsonWebSignature2020 https://w3c-ccg.github.io/lds-jws2020/

The proof uses the JsonWebSignature2020 layout, but the detached JWS is
computed over the sorted key JSON of the document with the proof options
(`canonical_json`), not over the RDF dataset canonicalization the suite
prescribes. Proofs are verified with `verify_credential`, generic JSON-LD
verifiers reject them.
"""

import urllib.parse
from enum import Enum
from functools import cache

from pydantic import BaseModel

from common.key_configuration import KeyConfiguration
from common.parsing import canonical_json, get_date_string

from credential_status.errors import SigningFailure

PROOF_TYPE = "JsonWebSignature2020"
PROOF_PURPOSE = "assertionMethod"


class DidMethod(str, Enum):
    key = "key"
    web = "web"


class SigningMaterial(BaseModel):
    issuer_did: str
    verification_method: str


@cache
def get_key_configuration(did_seed: str) -> KeyConfiguration:
    try:
        return KeyConfiguration.from_seed(did_seed)
    except ValueError as e:
        raise SigningFailure(f"Invalid DID seed: {e}") from e


def did_web_from_url(did_web_url: str) -> str:
    """
    https://example.com -> did:web:example.com
    https://example.com:3000/user/alice -> did:web:example.com%3A3000:user:alice
    """
    parsed = urllib.parse.urlparse(did_web_url or "")
    if not parsed.netloc:
        raise SigningFailure(f"did:web requires an absolute url, got {did_web_url!r}")
    segments = [urllib.parse.quote(segment) for segment in parsed.path.split("/") if segment]
    return ":".join(["did:web", parsed.netloc.replace(":", "%3A"), *segments])


def resolve_signing_material(did_method: DidMethod | str, did_seed: str, did_web_url: str | None = None) -> SigningMaterial:
    """Returns the issuer DID and the verification method used for signing"""
    try:
        method = DidMethod(did_method)
    except ValueError as e:
        raise SigningFailure(f"Unsupported DID method {did_method!r}") from e
    key = get_key_configuration(did_seed)
    if method is DidMethod.key:
        issuer_did = f"did:key:{key.fingerprint}"
    else:
        issuer_did = did_web_from_url(did_web_url)
    return SigningMaterial(issuer_did=issuer_did, verification_method=f"{issuer_did}#{key.fingerprint}")


def _signing_input(credential: dict, proof_options: dict) -> bytes:
    """The document together with the proof options, without the signature value"""
    return canonical_json({**credential, "proof": proof_options})


def sign_credential(credential: dict, did_method: DidMethod | str, did_seed: str, did_web_url: str | None = None) -> dict:
    """
    Returns a copy of the credential with a JsonWebSignature2020 proof.
    An existing proof is replaced.
    """
    material = resolve_signing_material(did_method, did_seed, did_web_url)
    key = get_key_configuration(did_seed)
    unsigned = {k: v for k, v in credential.items() if k != "proof"}
    proof = {
        "type": PROOF_TYPE,
        "created": get_date_string(),
        "verificationMethod": material.verification_method,
        "proofPurpose": PROOF_PURPOSE,
    }
    try:
        proof["jws"] = key.encode_detached_jws(_signing_input(unsigned, proof))
    except Exception as e:
        raise SigningFailure(f"Failed to sign credential {credential.get('id')}: {e}") from e
    return {**unsigned, "proof": proof}


def verify_credential(credential: dict, key: KeyConfiguration) -> bool:
    """Checks the proof added by sign_credential"""
    proof = dict(credential.get("proof") or {})
    detached_jws = proof.pop("jws", None)
    if not detached_jws:
        return False
    unsigned = {k: v for k, v in credential.items() if k != "proof"}
    return key.verify_detached_jws(detached_jws, _signing_input(unsigned, proof))
