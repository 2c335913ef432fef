# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

"""
Functions for Status List 2021
https://www.w3.org/TR/2023/WD-vc-status-list-20230427/
"""
import gzip
import base64

import bitarray

from common.parsing import add_padding, remove_padding

STATUS_LIST_CONTEXT_V1 = "https://w3id.org/vc/status-list/2021/v1"
CREDENTIALS_CONTEXT_V1 = "https://www.w3.org/2018/credentials/v1"

STATUS_LIST_CREDENTIAL_TYPE = "StatusList2021Credential"
STATUS_LIST_SUBJECT_TYPE = "StatusList2021"


def _from_bitarray_to_str(bit_data: bitarray.bitarray) -> str:
    """
    Converts a bitarray to StatusList2021 compatible b64 string
    """
    zipped = gzip.compress(bit_data.tobytes())
    encoded = base64.urlsafe_b64encode(zipped)
    return remove_padding(encoded.decode())


def _from_str_to_bitarray(encoded_data: str) -> bitarray.bitarray:
    """
    Converts the base64 encoded string to a bitarray
    """
    zipped = base64.urlsafe_b64decode(add_padding(encoded_data))
    unzipped = gzip.decompress(zipped)
    a = bitarray.bitarray()
    a.frombytes(unzipped)
    return a


def from_string(base64_encoded: str) -> "StatusList2021":
    a = _from_str_to_bitarray(base64_encoded)
    return StatusList2021(a)


def create_empty(size: int) -> "StatusList2021":
    if size <= 0:
        raise ValueError(f"Status list size must be positive, got {size}")
    a = bitarray.bitarray(size)
    a.setall(0)
    return StatusList2021(a)


class StatusList2021:
    """
    Bitstring where the bit at position i holds the status of the credential with statusListIndex i.
    Index 0 is the left most bit of the first byte.
    """

    def __init__(self, data: bitarray.bitarray):
        self.data = data

    def __str__(self) -> str:
        return self.pack()

    def __len__(self) -> int:
        return len(self.data)

    def set_bit(self, index: int, bit_value: bool = True):
        """
        Sets the bit at the index to the given bit_value (True = 1, False = 0)
        """
        self._check_index(index)
        self.data[index] = int(bit_value)

    def get_bit(self, index: int) -> bool:
        self._check_index(index)
        return bool(self.data[index])

    def set_indices(self) -> list[int]:
        """Positions of all bits which are set"""
        return list(self.data.search(bitarray.bitarray("1")))

    def pack(self) -> str:
        """
        Create the zipped & url-safe base64 encoded
        """
        return _from_bitarray_to_str(self.data)

    def _check_index(self, index: int):
        if not 0 <= index < len(self.data):
            raise IndexError(f"Index {index} is outside of status list with length {len(self.data)}")


def build_status_list_credential(credential_id: str, status_list: StatusList2021, purpose: str = "revocation") -> dict:
    """
    Wraps the encoded status list into an (unsigned) StatusList2021Credential.
    Issuer and issuance date are left to the caller.
    """
    return {
        "@context": [CREDENTIALS_CONTEXT_V1, STATUS_LIST_CONTEXT_V1],
        "id": credential_id,
        "type": ["VerifiableCredential", STATUS_LIST_CREDENTIAL_TYPE],
        "credentialSubject": {
            "id": f"{credential_id}#list",
            "type": STATUS_LIST_SUBJECT_TYPE,
            "encodedList": status_list.pack(),
            "statusPurpose": purpose,
        },
    }
