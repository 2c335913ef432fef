# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

import re
import json
import datetime


def canonical_json(data: dict | list) -> bytes:
    """
    Serializes the data with sorted keys and without insignificant whitespace.
    Two equal documents always produce the same bytes, which is what gets signed.
    """
    return json.dumps(data, sort_keys=True, separators=(',', ':'), ensure_ascii=False).encode()


def get_date_string() -> str:
    """Current UTC time as ISO 8601 string with millisecond precision, eg. 2024-02-07T14:38:19.565Z"""
    now = datetime.datetime.now(datetime.timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def remove_padding(base64_encoded: str) -> str:
    """Remove padding form b64 encoded string"""
    return base64_encoded.rstrip('=')


def add_padding(base64_encoded: str) -> str:
    """Add padding (=) for b64 encoded string, so it can be decoded"""
    return f'{base64_encoded}{"=" * (-len(base64_encoded) % 4)}'


def interpret_as_bool(boolify: str) -> bool:
    """
    Converts an inpput to an boolean according to commonly used patterns.
    """
    if isinstance(boolify, bool):
        return boolify
    if isinstance(boolify, int):
        return boolify > 0
    elif isinstance(boolify, str):
        return re.match(r"^(y|yes|1|true)$", boolify, re.IGNORECASE | re.MULTILINE) is not None
    raise ValueError(f"Can't boolify a {boolify}.")
