# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

import re
import json
import base64

import pytest

from common import parsing


def test_padding():
    encoded = base64.urlsafe_b64encode(b"status").decode()
    assert '=' in encoded, "Should be a valid b64 with padding"
    short = parsing.remove_padding(encoded)
    assert '=' not in short, "Remove padding should remove ="
    assert parsing.add_padding(short) == encoded
    assert base64.urlsafe_b64decode(parsing.add_padding(short)) == b"status"
    # Nothing to add for complete input
    assert parsing.add_padding(encoded) == encoded
    assert parsing.add_padding("abcd") == "abcd"


def test_canonical_json():
    a = {"b": 1, "a": {"d": [1, 2], "c": "ü"}}
    b = {"a": {"c": "ü", "d": [1, 2]}, "b": 1}
    assert parsing.canonical_json(a) == parsing.canonical_json(b), "Key order should have no effect"
    assert parsing.canonical_json(a) == '{"a":{"c":"ü","d":[1,2]},"b":1}'.encode()
    assert json.loads(parsing.canonical_json(a)) == a


def test_date_string():
    date = parsing.get_date_string()
    # Expected format: 2024-02-07T14:38:19.565Z
    assert re.fullmatch(r"[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}\.[0-9]{3}Z", date)


def test_bool_parsing():
    assert parsing.interpret_as_bool("True")
    assert parsing.interpret_as_bool("yes")
    assert parsing.interpret_as_bool("1")
    assert parsing.interpret_as_bool(True)
    assert parsing.interpret_as_bool(1)
    assert not parsing.interpret_as_bool("False")
    assert not parsing.interpret_as_bool("")
    assert not parsing.interpret_as_bool(0)
    with pytest.raises(ValueError):
        parsing.interpret_as_bool(None)
