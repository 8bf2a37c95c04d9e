import uuid

import pytest

from admincore.tools.utils import (
    REQUEST_ID_KEY,
    USERNAME_KEY,
    convert_num_to_chars,
    get_header_first,
    get_request_id,
    get_username,
    new_request_id,
)


@pytest.mark.parametrize(
    "num,expected",
    [(0, "A"), (25, "Z"), (26, "AA"), (51, "AZ"), (52, "BA")],
)
def test_column_names(num, expected):
    assert convert_num_to_chars(num) == expected


def test_column_names_are_unique_and_ordered():
    names = [convert_num_to_chars(n) for n in range(2000)]
    assert len(set(names)) == len(names)
    assert names == sorted(names, key=lambda name: (len(name), name))
    assert all(name.isalpha() and name.isupper() for name in names)


def test_negative_index_gives_empty_name():
    assert convert_num_to_chars(-1) == ""


def test_header_first_from_pairs():
    metadata = [("x-request-id", "first"), ("x-request-id", "second")]
    assert get_header_first(metadata, REQUEST_ID_KEY) == "first"


def test_header_first_from_mapping_case_insensitive():
    metadata = {"X-Username": ["alice", "bob"]}
    assert get_username(metadata) == "alice"
    assert get_header_first(metadata, USERNAME_KEY.upper()) == "alice"


def test_missing_header_is_empty():
    assert get_header_first({"other": "value"}, REQUEST_ID_KEY) == ""
    assert get_username(None) == ""


def test_request_id_taken_from_metadata():
    assert get_request_id({REQUEST_ID_KEY: "req-1"}) == "req-1"


def test_request_id_generated_when_missing():
    first = get_request_id(None)
    second = get_request_id([])
    assert uuid.UUID(first).version == 4
    assert first != second


def test_new_request_id_is_uuid4_string():
    value = new_request_id()
    assert str(uuid.UUID(value)) == value
    assert uuid.UUID(value).version == 4