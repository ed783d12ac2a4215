"""Event schema and field validation."""

import pytest

from nostr_forge.core.events import SignedEvent, UnsignedEvent, is_valid_event, validate_event
from nostr_forge.core.exceptions import ValidationError


def test_valid_payload_passes(unsigned: dict) -> None:
    event = validate_event(unsigned)
    assert isinstance(event, UnsignedEvent)
    assert event.tags == [["p", "a" * 64], ["t", "nostr"]]


def test_tuples_are_accepted_as_sequences(unsigned: dict) -> None:
    unsigned["tags"] = (("e", "x"),)
    assert validate_event(unsigned).tags == [["e", "x"]]


@pytest.mark.parametrize(
    "field,value",
    [
        ("kind", -1),
        ("kind", 32000),
        ("kind", True),
        ("kind", "1"),
        ("content", 123),
        ("tags", "x"),
        ("tags", [["p", 1]]),
        ("tags", ["p"]),
        ("pubkey", "a" * 63),
        ("pubkey", "A" * 64),
        ("created_at", "1700000000"),
        ("created_at", 1.5),
    ],
)
def test_rejects_malformed_field(unsigned: dict, field: str, value) -> None:
    unsigned[field] = value
    with pytest.raises(ValidationError) as exc:
        validate_event(unsigned)
    assert exc.value.field == field
    assert not is_valid_event(unsigned)


def test_reports_first_violated_field(unsigned: dict) -> None:
    unsigned["kind"] = -1
    unsigned["content"] = 123
    unsigned["created_at"] = "soon"
    with pytest.raises(ValidationError) as exc:
        validate_event(unsigned)
    assert exc.value.field == "created_at"


def test_missing_field_is_reported(unsigned: dict) -> None:
    del unsigned["content"]
    with pytest.raises(ValidationError, match="content"):
        validate_event(unsigned)


def test_non_mapping_payload_is_rejected() -> None:
    with pytest.raises(ValidationError):
        validate_event(["EVENT"])


def test_kind_bounds_are_inclusive(unsigned: dict) -> None:
    for kind in (0, 31999):
        unsigned["kind"] = kind
        assert validate_event(unsigned).kind == kind


def test_signed_event_json_helpers(unsigned: dict) -> None:
    event = SignedEvent(id="0" * 64, sig="1" * 128, **unsigned)
    data = event.to_dict()
    assert list(data) == ["id", "pubkey", "created_at", "kind", "tags", "content", "sig"]
    assert SignedEvent.from_json(event.to_json()) == event
    assert event.get_tags("t") == [["t", "nostr"]]
    assert event.unsigned() == UnsignedEvent(**unsigned)


@pytest.mark.parametrize(
    "field,value",
    [
        ("content", "\ud800"),
        ("content", "ok \udfff"),
        ("tags", [["t", "\ud800"]]),
        ("tags", [["p", "a" * 64], ["\udc00"]]),
    ],
)
def test_rejects_text_that_cannot_be_utf8_encoded(unsigned: dict, field: str, value) -> None:
    unsigned[field] = value
    with pytest.raises(ValidationError) as exc:
        validate_event(unsigned)
    assert exc.value.field == field
    assert "UTF-8" in str(exc.value)
