"""Tests for declarative entity rules."""

import pytest

from lawdesk.core.errors import EntityValidationError, FieldViolation
from lawdesk.utils.validation import EntityRule, ensure_valid, required, snapshot, validate_entity


WINDOW_RULE = EntityRule(
    field="end_time",
    message="End time must be after start time",
    check=lambda v: v["end_time"] > v["start_time"],
    requires=("start_time", "end_time"),
)


def test_required_rejects_missing_and_blank():
    rule = required("title", "Title is required")

    assert validate_entity({"title": "x"}, [rule]) == []
    assert validate_entity({"title": ""}, [rule]) == [FieldViolation("title", "Title is required")]
    assert validate_entity({}, [rule]) == [FieldViolation("title", "Title is required")]


def test_required_default_message():
    assert validate_entity({}, [required("phone")])[0].message == "phone is required"


def test_rule_skipped_when_inputs_missing():
    assert validate_entity({"start_time": 5}, [WINDOW_RULE]) == []


def test_when_gates_rule():
    rule = EntityRule(
        field="recurring_pattern",
        message="Recurring pattern is required",
        check=lambda v: v.get("recurring_pattern") is not None,
        when=lambda v: bool(v.get("is_recurring")),
    )

    assert validate_entity({"is_recurring": False}, [rule]) == []
    assert len(validate_entity({"is_recurring": True}, [rule])) == 1


def test_all_violations_collected():
    rules = [required("title"), required("client_id"), WINDOW_RULE]

    violations = validate_entity({"start_time": 10, "end_time": 9}, rules)

    assert [v.field for v in violations] == ["title", "client_id", "end_time"]


def test_ensure_valid_raises_with_every_violation():
    with pytest.raises(EntityValidationError) as exc_info:
        ensure_valid({}, [required("title"), required("content")])

    assert exc_info.value.extra() == {
        "errors": [
            {"field": "title", "message": "title is required"},
            {"field": "content", "message": "content is required"},
        ]
    }


def test_snapshot_merges_overrides():
    class Record:
        title = "Old"
        content = "Body"

    assert snapshot(Record(), ("title", "content"), {"title": "New"}) == {
        "title": "New",
        "content": "Body",
    }
