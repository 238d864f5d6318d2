# backend/tests/test_notify_validator.py

import logging

import pytest

from notify_relay.notify.schemas import NotificationRequest
from notify_relay.notify.validator import ValidationError, validate_notification_request


def _fields(exc_info) -> list:
    return [v.field for v in exc_info.value.violations]


def test_valid_body_returns_typed_request():
    request = validate_notification_request(
        {"dm_id": 42, "notify_check": 1, "target_system": "0"}
    )

    assert isinstance(request, NotificationRequest)
    assert request.dm_id == 42
    assert request.notify_check == 1
    assert request.target_system == "0"


def test_extra_fields_are_ignored():
    request = validate_notification_request(
        {"dm_id": 1, "notify_check": 0, "target_system": "2", "comment": "hi"}
    )

    assert request.target_system == "2"


@pytest.mark.parametrize(
    "target_system, expected",
    [
        ("0", ["1", "2"]),
        ("1", ["1"]),
        ("2", ["2"]),
    ],
)
def test_target_set(target_system, expected):
    request = validate_notification_request(
        {"dm_id": 1, "notify_check": 0, "target_system": target_system}
    )

    assert request.target_set() == expected


def test_request_is_immutable():
    request = validate_notification_request(
        {"dm_id": 1, "notify_check": 0, "target_system": "1"}
    )

    with pytest.raises(Exception):
        request.dm_id = 2


def test_all_violations_are_reported():
    """
    最初の 1 件だけでなく、すべての違反がフィールド順に返ることを確認する。
    """
    with pytest.raises(ValidationError) as exc_info:
        validate_notification_request(
            {"dm_id": "abc", "notify_check": 5, "target_system": "3"}
        )

    violations = exc_info.value.violations
    assert [v.field for v in violations] == ["dm_id", "notify_check", "target_system"]
    assert violations[0].message == "dm_id must be an integer"
    assert violations[1].message == "notify_check must be 0 or 1"
    assert violations[2].message == "target_system must be 1, 2, or 0"
    assert violations[0].value == "abc"


def test_missing_fields():
    with pytest.raises(ValidationError) as exc_info:
        validate_notification_request({"notify_check": 1})

    assert _fields(exc_info) == ["dm_id", "target_system"]


@pytest.mark.parametrize("body", [None, [], "text", 42])
def test_non_object_body_reports_every_field(body):
    with pytest.raises(ValidationError) as exc_info:
        validate_notification_request(body)

    assert _fields(exc_info) == ["dm_id", "notify_check", "target_system"]


@pytest.mark.parametrize("dm_id", ["42", 4.2, 42.0, True, None])
def test_dm_id_must_be_json_integer(dm_id):
    with pytest.raises(ValidationError) as exc_info:
        validate_notification_request(
            {"dm_id": dm_id, "notify_check": 1, "target_system": "1"}
        )

    assert _fields(exc_info) == ["dm_id"]


@pytest.mark.parametrize("notify_check", [2, -1, "1", True, False, 1.0])
def test_notify_check_must_be_zero_or_one(notify_check):
    with pytest.raises(ValidationError) as exc_info:
        validate_notification_request(
            {"dm_id": 1, "notify_check": notify_check, "target_system": "1"}
        )

    assert _fields(exc_info) == ["notify_check"]


@pytest.mark.parametrize("target_system", [0, 1, "3", "", "01"])
def test_target_system_must_be_known_string(target_system):
    with pytest.raises(ValidationError) as exc_info:
        validate_notification_request(
            {"dm_id": 1, "notify_check": 1, "target_system": target_system}
        )

    assert _fields(exc_info) == ["target_system"]


def test_validation_failure_is_logged_with_violations(caplog):
    with caplog.at_level(logging.ERROR, logger="notify_relay.notify.validator"):
        with pytest.raises(ValidationError):
            validate_notification_request({"dm_id": "x", "notify_check": 1, "target_system": "1"})

    records = [r for r in caplog.records if r.getMessage() == "Validation errors"]
    assert len(records) == 1
    assert records[0].levelno == logging.ERROR
    assert records[0].fields["errors"] == [
        {"field": "dm_id", "message": "dm_id must be an integer", "value": "x"}
    ]
