"""Tests for message values and their record schema."""

import dataclasses

import pytest

from openaicli.chat.models import RECORD_SCHEMA_VERSION, Message, Role
from openaicli.errors import CorruptHistoryError


def test_message_is_immutable():
    message = Message.user("hello")
    with pytest.raises(dataclasses.FrozenInstanceError):
        message.content = "changed"  # type: ignore[misc]


def test_constructors_set_roles():
    assert Message.user("a").role is Role.USER
    assert Message.assistant("b").role is Role.ASSISTANT


def test_to_payload_uses_wire_role_names():
    assert Message.assistant("hi").to_payload() == {"role": "assistant", "content": "hi"}


def test_record_carries_schema_version():
    record = Message.user("hi").to_record()
    assert record == {"schema_version": RECORD_SCHEMA_VERSION, "role": "user", "content": "hi"}
    assert Message.from_record(record) == Message.user("hi")


@pytest.mark.parametrize(
    "record",
    [
        ["not", "a", "mapping"],
        {"role": "user", "content": "x"},
        {"schema_version": 99, "role": "user", "content": "x"},
        {"schema_version": 1, "role": "system", "content": "x"},
        {"schema_version": 1, "role": "user"},
        {"schema_version": 1, "role": "user", "content": 5},
    ],
)
def test_from_record_rejects_malformed_records(record):
    with pytest.raises(CorruptHistoryError):
        Message.from_record(record)
