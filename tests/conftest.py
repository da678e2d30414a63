"""Shared fixtures for fervent tests."""

import pytest

from fervent import RuleSet, ValidationEngine


class InMemoryUniqueLookup:
    """Uniqueness lookup over a dict of field -> {identifier: value}."""

    def __init__(self, rows=None):
        self.rows = rows or {}
        self.calls = []

    def exists(self, field, value, excluding=None):
        self.calls.append((field, value, excluding))
        return any(
            stored == value
            for identifier, stored in self.rows.get(field, {}).items()
            if identifier != excluding
        )


@pytest.fixture
def unique_lookup():
    """Lookup where alice@example.com belongs to record 42."""
    return InMemoryUniqueLookup({"email": {42: "alice@example.com", 7: "bob@example.com"}})


@pytest.fixture
def engine(unique_lookup):
    return ValidationEngine(unique_lookup=unique_lookup)


@pytest.fixture
def user_rules():
    """Rule set of a typical user entity."""
    return RuleSet(
        rules={
            "email": ["required", "format:email", "unique:{self}"],
            "age": ["required", "range:0-150"],
        },
        rules_for_create={"password": "required|length:8-64|confirmed"},
        rules_for_update={"age": ["range:18-150"]},
    )
