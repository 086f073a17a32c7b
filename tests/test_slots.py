"""Tests for the slot model."""

from __future__ import annotations

import pytest

from phaseguard.slots import (
    FixtureDescription,
    Location,
    RunnableDescription,
    RunnableType,
    TimeSlot,
    resolve_slot,
)


class TestResolveSlot:
    def test_falls_back_to_default(self) -> None:
        default = TimeSlot(timeout=1000)
        assert resolve_slot(RunnableDescription(), default) is default

    def test_runnable_slot_wins_over_default(self) -> None:
        default = TimeSlot(timeout=1000)
        own = TimeSlot(timeout=200)
        runnable = RunnableDescription(type=RunnableType.BEFORE_ALL, slot=own)
        assert resolve_slot(runnable, default) is own

    def test_fixture_slot_wins_over_runnable(self) -> None:
        default = TimeSlot(timeout=1000)
        own = TimeSlot(timeout=200)
        fixture_slot = TimeSlot(timeout=50)
        runnable = RunnableDescription(
            slot=own,
            fixture=FixtureDescription(title="db", phase="setup", slot=fixture_slot),
        )
        assert resolve_slot(runnable, default) is fixture_slot

    def test_fixture_without_slot_defers_to_runnable(self) -> None:
        default = TimeSlot(timeout=1000)
        own = TimeSlot(timeout=200)
        runnable = RunnableDescription(
            slot=own, fixture=FixtureDescription(title="db", phase="teardown")
        )
        assert resolve_slot(runnable, default) is own

    def test_zero_timeout_slot_still_resolves(self) -> None:
        default = TimeSlot(timeout=1000)
        disabled = TimeSlot(timeout=0)
        runnable = RunnableDescription(slot=disabled)
        assert resolve_slot(runnable, default) is disabled


class TestRunnableDescription:
    def test_resting_is_test(self) -> None:
        assert RunnableDescription.resting().type == RunnableType.TEST

    def test_resting_is_rebuilt(self) -> None:
        a = RunnableDescription.resting()
        b = RunnableDescription.resting()
        assert a is not b
        assert a == b

    def test_type_values(self) -> None:
        assert RunnableType("beforeAll") is RunnableType.BEFORE_ALL
        assert f"{RunnableType.AFTER_EACH}" == "afterEach"


class TestLocation:
    def test_str(self) -> None:
        assert str(Location("tests/a.py", 12, 3)) == "tests/a.py:12:3"

    def test_parse(self) -> None:
        loc = Location.parse("tests/a.py:12:3")
        assert loc == Location(file="tests/a.py", line=12, column=3)

    def test_parse_keeps_colons_in_file(self) -> None:
        loc = Location.parse("C:/work/a.py:1:2")
        assert loc.file == "C:/work/a.py"

    def test_parse_invalid(self) -> None:
        with pytest.raises(ValueError, match="Invalid location"):
            Location.parse("tests/a.py")
        with pytest.raises(ValueError, match="integers"):
            Location.parse("tests/a.py:x:1")
