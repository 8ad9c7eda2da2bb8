"""Tests for slot declaration, queries and atomic booked-flag transitions."""

from datetime import timedelta

import pytest

from painter_booking.errors import ErrorCode

from tests.conftest import at, make_painter


@pytest.fixture
def painter(availability):
    return availability.register_painter(make_painter("painter-1"))


def _declare(availability, painter_id, start, end):
    return availability.declare(painter_id, at(start), at(end))


class TestDeclare:
    def test_declare_returns_unbooked_slot(self, availability, painter):
        result = _declare(availability, painter.id, "2025-01-10T09:00", "2025-01-10T17:00")
        assert result.success
        assert result.data.painter_id == painter.id
        assert result.data.booked is False
        assert result.data.start_time == at("2025-01-10T09:00")

    def test_overlap_rejected(self, availability, painter):
        _declare(availability, painter.id, "2025-01-10T12:00", "2025-01-10T16:00")
        result = _declare(availability, painter.id, "2025-01-10T10:00", "2025-01-10T14:00")
        assert not result.success
        assert result.error == ErrorCode.OVERLAP

    def test_adjacent_slot_accepted(self, availability, painter):
        _declare(availability, painter.id, "2025-01-10T10:00", "2025-01-10T14:00")
        result = _declare(availability, painter.id, "2025-01-10T08:00", "2025-01-10T10:00")
        assert result.success

    def test_contained_slot_rejected(self, availability, painter):
        _declare(availability, painter.id, "2025-01-10T09:00", "2025-01-10T17:00")
        result = _declare(availability, painter.id, "2025-01-10T10:00", "2025-01-10T11:00")
        assert result.error == ErrorCode.OVERLAP

    def test_other_painter_may_overlap(self, availability, painter):
        other = availability.register_painter(make_painter("painter-2"))
        _declare(availability, painter.id, "2025-01-10T09:00", "2025-01-10T17:00")
        result = _declare(availability, other.id, "2025-01-10T09:00", "2025-01-10T17:00")
        assert result.success

    def test_start_equal_end_is_invalid_range(self, availability, painter):
        result = _declare(availability, painter.id, "2025-01-10T09:00", "2025-01-10T09:00")
        assert result.error == ErrorCode.INVALID_RANGE

    def test_start_after_end_is_invalid_range(self, availability, painter):
        result = _declare(availability, painter.id, "2025-01-10T17:00", "2025-01-10T09:00")
        assert result.error == ErrorCode.INVALID_RANGE

    def test_past_start_rejected(self, availability, painter):
        result = _declare(availability, painter.id, "2024-12-31T09:00", "2025-01-02T09:00")
        assert result.error == ErrorCode.PAST_TIME

    def test_start_equal_now_rejected(self, availability, painter, clock):
        result = availability.declare(painter.id, clock.now, clock.now + timedelta(hours=2))
        assert result.error == ErrorCode.PAST_TIME

    def test_unknown_painter(self, availability):
        result = _declare(availability, "nobody", "2025-01-10T09:00", "2025-01-10T17:00")
        assert result.error == ErrorCode.NOT_FOUND


class TestListUpcoming:
    def test_ordered_by_start(self, availability, painter):
        _declare(availability, painter.id, "2025-01-12T09:00", "2025-01-12T17:00")
        _declare(availability, painter.id, "2025-01-10T09:00", "2025-01-10T17:00")
        _declare(availability, painter.id, "2025-01-11T09:00", "2025-01-11T17:00")
        starts = [s.start_time for s in availability.list_upcoming(painter.id)]
        assert starts == [at("2025-01-10T09:00"), at("2025-01-11T09:00"), at("2025-01-12T09:00")]

    def test_excludes_slots_that_already_started(self, availability, painter, clock):
        _declare(availability, painter.id, "2025-01-10T09:00", "2025-01-10T17:00")
        _declare(availability, painter.id, "2025-01-11T09:00", "2025-01-11T17:00")
        clock.now = at("2025-01-10T12:00")
        starts = [s.start_time for s in availability.list_upcoming(painter.id)]
        assert starts == [at("2025-01-11T09:00")]

    def test_only_own_slots(self, availability, painter):
        other = availability.register_painter(make_painter("painter-2"))
        _declare(availability, other.id, "2025-01-10T09:00", "2025-01-10T17:00")
        assert availability.list_upcoming(painter.id) == []

    def test_repeated_reads_identical(self, availability, painter):
        _declare(availability, painter.id, "2025-01-10T09:00", "2025-01-10T17:00")
        assert availability.list_upcoming(painter.id) == availability.list_upcoming(painter.id)


class TestFindCandidates:
    def test_containing_slot_found(self, availability, painter):
        _declare(availability, painter.id, "2025-01-10T09:00", "2025-01-10T17:00")
        candidates = availability.find_candidates(at("2025-01-10T10:00"), at("2025-01-10T14:00"))
        assert [c.painter.id for c in candidates] == [painter.id]

    def test_exact_bounds_count_as_containment(self, availability, painter):
        _declare(availability, painter.id, "2025-01-10T10:00", "2025-01-10T14:00")
        candidates = availability.find_candidates(at("2025-01-10T10:00"), at("2025-01-10T14:00"))
        assert len(candidates) == 1

    def test_partial_cover_excluded(self, availability, painter):
        _declare(availability, painter.id, "2025-01-10T11:00", "2025-01-10T17:00")
        assert availability.find_candidates(at("2025-01-10T10:00"), at("2025-01-10T14:00")) == []

    def test_booked_slot_excluded(self, availability, painter):
        slot = _declare(availability, painter.id, "2025-01-10T09:00", "2025-01-10T17:00").data
        availability.reserve(slot.id)
        assert availability.find_candidates(at("2025-01-10T10:00"), at("2025-01-10T14:00")) == []

    def test_inactive_painter_excluded(self, availability):
        idle = availability.register_painter(make_painter("painter-idle", is_active=False))
        _declare(availability, idle.id, "2025-01-10T09:00", "2025-01-10T17:00")
        assert availability.find_candidates(at("2025-01-10T10:00"), at("2025-01-10T14:00")) == []

    def test_ordered_by_slot_start(self, availability, painter):
        early = availability.register_painter(make_painter("painter-early"))
        _declare(availability, painter.id, "2025-01-10T09:00", "2025-01-10T17:00")
        _declare(availability, early.id, "2025-01-10T07:00", "2025-01-10T17:00")
        candidates = availability.find_candidates(at("2025-01-10T10:00"), at("2025-01-10T14:00"))
        assert [c.painter.id for c in candidates] == ["painter-early", painter.id]

    def test_repeated_reads_identical(self, availability, painter):
        _declare(availability, painter.id, "2025-01-10T09:00", "2025-01-10T17:00")
        window = (at("2025-01-10T10:00"), at("2025-01-10T14:00"))
        assert availability.find_candidates(*window) == availability.find_candidates(*window)


class TestReserveRelease:
    def test_reserve_sets_booked(self, availability, painter):
        slot = _declare(availability, painter.id, "2025-01-10T09:00", "2025-01-10T17:00").data
        result = availability.reserve(slot.id)
        assert result.success
        assert result.data.booked is True

    def test_second_reserve_already_booked(self, availability, painter):
        slot = _declare(availability, painter.id, "2025-01-10T09:00", "2025-01-10T17:00").data
        availability.reserve(slot.id)
        result = availability.reserve(slot.id)
        assert result.error == ErrorCode.ALREADY_BOOKED

    def test_reserve_unknown_slot(self, availability):
        assert availability.reserve("missing").error == ErrorCode.NOT_FOUND

    def test_release_frees_slot(self, availability, painter):
        slot = _declare(availability, painter.id, "2025-01-10T09:00", "2025-01-10T17:00").data
        availability.reserve(slot.id)
        result = availability.release(slot.id)
        assert result.success
        assert result.data.booked is False
        assert availability.reserve(slot.id).success

    def test_release_unknown_slot(self, availability):
        assert availability.release("missing").error == ErrorCode.NOT_FOUND


class TestDelete:
    def test_delete_unbooked(self, availability, painter):
        slot = _declare(availability, painter.id, "2025-01-10T09:00", "2025-01-10T17:00").data
        assert availability.delete(slot.id, painter.id).success
        assert availability.list_upcoming(painter.id) == []

    def test_delete_booked_refused(self, availability, painter):
        slot = _declare(availability, painter.id, "2025-01-10T09:00", "2025-01-10T17:00").data
        availability.reserve(slot.id)
        result = availability.delete(slot.id, painter.id)
        assert result.error == ErrorCode.ALREADY_BOOKED
        assert len(availability.list_upcoming(painter.id)) == 1

    def test_delete_other_painters_slot_is_not_found(self, availability, painter):
        other = availability.register_painter(make_painter("painter-2"))
        slot = _declare(availability, painter.id, "2025-01-10T09:00", "2025-01-10T17:00").data
        assert availability.delete(slot.id, other.id).error == ErrorCode.NOT_FOUND

    def test_delete_missing(self, availability, painter):
        assert availability.delete("missing", painter.id).error == ErrorCode.NOT_FOUND

    def test_deleted_window_can_be_redeclared(self, availability, painter):
        slot = _declare(availability, painter.id, "2025-01-10T09:00", "2025-01-10T17:00").data
        availability.delete(slot.id, painter.id)
        assert _declare(availability, painter.id, "2025-01-10T09:00", "2025-01-10T17:00").success
