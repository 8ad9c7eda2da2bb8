"""Tests for the booking request state machine."""

import pytest

from painter_booking.errors import InvalidTransitionError
from painter_booking.services.booking_flow import BookingFlow, FlowState, FlowTrigger


@pytest.fixture
def flow():
    return BookingFlow(max_retries=1)


class TestInitialState:
    def test_starts_submitted(self, flow):
        assert flow.current_state == FlowState.SUBMITTED

    def test_initial_history_has_one_entry(self, flow):
        assert len(flow.get_history()) == 1

    def test_not_terminal_at_start(self, flow):
        assert not flow.is_terminal()

    def test_initial_race_losses_zero(self, flow):
        assert flow.race_losses == 0


class TestValidation:
    def test_invalid_window_rejected(self, flow):
        assert flow.transition(FlowTrigger.WINDOW_INVALID) == FlowState.REJECTED
        assert flow.is_terminal()

    def test_valid_window_goes_to_matching(self, flow):
        assert flow.transition(FlowTrigger.WINDOW_VALID) == FlowState.MATCHING

    def test_cannot_reserve_before_matching(self, flow):
        with pytest.raises(InvalidTransitionError):
            flow.transition(FlowTrigger.RESERVED)


class TestMatching:
    def test_no_candidates_is_terminal_no_match(self, flow):
        flow.transition(FlowTrigger.WINDOW_VALID)
        assert flow.transition(FlowTrigger.NO_CANDIDATES) == FlowState.NO_MATCH
        assert flow.is_terminal()

    def test_happy_path_trace(self, flow):
        flow.transition(FlowTrigger.WINDOW_VALID)
        flow.transition(FlowTrigger.CANDIDATE_SELECTED)
        flow.transition(FlowTrigger.RESERVED)
        assert flow.current_state == FlowState.CONFIRMED
        assert flow.get_state_trace() == ["submitted", "matching", "reserving", "confirmed"]

    def test_history_records_triggers(self, flow):
        flow.transition(FlowTrigger.WINDOW_VALID)
        history = flow.get_history()
        assert history[-1].trigger == FlowTrigger.WINDOW_VALID
        assert history[0].trigger is None


class TestRaceRetry:
    def test_race_lost_returns_to_matching_once(self, flow):
        flow.transition(FlowTrigger.WINDOW_VALID)
        flow.transition(FlowTrigger.CANDIDATE_SELECTED)
        assert flow.transition(FlowTrigger.RACE_LOST) == FlowState.MATCHING
        assert flow.race_losses == 1
        assert not flow.can_retry()

    def test_second_race_loss_blocked_by_guard(self, flow):
        flow.transition(FlowTrigger.WINDOW_VALID)
        flow.transition(FlowTrigger.CANDIDATE_SELECTED)
        flow.transition(FlowTrigger.RACE_LOST)
        flow.transition(FlowTrigger.CANDIDATE_SELECTED)
        with pytest.raises(InvalidTransitionError):
            flow.transition(FlowTrigger.RACE_LOST)
        assert flow.transition(FlowTrigger.RETRIES_EXHAUSTED) == FlowState.NO_MATCH

    def test_zero_retries_never_loops(self):
        flow = BookingFlow(max_retries=0)
        flow.transition(FlowTrigger.WINDOW_VALID)
        flow.transition(FlowTrigger.CANDIDATE_SELECTED)
        assert FlowTrigger.RACE_LOST not in flow.get_valid_triggers()
        assert FlowTrigger.RETRIES_EXHAUSTED in flow.get_valid_triggers()

    def test_error_message_lists_valid_triggers(self, flow):
        with pytest.raises(InvalidTransitionError, match="window_valid"):
            flow.transition(FlowTrigger.NO_CANDIDATES)


class TestTerminalStates:
    @pytest.mark.parametrize("trigger", list(FlowTrigger))
    def test_rejected_accepts_nothing(self, flow, trigger):
        flow.transition(FlowTrigger.WINDOW_INVALID)
        with pytest.raises(InvalidTransitionError):
            flow.transition(trigger)
