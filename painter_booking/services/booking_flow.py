"""
Finite state machine for a single booking request.

Every request follows a deterministic path through the state graph:

    SUBMITTED -> REJECTED                        (invalid window)
    SUBMITTED -> MATCHING -> NO_MATCH            (no candidates)
    SUBMITTED -> MATCHING -> RESERVING -> CONFIRMED
                             RESERVING -> MATCHING   (race lost, retries left)
                             RESERVING -> NO_MATCH   (race lost, retries exhausted)

Usage:
    flow = BookingFlow(max_retries=1)
    flow.transition(FlowTrigger.WINDOW_VALID)
    assert flow.current_state == FlowState.MATCHING
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from painter_booking.errors import InvalidTransitionError
from painter_booking.logging_context import get_request_logger

logger = get_request_logger(__name__)


class FlowState(str, Enum):
    """All possible states of a booking request while it is being matched."""
    SUBMITTED = "submitted"
    REJECTED = "rejected"
    MATCHING = "matching"
    RESERVING = "reserving"
    CONFIRMED = "confirmed"
    NO_MATCH = "no_match"


class FlowTrigger(str, Enum):
    """Events that cause state transitions."""
    WINDOW_INVALID = "window_invalid"
    WINDOW_VALID = "window_valid"
    NO_CANDIDATES = "no_candidates"
    CANDIDATE_SELECTED = "candidate_selected"
    RESERVED = "reserved"
    RACE_LOST = "race_lost"
    RETRIES_EXHAUSTED = "retries_exhausted"


TERMINAL_STATES = frozenset({FlowState.REJECTED, FlowState.CONFIRMED, FlowState.NO_MATCH})


@dataclass
class Transition:
    """A single valid state transition."""
    from_state: FlowState
    to_state: FlowState
    trigger: FlowTrigger
    guard: Optional[Callable[["BookingFlow"], bool]] = None


@dataclass
class StateEntry:
    """Recorded history entry for a state visit."""
    state: FlowState
    entered_at: datetime
    trigger: Optional[FlowTrigger] = None


class BookingFlow:
    """
    Deterministic state machine for one booking request.

    A lost reservation race may loop back to MATCHING only while retries
    remain; afterwards the request must end in NO_MATCH.
    """

    TRANSITIONS: list[Transition] = [
        # --- Validation ---
        Transition(FlowState.SUBMITTED, FlowState.REJECTED, FlowTrigger.WINDOW_INVALID),
        Transition(FlowState.SUBMITTED, FlowState.MATCHING, FlowTrigger.WINDOW_VALID),

        # --- Matching ---
        Transition(FlowState.MATCHING, FlowState.NO_MATCH, FlowTrigger.NO_CANDIDATES),
        Transition(FlowState.MATCHING, FlowState.RESERVING, FlowTrigger.CANDIDATE_SELECTED),

        # --- Reservation ---
        Transition(FlowState.RESERVING, FlowState.CONFIRMED, FlowTrigger.RESERVED),
        Transition(FlowState.RESERVING, FlowState.MATCHING, FlowTrigger.RACE_LOST,
                   guard=lambda flow: flow.can_retry()),
        Transition(FlowState.RESERVING, FlowState.NO_MATCH, FlowTrigger.RETRIES_EXHAUSTED),
    ]

    def __init__(self, max_retries: int = 1) -> None:
        self._max_retries = max_retries
        self._current_state = FlowState.SUBMITTED
        self._history: list[StateEntry] = [
            StateEntry(state=FlowState.SUBMITTED, entered_at=datetime.now(timezone.utc))
        ]
        self._race_losses: int = 0

    @property
    def current_state(self) -> FlowState:
        return self._current_state

    @property
    def race_losses(self) -> int:
        return self._race_losses

    def can_retry(self) -> bool:
        return self._race_losses < self._max_retries

    def transition(self, trigger: FlowTrigger) -> FlowState:
        """
        Execute a state transition.

        Args:
            trigger: The event triggering the transition.

        Returns:
            The new flow state.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_state == self._current_state and t.trigger == trigger:
                if t.guard is not None and not t.guard(self):
                    continue

                old_state = self._current_state
                self._current_state = t.to_state

                self._history.append(StateEntry(
                    state=self._current_state,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))

                if trigger == FlowTrigger.RACE_LOST:
                    self._race_losses += 1

                logger.debug(
                    "Booking flow: %s -> %s (trigger: %s)",
                    old_state.value, self._current_state.value, trigger.value,
                )
                return self._current_state

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_state.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[FlowTrigger]:
        """Return all triggers valid from the current state."""
        return [
            t.trigger for t in self.TRANSITIONS
            if t.from_state == self._current_state and (t.guard is None or t.guard(self))
        ]

    def get_history(self) -> list[StateEntry]:
        """Return the full state transition history."""
        return list(self._history)

    def get_state_trace(self) -> list[str]:
        """Return ordered list of state names visited."""
        return [entry.state.value for entry in self._history]

    def is_terminal(self) -> bool:
        return self._current_state in TERMINAL_STATES
