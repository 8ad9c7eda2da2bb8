"""
Painter scoring and best-candidate selection.

    score = rating * 20 + min(total_ratings * 2, 40) + 40

Rating is weighted highest; track record is capped so high-volume painters
cannot dominate; the flat bonus reflects that every scored candidate already
satisfies the availability constraint. Weights come from ``ScoringConfig``.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from painter_booking.config import ScoringConfig, settings
from painter_booking.logging_context import get_request_logger
from painter_booking.schemas import Candidate, Painter, TimeSlot

logger = get_request_logger(__name__)


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate with its score. Ephemeral, never persisted."""

    painter: Painter
    slot: TimeSlot
    score: float


def score(painter: Painter, weights: Optional[ScoringConfig] = None) -> float:
    w = weights or settings.scoring
    experience = min(painter.total_ratings * w.experience_weight, w.experience_cap)
    return painter.rating * w.rating_weight + experience + w.availability_bonus


def score_candidates(
    candidates: Iterable[Candidate], weights: Optional[ScoringConfig] = None
) -> list[ScoredCandidate]:
    """Score each candidate, preserving input order."""
    scored = [
        ScoredCandidate(painter=c.painter, slot=c.slot, score=score(c.painter, weights))
        for c in candidates
    ]
    for sc in scored:
        logger.debug("Candidate %s slot %s scored %.1f", sc.painter.id, sc.slot.id, sc.score)
    return scored


def select_best(
    candidates: Iterable[Candidate], weights: Optional[ScoringConfig] = None
) -> Optional[ScoredCandidate]:
    """Return the highest-scoring candidate, or None if there are none.

    Ties go to the candidate seen first.
    """
    best: Optional[ScoredCandidate] = None
    for sc in score_candidates(candidates, weights):
        if best is None or sc.score > best.score:
            best = sc
    return best

