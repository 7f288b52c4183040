"""
Derived statistics over a shot-history snapshot.

Read-only: callers pass the history tuple exposed by the engine; nothing
here feeds back into match state.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Sequence

import numpy as np

from shotclock.models import PlayerId, SafetyResult, ShotEvent, ShotOutcome
from shotclock.rules import FOUL_OUTCOMES, LEGAL_POT_OUTCOMES, player_shots


MISS_OUTCOMES = frozenset({ShotOutcome.MISSED, ShotOutcome.BREAK_DRY})


@dataclass(frozen=True)
class TimingSummary:
    count: int
    min: float
    max: float
    mean: float
    std_dev: float


@dataclass(frozen=True)
class PlayerStats:
    total: int
    made: int
    missed: int
    safeties: int
    fouls: int
    time_violations: int
    successful_safeties: int
    timing: TimingSummary

    @property
    def potting_accuracy(self) -> float:
        return self.made / self.total if self.total else 0.0

    @property
    def safety_success_ratio(self) -> float:
        return self.successful_safeties / self.safeties if self.safeties else 0.0


@dataclass(frozen=True)
class SessionSummary:
    shots: int
    made: int
    safeties: int
    fouls: int
    avg_time: float


def timing_summary(times: Sequence[float]) -> TimingSummary:
    if len(times) == 0:
        return TimingSummary(count=0, min=0.0, max=0.0, mean=0.0, std_dev=0.0)

    arr = np.asarray(times, dtype=float)

    return TimingSummary(
        count=int(arr.size),
        min=float(arr.min()),
        max=float(arr.max()),
        mean=float(arr.mean()),
        # population deviation, matching the whisker display
        std_dev=float(arr.std()),
    )


def player_stats(history: Iterable[ShotEvent], player: PlayerId) -> PlayerStats:
    shots = player_shots(history, PlayerId(player))
    outcomes = [s.outcome for s in shots]

    return PlayerStats(
        total=len(shots),
        made=sum(1 for o in outcomes if o in LEGAL_POT_OUTCOMES),
        missed=sum(1 for o in outcomes if o in MISS_OUTCOMES),
        safeties=outcomes.count(ShotOutcome.SAFETY),
        fouls=sum(1 for o in outcomes if o in FOUL_OUTCOMES),
        time_violations=outcomes.count(ShotOutcome.TIME_FOUL),
        successful_safeties=sum(
            1 for s in shots if s.safety_result is SafetyResult.SUCCESSFUL
        ),
        timing=timing_summary([s.time_used for s in shots]),
    )


def match_stats(history: Iterable[ShotEvent]) -> Dict[PlayerId, PlayerStats]:
    history = list(history)
    return {p: player_stats(history, p) for p in PlayerId}


def session_summary(shots: Sequence[ShotEvent]) -> SessionSummary:
    """Per-player record handed to the profile store when a session ends."""
    outcomes = [s.outcome for s in shots]
    made_outcomes = LEGAL_POT_OUTCOMES | {ShotOutcome.WIN}

    return SessionSummary(
        shots=len(shots),
        made=sum(1 for o in outcomes if o in made_outcomes),
        safeties=outcomes.count(ShotOutcome.SAFETY),
        fouls=sum(1 for o in outcomes if o in FOUL_OUTCOMES),
        avg_time=float(np.mean([s.time_used for s in shots])) if shots else 0.0,
    )
