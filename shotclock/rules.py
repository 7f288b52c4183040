"""
Outcome classification and match accounting rules.

Everything here is a pure function of outcomes, settings and history;
the transition function composes them.
"""

from typing import Iterable, List, Optional

from shotclock.config import THREE_FOUL_LIMIT
from shotclock.models import (
    GamePhase,
    GameType,
    MatchFormat,
    MatchSettings,
    MatchState,
    PlayerId,
    SafetyResult,
    ShotEvent,
    ShotOutcome,
)


FOUL_OUTCOMES = frozenset({
    ShotOutcome.FOUL,
    ShotOutcome.TIME_FOUL,
    ShotOutcome.BREAK_FOUL,
})

LEGAL_POT_OUTCOMES = frozenset({
    ShotOutcome.MADE,
    ShotOutcome.BREAK_LEGAL,
})

TURN_PASSING_OUTCOMES = frozenset({
    ShotOutcome.MISSED,
    ShotOutcome.SAFETY,
    ShotOutcome.FOUL,
    ShotOutcome.TIME_FOUL,
    ShotOutcome.BREAK_DRY,
    ShotOutcome.BREAK_FOUL,
    ShotOutcome.PUSH_OUT,
})

RACK_DECIDING_OUTCOMES = frozenset({
    ShotOutcome.WIN,
    ShotOutcome.EARLY_8_LOSS,
    ShotOutcome.THREE_FOUL_LOSS,
})

BREAK_OUTCOMES = frozenset({
    ShotOutcome.BREAK_LEGAL,
    ShotOutcome.BREAK_DRY,
    ShotOutcome.BREAK_FOUL,
})


def is_foul(outcome: ShotOutcome) -> bool:
    # A three-foul loss is recorded from a foul shot
    return outcome in FOUL_OUTCOMES or outcome is ShotOutcome.THREE_FOUL_LOSS


def is_legal_pot(outcome: ShotOutcome) -> bool:
    return outcome in LEGAL_POT_OUTCOMES


def passes_turn(outcome: ShotOutcome) -> bool:
    return outcome in TURN_PASSING_OUTCOMES


def safety_result_for(outcome: ShotOutcome) -> SafetyResult:
    """Judge a pending safety by the outcome of the shot that followed it."""
    if outcome in FOUL_OUTCOMES:
        return SafetyResult.SUCCESSFUL
    if outcome in LEGAL_POT_OUTCOMES:
        return SafetyResult.UNSUCCESSFUL
    return SafetyResult.NEUTRAL


def rack_winner_for(shooter: PlayerId, outcome: ShotOutcome) -> Optional[PlayerId]:
    if outcome is ShotOutcome.WIN:
        return shooter
    if outcome in (ShotOutcome.EARLY_8_LOSS, ShotOutcome.THREE_FOUL_LOSS):
        return shooter.opponent
    return None


def apply_foul_rule(
    outcome: ShotOutcome, fouls_after: int, settings: MatchSettings
) -> ShotOutcome:
    """Return the finalised outcome once the three-foul rule has been applied."""
    if settings.three_foul_rule and outcome in FOUL_OUTCOMES and fouls_after >= THREE_FOUL_LIMIT:
        return ShotOutcome.THREE_FOUL_LOSS
    return outcome


def next_foul_count(current: int, outcome: ShotOutcome) -> int:
    if outcome in FOUL_OUTCOMES:
        return current + 1
    if outcome in LEGAL_POT_OUTCOMES:
        return 0
    return current


# =========================================================
# MATCH ACCOUNTING
# =========================================================

def match_winner(
    p1_score: int,
    p2_score: int,
    racks_completed: int,
    settings: MatchSettings,
) -> Optional[PlayerId]:
    """
    RACE: first to reach target.
    SET: once `target` racks are complete the higher score wins. A tie
    leaves the match open and the next decided rack settles it.
    SINGLE: games are counted but never decide a match.
    """
    if settings.format is MatchFormat.RACE:
        if p1_score >= settings.target:
            return PlayerId.ONE
        if p2_score >= settings.target:
            return PlayerId.TWO
        return None

    if settings.format is MatchFormat.SET:
        if racks_completed < settings.target:
            return None
        if p1_score > p2_score:
            return PlayerId.ONE
        if p2_score > p1_score:
            return PlayerId.TWO
        return None

    return None


def racks_completed(state: MatchState) -> int:
    if state.phase in (GamePhase.RACK_OVER, GamePhase.MATCH_OVER):
        return state.current_rack
    return state.current_rack - 1


# =========================================================
# HISTORY DERIVATION
# =========================================================

def consecutive_fouls(events: Iterable[ShotEvent], player: PlayerId) -> int:
    count = 0
    for e in events:
        if e.player is not player:
            continue
        if is_legal_pot(e.outcome):
            count = 0
        elif is_foul(e.outcome):
            count += 1
    return count


def extensions_used(events: Iterable[ShotEvent], player: PlayerId) -> int:
    return sum(1 for e in events if e.player is player and e.is_extension_used)


def player_shots(events: Iterable[ShotEvent], player: PlayerId) -> List[ShotEvent]:
    return [e for e in events if e.player is player]


# =========================================================
# OUTCOME ELIGIBILITY
# =========================================================

def available_outcomes(state: MatchState, settings: MatchSettings) -> List[ShotOutcome]:
    """Outcomes an operator may pick while assessing the current shot."""
    if state.phase is not GamePhase.ASSESSING:
        return []

    if state.is_break_prep:
        options = [ShotOutcome.BREAK_LEGAL, ShotOutcome.BREAK_DRY, ShotOutcome.BREAK_FOUL]
    else:
        options = [ShotOutcome.MADE, ShotOutcome.MISSED, ShotOutcome.SAFETY, ShotOutcome.FOUL]
        if settings.game_type is GameType.ROTATION and state.is_first_shot_after_break:
            options.append(ShotOutcome.PUSH_OUT)

    options.extend([ShotOutcome.WIN, ShotOutcome.EARLY_8_LOSS])
    return options
