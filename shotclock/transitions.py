import time
import uuid
from dataclasses import replace
from typing import Callable, Dict, Optional, Tuple, Type

from shotclock.config import DEFAULT_P1_NAME, DEFAULT_P2_NAME
from shotclock.events import (
    CallTimeFoul,
    MatchEvent,
    NextRack,
    PushDecision,
    RecordOutcome,
    Reset,
    ShotStruck,
    StartMatch,
    Tick,
    TogglePause,
    Undo,
    UpdateSettings,
    UseExtension,
)
from shotclock.models import (
    GamePhase,
    MatchSettings,
    MatchState,
    PlayerId,
    SafetyResult,
    ShotEvent,
    ShotOutcome,
)
from shotclock.rules import (
    BREAK_OUTCOMES,
    apply_foul_rule,
    consecutive_fouls,
    extensions_used,
    is_foul,
    match_winner,
    next_foul_count,
    passes_turn,
    rack_winner_for,
    racks_completed,
    safety_result_for,
)


Transition = Tuple[MatchState, MatchSettings]


def transition(
    state: MatchState,
    settings: MatchSettings,
    event: MatchEvent,
    now: Optional[float] = None,
) -> Transition:
    """
    Compute the next (state, settings) pair for an input event.

    Pure: inputs are never mutated. An event whose guard does not hold
    returns the inputs unchanged.
    """
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"Unsupported event: {event!r}")

    return handler(state, settings, event, time.time() if now is None else now)


# =========================================================
# SESSION LIFECYCLE
# =========================================================

def _start(state: MatchState, settings: MatchSettings, event: StartMatch, now: float) -> Transition:
    p1 = event.p1_name or DEFAULT_P1_NAME
    p2 = event.p2_name or DEFAULT_P2_NAME

    # Same players keep their shot log for statistics
    players_changed = (p1, p2) != (state.p1_name, state.p2_name)
    history = () if players_changed else state.shot_history

    if history and state.pending_safety_index is not None:
        # A safety left open by the previous match is never judged
        idx = state.pending_safety_index
        history = history[:idx] + (replace(history[idx], safety_result=None),) + history[idx + 1:]

    new_state = MatchState(
        phase=GamePhase.AIMING,
        current_player=settings.breaking_player,
        time_left=settings.shot_time,
        total_time_for_shot=settings.shot_time,
        is_break_prep=True,
        p1_name=p1,
        p2_name=p2,
        p1_extensions_remaining=settings.extensions_allowed,
        p2_extensions_remaining=settings.extensions_allowed,
        shot_history=history,
        match_start_index=len(history),
    )
    return new_state, settings


def _reset(state: MatchState, settings: MatchSettings, event: Reset, now: float) -> Transition:
    return MatchState(), MatchSettings()


def _update_settings(
    state: MatchState, settings: MatchSettings, event: UpdateSettings, now: float
) -> Transition:
    new_settings = event.settings

    p1 = event.p1_name or state.p1_name
    p2 = event.p2_name or state.p2_name
    players_changed = (p1, p2) != (state.p1_name, state.p2_name)

    if state.phase is GamePhase.SETUP:
        winner = None
    else:
        winner = match_winner(state.p1_score, state.p2_score, racks_completed(state), new_settings)

    if winner:
        phase = GamePhase.MATCH_OVER
    elif state.phase is GamePhase.MATCH_OVER:
        # Match no longer decided under the new format: continue rack by rack
        phase = GamePhase.RACK_OVER
    else:
        phase = state.phase

    allowed = new_settings.extensions_allowed

    new_state = replace(
        state,
        phase=phase,
        winner=winner,
        p1_name=p1,
        p2_name=p2,
        p1_extensions_remaining=min(state.p1_extensions_remaining, allowed),
        p2_extensions_remaining=min(state.p2_extensions_remaining, allowed),
        shot_history=() if players_changed else state.shot_history,
        match_start_index=0 if players_changed else state.match_start_index,
        pending_safety_index=None if players_changed else state.pending_safety_index,
    )
    return new_state, new_settings


# =========================================================
# AIMING
# =========================================================

def _shot_struck(state: MatchState, settings: MatchSettings, event: ShotStruck, now: float) -> Transition:
    if state.phase is not GamePhase.AIMING:
        return state, settings
    return replace(state, phase=GamePhase.ASSESSING), settings


def _use_extension(state: MatchState, settings: MatchSettings, event: UseExtension, now: float) -> Transition:
    if (
        state.phase is not GamePhase.AIMING
        or state.is_paused
        or state.is_break_prep
        or state.is_extension_active
    ):
        return state, settings

    player = state.current_player
    remaining = state.extensions_remaining(player)
    if remaining <= 0:
        return state, settings

    new_state = replace(
        state,
        time_left=state.time_left + settings.extension_time,
        total_time_for_shot=state.total_time_for_shot + settings.extension_time,
        is_extension_active=True,
        **{_extensions_field(player): remaining - 1},
    )
    return new_state, settings


def _tick(state: MatchState, settings: MatchSettings, event: Tick, now: float) -> Transition:
    if not state.is_clock_running:
        return state, settings
    return replace(state, time_left=state.time_left - 1), settings


def _toggle_pause(state: MatchState, settings: MatchSettings, event: TogglePause, now: float) -> Transition:
    if state.is_break_prep:
        return state, settings
    return replace(state, is_paused=not state.is_paused), settings


def _call_time_foul(state: MatchState, settings: MatchSettings, event: CallTimeFoul, now: float) -> Transition:
    if (
        state.phase is not GamePhase.AIMING
        or state.is_break_prep
        or state.time_left > 0
    ):
        return state, settings
    return _apply_outcome(state, settings, ShotOutcome.TIME_FOUL, now)


# =========================================================
# OUTCOMES
# =========================================================

def _record_outcome(state: MatchState, settings: MatchSettings, event: RecordOutcome, now: float) -> Transition:
    if state.phase is not GamePhase.ASSESSING:
        return state, settings
    return _apply_outcome(state, settings, event.outcome, now)


def _apply_outcome(
    state: MatchState, settings: MatchSettings, outcome: ShotOutcome, now: float
) -> Transition:
    shooter = state.current_player
    time_used = 0 if state.is_break_prep else state.total_time_for_shot - state.time_left

    history = list(state.shot_history)

    if state.pending_safety_index is not None:
        idx = state.pending_safety_index
        history[idx] = replace(history[idx], safety_result=safety_result_for(outcome))

    # Classify, then let the foul rule override the recorded outcome
    fouls_after = next_foul_count(state.fouls(shooter), outcome)
    final = apply_foul_rule(outcome, fouls_after, settings)
    rack_winner = rack_winner_for(shooter, final)

    shot = ShotEvent(
        id=uuid.uuid4().hex,
        player=shooter,
        outcome=final,
        timestamp=now,
        time_used=time_used,
        is_extension_used=state.is_extension_active,
        rack_number=state.current_rack,
        safety_result=SafetyResult.PENDING if final is ShotOutcome.SAFETY else None,
    )
    history.append(shot)

    turn_passes = passes_turn(final)
    next_player = shooter.opponent if turn_passes else shooter

    p1_score = state.p1_score + (1 if rack_winner is PlayerId.ONE else 0)
    p2_score = state.p2_score + (1 if rack_winner is PlayerId.TWO else 0)

    winner = None
    if rack_winner:
        winner = match_winner(p1_score, p2_score, state.current_rack, settings)

    next_limit = settings.shot_time + (settings.first_shot_bonus if state.is_break_prep else 0)

    if winner:
        phase = GamePhase.MATCH_OVER
    elif rack_winner:
        phase = GamePhase.RACK_OVER
    elif final is ShotOutcome.PUSH_OUT:
        phase = GamePhase.PUSH_DECISION
    else:
        phase = GamePhase.AIMING

    new_state = replace(
        state,
        phase=phase,
        current_player=next_player,
        shot_history=tuple(history),
        p1_score=p1_score,
        p2_score=p2_score,
        p1_fouls=fouls_after if shooter is PlayerId.ONE else state.p1_fouls,
        p2_fouls=fouls_after if shooter is PlayerId.TWO else state.p2_fouls,
        is_first_shot_of_inning=turn_passes,
        is_first_shot_after_break=state.is_break_prep and not is_foul(outcome),
        is_break_prep=False,
        winner=winner,
        time_left=next_limit,
        total_time_for_shot=next_limit,
        is_extension_active=False,
        is_paused=False,
        pending_safety_index=len(history) - 1 if final is ShotOutcome.SAFETY else None,
    )
    return new_state, settings


def _push_decision(state: MatchState, settings: MatchSettings, event: PushDecision, now: float) -> Transition:
    if state.phase is not GamePhase.PUSH_DECISION:
        return state, settings

    new_state = replace(
        state,
        phase=GamePhase.AIMING,
        current_player=state.current_player if event.accept else state.current_player.opponent,
        is_first_shot_after_break=False,
        time_left=settings.shot_time,
        total_time_for_shot=settings.shot_time,
        is_extension_active=False,
    )
    return new_state, settings


def _next_rack(state: MatchState, settings: MatchSettings, event: NextRack, now: float) -> Transition:
    if state.phase is not GamePhase.RACK_OVER:
        return state, settings

    new_state = replace(
        state,
        phase=GamePhase.AIMING,
        is_break_prep=True,
        is_first_shot_after_break=False,
        current_player=event.breaker,
        current_rack=state.current_rack + 1,
        p1_extensions_remaining=settings.extensions_allowed,
        p2_extensions_remaining=settings.extensions_allowed,
        p1_fouls=0,
        p2_fouls=0,
        time_left=settings.shot_time,
        total_time_for_shot=settings.shot_time,
        is_first_shot_of_inning=True,
        is_extension_active=False,
        is_paused=False,
        winner=None,
    )
    return new_state, settings


# =========================================================
# UNDO
# =========================================================

def _undo(state: MatchState, settings: MatchSettings, event: Undo, now: float) -> Transition:
    if not state.match_history():
        return state, settings

    history = list(state.shot_history)
    last = history.pop()
    actor = last.player
    rack = last.rack_number

    p1_score, p2_score = state.p1_score, state.p2_score
    rack_winner = rack_winner_for(actor, last.outcome)
    if rack_winner is PlayerId.ONE:
        p1_score -= 1
    elif rack_winner is PlayerId.TWO:
        p2_score -= 1

    pending = None
    if len(history) > state.match_start_index and history[-1].outcome is ShotOutcome.SAFETY:
        # The undone shot was the one that judged this safety
        history[-1] = replace(history[-1], safety_result=SafetyResult.PENDING)
        pending = len(history) - 1

    rack_events = [
        e for e in history[state.match_start_index:] if e.rack_number == rack
    ]
    was_break = not rack_events

    if rack_events:
        first_of_inning = passes_turn(rack_events[-1].outcome)
    else:
        first_of_inning = True

    after_break = (
        len(rack_events) == 1
        and rack_events[0].outcome in BREAK_OUTCOMES
        and not is_foul(rack_events[0].outcome)
    )

    allowed = settings.extensions_allowed

    if rack == state.current_rack:
        # Same rack: hand back the extension the undone shot spent
        p1_ext = state.p1_extensions_remaining
        p2_ext = state.p2_extensions_remaining
        if last.is_extension_used:
            if actor is PlayerId.ONE:
                p1_ext = min(allowed, p1_ext + 1)
            else:
                p2_ext = min(allowed, p2_ext + 1)
    else:
        # Back into the previous rack: its counters were reset by NextRack
        p1_ext = max(0, allowed - extensions_used(rack_events, PlayerId.ONE))
        p2_ext = max(0, allowed - extensions_used(rack_events, PlayerId.TWO))

    budget = _shot_budget(settings, rack_events, last)

    new_state = replace(
        state,
        phase=GamePhase.ASSESSING,
        current_player=actor,
        current_rack=rack,
        shot_history=tuple(history),
        p1_score=p1_score,
        p2_score=p2_score,
        p1_fouls=consecutive_fouls(rack_events, PlayerId.ONE),
        p2_fouls=consecutive_fouls(rack_events, PlayerId.TWO),
        p1_extensions_remaining=p1_ext,
        p2_extensions_remaining=p2_ext,
        is_break_prep=was_break,
        is_first_shot_after_break=after_break,
        is_first_shot_of_inning=first_of_inning,
        is_extension_active=False,
        time_left=budget - last.time_used,
        total_time_for_shot=budget,
        pending_safety_index=pending,
        winner=None,
        is_paused=False,
    )
    return new_state, settings


def _shot_budget(settings: MatchSettings, rack_events, last: ShotEvent) -> int:
    """Time limit the undone shot was played under."""
    if not rack_events:
        return settings.shot_time

    budget = settings.shot_time
    if len(rack_events) == 1 and rack_events[0].outcome in BREAK_OUTCOMES:
        budget += settings.first_shot_bonus
    if last.is_extension_used:
        budget += settings.extension_time
    return budget


def _extensions_field(player: PlayerId) -> str:
    return "p1_extensions_remaining" if player is PlayerId.ONE else "p2_extensions_remaining"


_HANDLERS: Dict[Type, Callable[..., Transition]] = {
    StartMatch: _start,
    ShotStruck: _shot_struck,
    UseExtension: _use_extension,
    CallTimeFoul: _call_time_foul,
    RecordOutcome: _record_outcome,
    PushDecision: _push_decision,
    NextRack: _next_rack,
    UpdateSettings: _update_settings,
    TogglePause: _toggle_pause,
    Undo: _undo,
    Reset: _reset,
    Tick: _tick,
}
