import logging
import time
from typing import Callable, Iterable, List, Optional

from shotclock.config import CALLOUT_THRESHOLDS, COUNTDOWN_FROM
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
    MatchSnapshot,
    MatchState,
    PlayerId,
    ShotEvent,
    ShotOutcome,
)
from shotclock.observers import MatchObserver
from shotclock.rules import available_outcomes, player_shots
from shotclock.transitions import transition

logger = logging.getLogger(__name__)


class MatchEngine:
    """
    Live match controller.

    Responsibilities:
    - Own the current MatchState and MatchSettings
    - Route every input (user action or clock tick) through one entry point
    - Keep an attached ShotClock in step with the phase
    - Notify collaborators (callouts, profile store) without depending on them
    """

    def __init__(
        self,
        settings: Optional[MatchSettings] = None,
        observers: Iterable[MatchObserver] = (),
        clock_fn: Callable[[], float] = time.time,
    ):
        self._settings = settings or MatchSettings()
        self._state = MatchState(
            time_left=self._settings.shot_time,
            total_time_for_shot=self._settings.shot_time,
            p1_extensions_remaining=self._settings.extensions_allowed,
            p2_extensions_remaining=self._settings.extensions_allowed,
        )
        self._observers: List[MatchObserver] = list(observers)
        self._clock_fn = clock_fn
        self._clock = None

    @classmethod
    def restore(
        cls,
        state: MatchState,
        settings: MatchSettings,
        observers: Iterable[MatchObserver] = (),
    ) -> "MatchEngine":
        engine = cls(settings, observers)
        engine._state = state
        return engine

    @property
    def state(self) -> MatchState:
        return self._state

    @property
    def settings(self) -> MatchSettings:
        return self._settings

    # =========================================================
    # PUBLIC API
    # =========================================================

    def process_event(self, event: MatchEvent) -> MatchSnapshot:
        """
        Apply one input event and return the resulting snapshot.

        Inputs whose guard does not hold are ignored.
        """
        prev = self._state
        new_state, new_settings = transition(prev, self._settings, event, now=self._clock_fn())

        if new_state is prev and new_settings is self._settings:
            if not isinstance(event, Tick):
                logger.debug("Ignored %s in phase %s", type(event).__name__, prev.phase.value)
            return self.snapshot()

        if self._history_dropped(prev, new_state, event):
            self._end_session(prev)

        self._state = new_state
        self._settings = new_settings

        self._log_transition(prev, event)
        self._notify(prev, event)
        self._sync_clock()

        return self.snapshot()

    def start(self, p1_name: str = "", p2_name: str = "") -> MatchSnapshot:
        return self.process_event(StartMatch(p1_name, p2_name))

    def shot_struck(self) -> MatchSnapshot:
        return self.process_event(ShotStruck())

    def use_extension(self) -> MatchSnapshot:
        return self.process_event(UseExtension())

    def call_time_foul(self) -> MatchSnapshot:
        return self.process_event(CallTimeFoul())

    def record_outcome(self, outcome: ShotOutcome) -> MatchSnapshot:
        return self.process_event(RecordOutcome(ShotOutcome(outcome)))

    def push_decision(self, accept: bool) -> MatchSnapshot:
        return self.process_event(PushDecision(accept))

    def next_rack(self, breaker: PlayerId) -> MatchSnapshot:
        return self.process_event(NextRack(PlayerId(breaker)))

    def update_settings(
        self,
        settings: MatchSettings,
        p1_name: Optional[str] = None,
        p2_name: Optional[str] = None,
    ) -> MatchSnapshot:
        return self.process_event(UpdateSettings(settings, p1_name, p2_name))

    def toggle_pause(self) -> MatchSnapshot:
        return self.process_event(TogglePause())

    def undo(self) -> MatchSnapshot:
        return self.process_event(Undo())

    def reset(self) -> MatchSnapshot:
        return self.process_event(Reset())

    def tick(self) -> MatchSnapshot:
        return self.process_event(Tick())

    def available_outcomes(self) -> List[ShotOutcome]:
        return available_outcomes(self._state, self._settings)

    def player_history(self, player: PlayerId) -> List[ShotEvent]:
        return player_shots(self._state.shot_history, PlayerId(player))

    # =========================================================
    # CLOCK
    # =========================================================

    def attach_clock(self, clock) -> None:
        self._clock = clock
        self._sync_clock()

    def detach_clock(self) -> None:
        self._clock = None

    def _sync_clock(self):
        if self._clock is not None:
            self._clock.sync(self._state.is_clock_running)

    # =========================================================
    # COLLABORATORS
    # =========================================================

    def add_observer(self, observer: MatchObserver) -> None:
        self._observers.append(observer)

    def _emit(self, hook: str, *args):
        for observer in self._observers:
            try:
                getattr(observer, hook)(*args)
            except Exception:
                logger.exception("Observer %r failed in %s", observer, hook)

    def _notify(self, prev: MatchState, event: MatchEvent):
        state = self._state

        if isinstance(event, StartMatch):
            self._emit("on_match_started", state)

        if len(state.shot_history) > len(prev.shot_history):
            self._emit("on_shot_recorded", state.shot_history[-1])

        if state.is_extension_active and not prev.is_extension_active:
            self._emit("on_extension", state.current_player, self._settings.extension_time)

        if (
            state.phase is GamePhase.AIMING
            and state.current_player is not prev.current_player
            and not isinstance(event, (StartMatch, NextRack))
        ):
            self._emit("on_turn_change", state.current_player)

        if isinstance(event, Tick) and self._settings.audio_enabled:
            self._emit_callouts(state.time_left)

    def _emit_callouts(self, time_left: int):
        if time_left in CALLOUT_THRESHOLDS:
            self._emit("on_time_warning", time_left)
        if 0 < time_left <= COUNTDOWN_FROM:
            self._emit("on_countdown", time_left)
        if time_left == 0:
            self._emit("on_time_expired")

    @staticmethod
    def _history_dropped(prev: MatchState, new: MatchState, event: MatchEvent) -> bool:
        if isinstance(event, Undo) or not prev.shot_history:
            return False
        return not new.shot_history

    def _end_session(self, prev: MatchState):
        for player in (PlayerId.ONE, PlayerId.TWO):
            shots = player_shots(prev.shot_history, player)
            if shots:
                self._emit("on_session_end", player, prev.name(player), shots)

    # =========================================================
    # LOGGING
    # =========================================================

    def _log_transition(self, prev: MatchState, event: MatchEvent):
        state = self._state

        if isinstance(event, StartMatch):
            logger.info(
                "Match started: %s vs %s (%s, target %d), %s breaks",
                state.p1_name,
                state.p2_name,
                self._settings.format.value,
                self._settings.target,
                state.name(state.current_player),
            )
        elif isinstance(event, Reset):
            logger.info("Session reset")
        elif isinstance(event, Undo):
            logger.info("Undid %s by %s", prev.shot_history[-1].outcome.value, prev.name(state.current_player))

        if state.phase is not prev.phase:
            if state.phase is GamePhase.RACK_OVER:
                logger.info(
                    "Rack %d over: %d-%d",
                    state.current_rack,
                    state.p1_score,
                    state.p2_score,
                )
            elif state.phase is GamePhase.MATCH_OVER and state.winner:
                logger.info(
                    "Match over: %s wins %d-%d",
                    state.name(state.winner),
                    state.p1_score,
                    state.p2_score,
                )

    # =========================================================
    # SNAPSHOT
    # =========================================================

    def snapshot(self) -> MatchSnapshot:
        state = self._state

        return MatchSnapshot(
            phase=state.phase,
            current_player=state.current_player,
            p1_name=state.p1_name,
            p2_name=state.p2_name,
            p1_score=state.p1_score,
            p2_score=state.p2_score,
            current_rack=state.current_rack,
            time_left=state.time_left,
            total_time_for_shot=state.total_time_for_shot,
            is_paused=state.is_paused,
            is_break_prep=state.is_break_prep,
            is_extension_active=state.is_extension_active,
            is_warning=state.is_clock_running and state.time_left <= self._settings.warning_time,
            p1_fouls=state.p1_fouls,
            p2_fouls=state.p2_fouls,
            p1_extensions_remaining=state.p1_extensions_remaining,
            p2_extensions_remaining=state.p2_extensions_remaining,
            shot_history=state.shot_history,
            winner=state.winner,
        )
