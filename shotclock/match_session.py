import logging
from typing import Any, Dict, Iterable, List, Optional

from shotclock.engine import MatchEngine
from shotclock.events import parse_action
from shotclock.models import MatchSettings, MatchSnapshot, PlayerId
from shotclock.observers import MatchObserver

logger = logging.getLogger(__name__)


class MatchSession:
    """
    Scripted match session.

    Responsibilities:
    - Manage one MatchEngine instance
    - Bulk replay action dicts (atomic)
    - Store timeline snapshots
    - Export the shot log
    """

    def __init__(
        self,
        settings: Optional[MatchSettings] = None,
        observers: Iterable[MatchObserver] = (),
    ):
        self._settings = settings or MatchSettings()
        self._observers = list(observers)
        self._engine = MatchEngine(self._settings, self._observers)
        self._timeline: List[MatchSnapshot] = []

    @property
    def engine(self) -> MatchEngine:
        return self._engine

    # ---------------------------------------------------------
    # Core API
    # ---------------------------------------------------------

    def replay(self, actions: List[Dict[str, Any]]) -> List[MatchSnapshot]:
        """
        Replay a list of action dicts from a fresh engine.
        Atomic: if any action fails -> no state mutation.
        """
        if not isinstance(actions, list):
            raise ValueError("actions must be a list")

        # Parse first (validation stage)
        events = [parse_action(a) for a in actions]

        temp_engine = MatchEngine(self._settings, self._observers)
        temp_timeline: List[MatchSnapshot] = []

        for event in events:
            temp_timeline.append(temp_engine.process_event(event))

        # If everything succeeds -> commit
        self._engine = temp_engine
        self._timeline = temp_timeline

        logger.info("Replayed %d action(s)", len(events))

        return list(self._timeline)

    def get_snapshot(self) -> MatchSnapshot:
        if not self._timeline:
            raise RuntimeError("No actions replayed")

        return self._timeline[-1]

    def get_timeline(self) -> List[MatchSnapshot]:
        return list(self._timeline)

    def export_history(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self._engine.state.shot_history]

    def player_history(self, player: PlayerId) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self._engine.player_history(player)]

    def reset(self):
        self._engine = MatchEngine(self._settings, self._observers)
        self._timeline = []
