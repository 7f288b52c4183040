"""
Collaborator contract for the match engine.

Audio/speech cues and the player-profile store plug in here. The engine
calls every hook fire-and-forget: a failing observer is logged and never
interrupts the match.
"""

import logging
from typing import List

from shotclock.models import MatchState, PlayerId, ShotEvent
from shotclock.stats import session_summary


class MatchObserver:
    """Base observer. Every hook is a no-op; override what you need."""

    def on_match_started(self, state: MatchState) -> None:
        pass

    def on_shot_recorded(self, event: ShotEvent) -> None:
        pass

    def on_turn_change(self, player: PlayerId) -> None:
        pass

    def on_extension(self, player: PlayerId, seconds: int) -> None:
        pass

    def on_time_warning(self, seconds: int) -> None:
        pass

    def on_countdown(self, seconds: int) -> None:
        pass

    def on_time_expired(self) -> None:
        pass

    def on_session_end(self, player: PlayerId, name: str, shots: List[ShotEvent]) -> None:
        pass


class LoggingObserver(MatchObserver):
    """Writes every cue to a logger; used by the CLI in place of speech output."""

    def __init__(self, logger: logging.Logger = None):
        self.logger = logger or logging.getLogger("shotclock.cues")

    def on_match_started(self, state):
        self.logger.info("Rack %d: break", state.current_rack)

    def on_turn_change(self, player):
        self.logger.info("Player %s to shoot", player.value)

    def on_extension(self, player, seconds):
        self.logger.info("Extension: +%ds for player %s", seconds, player.value)

    def on_time_warning(self, seconds):
        self.logger.info("%d seconds", seconds)

    def on_countdown(self, seconds):
        self.logger.debug("countdown %d", seconds)

    def on_time_expired(self):
        self.logger.warning("Time violation")

    def on_session_end(self, player, name, shots):
        summary = session_summary(shots)
        self.logger.info(
            "Session closed for %s: %d shot(s), %d made, %d safeties, %d fouls, avg %.1fs",
            name,
            summary.shots,
            summary.made,
            summary.safeties,
            summary.fouls,
            summary.avg_time,
        )
