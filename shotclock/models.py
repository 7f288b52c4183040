from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from shotclock.config import (
    DEFAULT_SHOT_TIME,
    DEFAULT_EXTENSION_TIME,
    DEFAULT_EXTENSIONS_ALLOWED,
    DEFAULT_FIRST_SHOT_BONUS,
    DEFAULT_WARNING_TIME,
    DEFAULT_P1_NAME,
    DEFAULT_P2_NAME,
)
from shotclock.exceptions import SettingsValidationError


class PlayerId(str, Enum):
    ONE = "ONE"
    TWO = "TWO"

    @property
    def opponent(self) -> "PlayerId":
        return PlayerId.TWO if self is PlayerId.ONE else PlayerId.ONE


class GamePhase(str, Enum):
    SETUP = "SETUP"
    AIMING = "AIMING"
    ASSESSING = "ASSESSING"
    PUSH_DECISION = "PUSH_DECISION"
    RACK_OVER = "RACK_OVER"
    MATCH_OVER = "MATCH_OVER"


class GameType(str, Enum):
    EIGHT_BALL = "EIGHT_BALL"
    ROTATION = "ROTATION"


class MatchFormat(str, Enum):
    SINGLE = "SINGLE"
    RACE = "RACE"
    SET = "SET"


class ShotOutcome(str, Enum):
    MADE = "MADE"
    MISSED = "MISSED"
    SAFETY = "SAFETY"
    FOUL = "FOUL"
    BREAK_LEGAL = "BREAK_LEGAL"
    BREAK_DRY = "BREAK_DRY"
    BREAK_FOUL = "BREAK_FOUL"
    TIME_FOUL = "TIME_FOUL"
    WIN = "WIN"
    EARLY_8_LOSS = "EARLY_8_LOSS"
    PUSH_OUT = "PUSH_OUT"
    THREE_FOUL_LOSS = "THREE_FOUL_LOSS"


class SafetyResult(str, Enum):
    PENDING = "PENDING"
    SUCCESSFUL = "SUCCESSFUL"
    UNSUCCESSFUL = "UNSUCCESSFUL"
    NEUTRAL = "NEUTRAL"


# --- SETTINGS ---

@dataclass(frozen=True)
class MatchSettings:
    shot_time: int = DEFAULT_SHOT_TIME
    extension_time: int = DEFAULT_EXTENSION_TIME
    extensions_allowed: int = DEFAULT_EXTENSIONS_ALLOWED
    first_shot_bonus: int = DEFAULT_FIRST_SHOT_BONUS
    warning_time: int = DEFAULT_WARNING_TIME
    audio_enabled: bool = True
    breaking_player: PlayerId = PlayerId.ONE
    format: MatchFormat = MatchFormat.SINGLE
    target: int = 1
    game_type: GameType = GameType.EIGHT_BALL
    three_foul_rule: bool = False

    def __post_init__(self):
        # Accept raw strings coming from JSON / UI forms
        object.__setattr__(self, "breaking_player", PlayerId(self.breaking_player))
        object.__setattr__(self, "format", MatchFormat(self.format))
        object.__setattr__(self, "game_type", GameType(self.game_type))

        if self.shot_time < 1:
            raise SettingsValidationError("shot_time must be at least 1 second")

        for name in ("extension_time", "extensions_allowed", "first_shot_bonus", "warning_time"):
            if getattr(self, name) < 0:
                raise SettingsValidationError(f"{name} must not be negative")

        if self.target < 1:
            raise SettingsValidationError("target must be at least 1")

        if self.format is MatchFormat.SINGLE:
            object.__setattr__(self, "target", 1)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["breaking_player"] = self.breaking_player.value
        d["format"] = self.format.value
        d["game_type"] = self.game_type.value
        return d

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "MatchSettings":
        known = MatchSettings.__dataclass_fields__.keys()
        unknown = set(d) - set(known)
        if unknown:
            raise SettingsValidationError(f"Unknown setting(s): {sorted(unknown)}")
        try:
            return MatchSettings(**d)
        except SettingsValidationError:
            raise
        except (TypeError, ValueError) as e:
            raise SettingsValidationError(str(e)) from e


# --- SHOT LOG ---

@dataclass(frozen=True)
class ShotEvent:
    id: str
    player: PlayerId
    outcome: ShotOutcome
    timestamp: float
    time_used: int
    is_extension_used: bool
    rack_number: int
    safety_result: Optional[SafetyResult] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "player": self.player.value,
            "outcome": self.outcome.value,
            "timestamp": self.timestamp,
            "time_used": self.time_used,
            "is_extension_used": self.is_extension_used,
            "rack_number": self.rack_number,
            "safety_result": self.safety_result.value if self.safety_result else None,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "ShotEvent":
        safety = d.get("safety_result")
        return ShotEvent(
            id=str(d["id"]),
            player=PlayerId(d["player"]),
            outcome=ShotOutcome(d["outcome"]),
            timestamp=float(d["timestamp"]),
            time_used=int(d["time_used"]),
            is_extension_used=bool(d["is_extension_used"]),
            rack_number=int(d["rack_number"]),
            safety_result=SafetyResult(safety) if safety else None,
        )


# --- MATCH STATE ---

@dataclass(frozen=True)
class MatchState:
    phase: GamePhase = GamePhase.SETUP
    current_player: PlayerId = PlayerId.ONE
    time_left: int = DEFAULT_SHOT_TIME
    total_time_for_shot: int = DEFAULT_SHOT_TIME
    is_paused: bool = False
    is_break_prep: bool = True
    is_first_shot_after_break: bool = False
    is_extension_active: bool = False
    is_first_shot_of_inning: bool = True
    p1_name: str = DEFAULT_P1_NAME
    p2_name: str = DEFAULT_P2_NAME
    p1_score: int = 0
    p2_score: int = 0
    current_rack: int = 1
    p1_extensions_remaining: int = DEFAULT_EXTENSIONS_ALLOWED
    p2_extensions_remaining: int = DEFAULT_EXTENSIONS_ALLOWED
    p1_fouls: int = 0
    p2_fouls: int = 0
    winner: Optional[PlayerId] = None
    shot_history: Tuple[ShotEvent, ...] = field(default_factory=tuple)
    pending_safety_index: Optional[int] = None
    match_start_index: int = 0

    def score(self, player: PlayerId) -> int:
        return self.p1_score if player is PlayerId.ONE else self.p2_score

    def fouls(self, player: PlayerId) -> int:
        return self.p1_fouls if player is PlayerId.ONE else self.p2_fouls

    def extensions_remaining(self, player: PlayerId) -> int:
        if player is PlayerId.ONE:
            return self.p1_extensions_remaining
        return self.p2_extensions_remaining

    def name(self, player: PlayerId) -> str:
        return self.p1_name if player is PlayerId.ONE else self.p2_name

    def match_history(self) -> Tuple[ShotEvent, ...]:
        return self.shot_history[self.match_start_index:]

    def rack_history(self, rack: Optional[int] = None) -> Tuple[ShotEvent, ...]:
        rack = self.current_rack if rack is None else rack
        return tuple(e for e in self.match_history() if e.rack_number == rack)

    @property
    def is_clock_running(self) -> bool:
        return (
            self.phase is GamePhase.AIMING
            and not self.is_paused
            and not self.is_break_prep
        )


@dataclass(frozen=True)
class MatchSnapshot:
    phase: GamePhase
    current_player: PlayerId
    p1_name: str
    p2_name: str
    p1_score: int
    p2_score: int
    current_rack: int
    time_left: int
    total_time_for_shot: int
    is_paused: bool
    is_break_prep: bool
    is_extension_active: bool
    is_warning: bool
    p1_fouls: int
    p2_fouls: int
    p1_extensions_remaining: int
    p2_extensions_remaining: int
    shot_history: Tuple[ShotEvent, ...]
    winner: Optional[PlayerId]
