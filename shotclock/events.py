"""
Input events accepted by the match engine.

Every user action and every clock tick is expressed as one of these
values and routed through ``MatchEngine.process_event``.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from shotclock.exceptions import ActionFormatError
from shotclock.models import MatchSettings, PlayerId, ShotOutcome


@dataclass(frozen=True)
class StartMatch:
    p1_name: str = ""
    p2_name: str = ""


@dataclass(frozen=True)
class ShotStruck:
    pass


@dataclass(frozen=True)
class UseExtension:
    pass


@dataclass(frozen=True)
class CallTimeFoul:
    pass


@dataclass(frozen=True)
class RecordOutcome:
    outcome: ShotOutcome


@dataclass(frozen=True)
class PushDecision:
    accept: bool


@dataclass(frozen=True)
class NextRack:
    breaker: PlayerId


@dataclass(frozen=True)
class UpdateSettings:
    settings: MatchSettings
    p1_name: Optional[str] = None
    p2_name: Optional[str] = None


@dataclass(frozen=True)
class TogglePause:
    pass


@dataclass(frozen=True)
class Undo:
    pass


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class Tick:
    pass


MatchEvent = Union[
    StartMatch,
    ShotStruck,
    UseExtension,
    CallTimeFoul,
    RecordOutcome,
    PushDecision,
    NextRack,
    UpdateSettings,
    TogglePause,
    Undo,
    Reset,
    Tick,
]


_SIMPLE_ACTIONS = {
    "shot": ShotStruck,
    "extension": UseExtension,
    "time_foul": CallTimeFoul,
    "pause": TogglePause,
    "undo": Undo,
    "reset": Reset,
    "tick": Tick,
}


def parse_action(data: Dict[str, Any]) -> MatchEvent:
    """
    Convert a JSON action dict into an event.

    Supported shapes:
      {"action": "start", "p1": "Ann", "p2": "Bob"}
      {"action": "outcome", "outcome": "MADE"}
      {"action": "push", "accept": true}
      {"action": "next_rack", "breaker": "TWO"}
      {"action": "settings", "settings": {...}, "p1": "...", "p2": "..."}
      {"action": "shot" | "extension" | "time_foul" | "pause" | "undo" | "reset" | "tick"}
    """
    if not isinstance(data, dict) or "action" not in data:
        raise ActionFormatError(f"invalid action format: {data!r}")

    action = data["action"]

    if action in _SIMPLE_ACTIONS:
        return _SIMPLE_ACTIONS[action]()

    try:
        if action == "start":
            return StartMatch(p1_name=str(data.get("p1", "")), p2_name=str(data.get("p2", "")))

        if action == "outcome":
            return RecordOutcome(ShotOutcome(data["outcome"]))

        if action == "push":
            accept = data["accept"]
            if not isinstance(accept, bool):
                raise ActionFormatError("push accept must be a boolean")
            return PushDecision(accept)

        if action == "next_rack":
            return NextRack(PlayerId(data["breaker"]))

        if action == "settings":
            return UpdateSettings(
                settings=MatchSettings.from_dict(data["settings"]),
                p1_name=data.get("p1"),
                p2_name=data.get("p2"),
            )
    except KeyError as e:
        raise ActionFormatError(f"action {action!r} missing field {e}") from e
    except ActionFormatError:
        raise
    except ValueError as e:
        raise ActionFormatError(f"action {action!r}: {e}") from e

    raise ActionFormatError(f"unknown action: {action!r}")
