import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict

from shotclock.config import SCHEMA_VERSION
from shotclock.engine import MatchEngine
from shotclock.exceptions import SessionFormatError
from shotclock.models import GamePhase, MatchSettings, MatchState, PlayerId, ShotEvent

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {"schema_version", "settings", "state"}


def state_to_dict(state: MatchState) -> Dict[str, Any]:
    d = asdict(state)
    d["phase"] = state.phase.value
    d["current_player"] = state.current_player.value
    d["winner"] = state.winner.value if state.winner else None
    d["shot_history"] = [e.to_dict() for e in state.shot_history]
    return d


def state_from_dict(d: Dict[str, Any]) -> MatchState:
    if not isinstance(d, dict):
        raise SessionFormatError("state must be a JSON object")

    d = dict(d)
    unknown = set(d) - set(MatchState.__dataclass_fields__)
    if unknown:
        raise SessionFormatError(f"Unknown state field(s): {sorted(unknown)}")

    try:
        d["phase"] = GamePhase(d.get("phase", GamePhase.SETUP.value))
        d["current_player"] = PlayerId(d.get("current_player", PlayerId.ONE.value))
        d["winner"] = PlayerId(d["winner"]) if d.get("winner") else None
        d["shot_history"] = tuple(ShotEvent.from_dict(e) for e in d.get("shot_history", []))
    except (KeyError, TypeError, ValueError) as e:
        raise SessionFormatError(f"Invalid state: {e}") from e

    return MatchState(**d)


def save_match(path: Path, engine: MatchEngine):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump({
            "schema_version": SCHEMA_VERSION,
            "settings": engine.settings.to_dict(),
            "state": state_to_dict(engine.state),
        }, f, indent=4)

    logger.info("Session saved to %s", path)


def load_match(path: Path, **engine_kwargs) -> MatchEngine:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise SessionFormatError("Session file must contain a JSON object")

    missing = REQUIRED_FIELDS - set(data.keys())
    if missing:
        raise SessionFormatError(f"Missing field(s): {missing}")

    if data["schema_version"] != SCHEMA_VERSION:
        raise SessionFormatError("Unsupported schema_version")

    settings = MatchSettings.from_dict(data["settings"])
    state = state_from_dict(data["state"])

    logger.info("Session loaded from %s", path)

    return MatchEngine.restore(state, settings, **engine_kwargs)
