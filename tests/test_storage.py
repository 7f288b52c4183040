import json

import pytest

from shotclock.exceptions import SessionFormatError, SettingsValidationError
from shotclock.models import GamePhase, MatchFormat, PlayerId, SafetyResult, ShotOutcome
from shotclock.storage import load_match, save_match, state_from_dict, state_to_dict

from helpers import create_engine, legal_break, play


def test_save_and_load_round_trip(tmp_path):
    engine = create_engine(format=MatchFormat.RACE, target=3, three_foul_rule=True)
    legal_break(engine)
    play(engine, ShotOutcome.SAFETY)
    path = tmp_path / "session.json"

    save_match(path, engine)
    restored = load_match(path)

    assert restored.state == engine.state
    assert restored.settings == engine.settings
    assert restored.state.shot_history[1].safety_result is SafetyResult.PENDING


def test_restored_engine_keeps_playing(tmp_path):
    engine = create_engine(format=MatchFormat.RACE, target=1)
    legal_break(engine)
    path = tmp_path / "session.json"
    save_match(path, engine)

    restored = load_match(path)
    play(restored, ShotOutcome.WIN)

    assert restored.state.phase is GamePhase.MATCH_OVER
    assert restored.state.winner is PlayerId.ONE


def test_saved_file_uses_plain_values(tmp_path):
    engine = create_engine()
    legal_break(engine)
    path = tmp_path / "session.json"

    save_match(path, engine)
    data = json.loads(path.read_text(encoding="utf-8"))

    assert data["schema_version"] == 1
    assert data["state"]["phase"] == "AIMING"
    assert data["state"]["shot_history"][0]["outcome"] == "BREAK_LEGAL"
    assert data["settings"]["format"] == "SINGLE"


def test_schema_mismatch(tmp_path):
    path = tmp_path / "session.json"
    path.write_text(json.dumps({"schema_version": 99, "settings": {}, "state": {}}))

    with pytest.raises(SessionFormatError):
        load_match(path)


def test_missing_fields(tmp_path):
    path = tmp_path / "session.json"
    path.write_text(json.dumps({"schema_version": 1, "state": {}}))

    with pytest.raises(SessionFormatError):
        load_match(path)


def test_invalid_settings_in_file(tmp_path):
    path = tmp_path / "session.json"
    path.write_text(json.dumps({
        "schema_version": 1,
        "settings": {"shot_time": 0},
        "state": {},
    }))

    with pytest.raises(SettingsValidationError):
        load_match(path)


@pytest.mark.parametrize("patch", [
    {"phase": "WARMUP"},
    {"current_player": "THREE"},
    {"volume": 3},
])
def test_invalid_state_fields(patch):
    data = state_to_dict(create_engine().state)
    data.update(patch)

    with pytest.raises(SessionFormatError):
        state_from_dict(data)


def test_malformed_shot_entry():
    engine = create_engine()
    legal_break(engine)
    data = state_to_dict(engine.state)
    data["shot_history"][0]["time_used"] = None

    with pytest.raises(SessionFormatError):
        state_from_dict(data)


def test_state_must_be_an_object():
    with pytest.raises(SessionFormatError):
        state_from_dict(["AIMING"])


def test_top_level_must_be_an_object(tmp_path):
    path = tmp_path / "session.json"
    path.write_text(json.dumps([1, 2, 3]))

    with pytest.raises(SessionFormatError):
        load_match(path)
