import pytest

from shotclock.events import (
    NextRack,
    PushDecision,
    RecordOutcome,
    StartMatch,
    Tick,
    UpdateSettings,
    parse_action,
)
from shotclock.exceptions import ActionFormatError, ShotClockError
from shotclock.match_session import MatchSession
from shotclock.models import GamePhase, MatchFormat, MatchSettings, PlayerId, ShotOutcome


# ---------------------------------------------------------
# Helpers
# ---------------------------------------------------------

def shot(outcome):
    return [{"action": "shot"}, {"action": "outcome", "outcome": outcome}]


def make_actions(rack_winners, p1="Ann", p2="Bob"):
    """
    rack_winners = ["ONE", "TWO", ...]; the winner breaks and runs out
    every rack.
    """
    actions = [{"action": "start", "p1": p1, "p2": p2}]
    for i, w in enumerate(rack_winners):
        if i > 0:
            actions.append({"action": "next_rack", "breaker": w})
        elif w == "TWO":
            actions += shot("BREAK_DRY")
            actions += shot("WIN")
            continue
        actions += shot("BREAK_LEGAL")
        actions += shot("WIN")
    return actions


# ---------------------------------------------------------
# Validation branches
# ---------------------------------------------------------

def test_actions_must_be_list():
    session = MatchSession()

    with pytest.raises(ValueError):
        session.replay("not_a_list")


def test_invalid_action_missing_key():
    session = MatchSession()

    with pytest.raises(ActionFormatError):
        session.replay([{"outcome": "MADE"}])


def test_invalid_outcome_atomic():
    session = MatchSession()

    actions = [
        {"action": "start", "p1": "Ann", "p2": "Bob"},
        {"action": "outcome", "outcome": "WRONG"},
    ]

    with pytest.raises(ActionFormatError):
        session.replay(actions)

    assert session.get_timeline() == []
    assert session.engine.state.phase is GamePhase.SETUP


def test_failed_replay_keeps_previous_result():
    session = MatchSession()
    session.replay(make_actions(["ONE"]))
    before = session.get_snapshot()

    with pytest.raises(ShotClockError):
        session.replay([{"action": "fly"}])

    assert session.get_snapshot() == before


# ---------------------------------------------------------
# Empty snapshot branch
# ---------------------------------------------------------

def test_get_snapshot_when_empty():
    session = MatchSession()

    with pytest.raises(RuntimeError):
        session.get_snapshot()


# ---------------------------------------------------------
# Full replay
# ---------------------------------------------------------

def test_race_replay():
    session = MatchSession(MatchSettings(format=MatchFormat.RACE, target=3))

    timeline = session.replay(make_actions(["ONE", "TWO", "ONE", "ONE"]))
    snapshot = session.get_snapshot()

    assert timeline[-1] == snapshot
    assert snapshot.phase is GamePhase.MATCH_OVER
    assert snapshot.winner is PlayerId.ONE
    assert (snapshot.p1_score, snapshot.p2_score) == (3, 1)
    assert snapshot.current_rack == 4


def test_replay_starts_from_fresh_engine():
    session = MatchSession(MatchSettings(format=MatchFormat.RACE, target=5))

    session.replay(make_actions(["ONE", "ONE"]))
    session.replay(make_actions(["TWO"]))

    snapshot = session.get_snapshot()
    assert (snapshot.p1_score, snapshot.p2_score) == (0, 1)


def test_timeline_has_one_snapshot_per_action():
    session = MatchSession()
    actions = make_actions(["ONE"]) + [{"action": "undo"}]

    timeline = session.replay(actions)

    assert len(timeline) == len(actions)
    assert session.get_timeline() == timeline
    assert timeline[-1].phase is GamePhase.ASSESSING


def test_reset():
    session = MatchSession()
    session.replay(make_actions(["ONE"]))

    session.reset()

    assert session.get_timeline() == []
    assert session.engine.state.shot_history == ()


# ---------------------------------------------------------
# Export
# ---------------------------------------------------------

def test_export_history():
    session = MatchSession()
    session.replay(make_actions(["TWO"]))

    history = session.export_history()

    assert [e["outcome"] for e in history] == ["BREAK_DRY", "WIN"]
    assert [e["player"] for e in history] == ["ONE", "TWO"]
    assert all(e["rack_number"] == 1 for e in history)


def test_player_history():
    session = MatchSession()
    session.replay(make_actions(["TWO"]))

    shots = session.player_history(PlayerId.TWO)

    assert len(shots) == 1
    assert shots[0]["outcome"] == "WIN"


# ---------------------------------------------------------
# Action parsing
# ---------------------------------------------------------

@pytest.mark.parametrize("data, expected", [
    ({"action": "start", "p1": "Ann", "p2": "Bob"}, StartMatch("Ann", "Bob")),
    ({"action": "outcome", "outcome": "SAFETY"}, RecordOutcome(ShotOutcome.SAFETY)),
    ({"action": "push", "accept": False}, PushDecision(False)),
    ({"action": "next_rack", "breaker": "TWO"}, NextRack(PlayerId.TWO)),
    ({"action": "tick"}, Tick()),
])
def test_parse_action(data, expected):
    assert parse_action(data) == expected


def test_parse_settings_action():
    event = parse_action({
        "action": "settings",
        "settings": {"format": "RACE", "target": 7},
        "p1": "Cy",
    })

    assert isinstance(event, UpdateSettings)
    assert event.settings.format is MatchFormat.RACE
    assert event.settings.target == 7
    assert event.p1_name == "Cy"
    assert event.p2_name is None


@pytest.mark.parametrize("data", [
    "shot",
    {"action": "fly"},
    {"action": "outcome"},
    {"action": "outcome", "outcome": "POTTED"},
    {"action": "push", "accept": "yes"},
    {"action": "next_rack", "breaker": "THREE"},
    {"action": "settings", "settings": {"target": 0}},
])
def test_parse_action_errors(data):
    with pytest.raises(ActionFormatError):
        parse_action(data)
