import pytest

from shotclock.models import PlayerId, SafetyResult, ShotEvent, ShotOutcome
from shotclock.stats import match_stats, player_stats, session_summary, timing_summary

from helpers import create_engine, legal_break, play


def make_shot(player, outcome, time_used=0, safety_result=None):
    return ShotEvent(
        id=f"{player.value}-{outcome.value}-{time_used}",
        player=player,
        outcome=outcome,
        timestamp=0.0,
        time_used=time_used,
        is_extension_used=False,
        rack_number=1,
        safety_result=safety_result,
    )


# ---------------------------------------------------------
# Timing
# ---------------------------------------------------------

def test_timing_summary():
    summary = timing_summary([10, 20, 30])

    assert summary.count == 3
    assert summary.min == 10
    assert summary.max == 30
    assert summary.mean == pytest.approx(20.0)
    assert summary.std_dev == pytest.approx(8.165, abs=1e-3)


def test_timing_summary_empty():
    summary = timing_summary([])

    assert summary.count == 0
    assert summary.mean == 0.0
    assert summary.std_dev == 0.0


# ---------------------------------------------------------
# Per-player counts
# ---------------------------------------------------------

def test_player_stats_counts():
    history = [
        make_shot(PlayerId.ONE, ShotOutcome.BREAK_LEGAL),
        make_shot(PlayerId.ONE, ShotOutcome.MADE, 12),
        make_shot(PlayerId.ONE, ShotOutcome.SAFETY, 20, SafetyResult.SUCCESSFUL),
        make_shot(PlayerId.TWO, ShotOutcome.FOUL, 30),
        make_shot(PlayerId.ONE, ShotOutcome.SAFETY, 25, SafetyResult.UNSUCCESSFUL),
        make_shot(PlayerId.TWO, ShotOutcome.MADE, 8),
        make_shot(PlayerId.TWO, ShotOutcome.MISSED, 15),
        make_shot(PlayerId.ONE, ShotOutcome.TIME_FOUL, 63),
    ]

    stats = player_stats(history, PlayerId.ONE)

    assert stats.total == 5
    assert stats.made == 2
    assert stats.missed == 0
    assert stats.safeties == 2
    assert stats.fouls == 1
    assert stats.time_violations == 1
    assert stats.successful_safeties == 1
    assert stats.potting_accuracy == pytest.approx(0.4)
    assert stats.safety_success_ratio == pytest.approx(0.5)
    assert stats.timing.max == 63

    other = player_stats(history, PlayerId.TWO)
    assert (other.total, other.made, other.missed, other.fouls) == (3, 1, 1, 1)


def test_player_without_shots():
    stats = player_stats([], PlayerId.TWO)

    assert stats.total == 0
    assert stats.potting_accuracy == 0.0
    assert stats.safety_success_ratio == 0.0
    assert stats.timing.count == 0


def test_match_stats_from_live_engine():
    engine = create_engine(first_shot_bonus=0)
    legal_break(engine)
    for _ in range(7):
        engine.tick()
    play(engine, ShotOutcome.SAFETY)
    play(engine, ShotOutcome.FOUL)

    stats = match_stats(engine.state.shot_history)

    assert stats[PlayerId.ONE].safeties == 1
    assert stats[PlayerId.ONE].successful_safeties == 1
    assert stats[PlayerId.ONE].timing.max == 7
    assert stats[PlayerId.TWO].fouls == 1


# ---------------------------------------------------------
# Session summary
# ---------------------------------------------------------

def test_session_summary_counts_wins_as_made():
    shots = [
        make_shot(PlayerId.ONE, ShotOutcome.MADE, 10),
        make_shot(PlayerId.ONE, ShotOutcome.WIN, 20),
        make_shot(PlayerId.ONE, ShotOutcome.FOUL, 30),
        make_shot(PlayerId.ONE, ShotOutcome.SAFETY, 40),
    ]

    summary = session_summary(shots)

    assert summary.shots == 4
    assert summary.made == 2
    assert summary.fouls == 1
    assert summary.safeties == 1
    assert summary.avg_time == pytest.approx(25.0)


def test_session_summary_empty():
    summary = session_summary([])

    assert summary.shots == 0
    assert summary.avg_time == 0.0
