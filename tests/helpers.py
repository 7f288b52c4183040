from shotclock.engine import MatchEngine
from shotclock.models import MatchSettings, ShotOutcome
from shotclock.observers import MatchObserver


class RecordingObserver(MatchObserver):

    def __init__(self):
        self.calls = []

    def on_match_started(self, state):
        self.calls.append(("started", state.current_rack))

    def on_shot_recorded(self, event):
        self.calls.append(("shot", event.outcome))

    def on_turn_change(self, player):
        self.calls.append(("turn", player))

    def on_extension(self, player, seconds):
        self.calls.append(("extension", player, seconds))

    def on_time_warning(self, seconds):
        self.calls.append(("warning", seconds))

    def on_countdown(self, seconds):
        self.calls.append(("countdown", seconds))

    def on_time_expired(self):
        self.calls.append(("expired",))

    def on_session_end(self, player, name, shots):
        self.calls.append(("session_end", player, name, len(shots)))

    def names(self):
        return [c[0] for c in self.calls]


def create_engine(observers=(), **overrides):
    engine = MatchEngine(MatchSettings(**overrides), observers, clock_fn=lambda: 1000.0)
    engine.start("Ann", "Bob")
    return engine


def play(engine, outcome):
    engine.shot_struck()
    return engine.record_outcome(outcome)


def legal_break(engine):
    return play(engine, ShotOutcome.BREAK_LEGAL)


def win_rack(engine, player):
    """Hand the table to `player` if needed, then let them win the rack."""
    if engine.state.current_player is not player:
        play(engine, ShotOutcome.BREAK_DRY if engine.state.is_break_prep else ShotOutcome.MISSED)
    return play(engine, ShotOutcome.WIN)


