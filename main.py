import argparse
import json
import logging
import sys
from pathlib import Path

from shotclock.config import LOG_FORMAT, SESSIONS_DIR
from shotclock.exceptions import ShotClockError
from shotclock.match_session import MatchSession
from shotclock.models import MatchSettings, PlayerId
from shotclock.observers import LoggingObserver
from shotclock.stats import match_stats
from shotclock.storage import save_match


def load_json(path: Path):
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def print_summary(session: MatchSession):
    snapshot = session.get_snapshot()

    print("\n==========================")
    print(f"{snapshot.p1_name} {snapshot.p1_score} - {snapshot.p2_score} {snapshot.p2_name}")
    print("==========================")
    print("Phase:", snapshot.phase.value)
    print("Rack:", snapshot.current_rack)

    if snapshot.winner:
        winner_name = snapshot.p1_name if snapshot.winner is PlayerId.ONE else snapshot.p2_name
        print("Winner:", winner_name)

    stats = match_stats(snapshot.shot_history)

    for player, name in ((PlayerId.ONE, snapshot.p1_name), (PlayerId.TWO, snapshot.p2_name)):
        s = stats[player]
        print(f"\n{name}:")
        print(f"  Shots: {s.total}  Made: {s.made}  Missed: {s.missed}  Safeties: {s.safeties}  Fouls: {s.fouls}")
        print(f"  Potting accuracy: {s.potting_accuracy:.0%}  Safety success: {s.safety_success_ratio:.0%}")
        print(f"  Time violations: {s.time_violations}")
        print(
            f"  Shot time: avg {s.timing.mean:.1f}s  min {s.timing.min:.0f}s  "
            f"max {s.timing.max:.0f}s  sd {s.timing.std_dev:.1f}s"
        )

    print("==========================\n")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Replay a pool match action script")
    parser.add_argument("script", type=Path, help="JSON list of actions")
    parser.add_argument("--settings", type=Path, default=None, help="JSON match settings")
    parser.add_argument(
        "--save",
        type=Path,
        nargs="?",
        const=SESSIONS_DIR / "last_session.json",
        default=None,
        help="write the final session to this file (default: sessions/last_session.json)",
    )
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
    )

    try:
        settings = MatchSettings.from_dict(load_json(args.settings)) if args.settings else MatchSettings()
        session = MatchSession(settings, observers=[LoggingObserver()])
        session.replay(load_json(args.script))

    except (ShotClockError, ValueError) as e:
        print("❌ INVALID INPUT:", e)
        return 2

    except FileNotFoundError as e:
        print("❌ ERROR:", e)
        return 1

    try:
        print_summary(session)
    except RuntimeError as e:
        print("❌ ERROR:", e)
        return 1

    if args.save:
        save_match(args.save, session.engine)

    return 0


if __name__ == "__main__":
    sys.exit(main())
