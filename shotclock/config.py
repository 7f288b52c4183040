import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SESSIONS_DIR = PROJECT_ROOT / "sessions"

SCHEMA_VERSION = 1

# Default match settings
DEFAULT_SHOT_TIME = 60
DEFAULT_EXTENSION_TIME = 30
DEFAULT_EXTENSIONS_ALLOWED = 1
DEFAULT_FIRST_SHOT_BONUS = 15
DEFAULT_WARNING_TIME = 10

DEFAULT_P1_NAME = "Player 1"
DEFAULT_P2_NAME = "Player 2"

# Clock
TICK_INTERVAL_SEC = float(os.environ.get("SHOTCLOCK_TICK_SEC", "1.0"))
CALLOUT_THRESHOLDS = (30, 10)
COUNTDOWN_FROM = 5

THREE_FOUL_LIMIT = 3

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
