"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DATA_DIR = PROJECT_ROOT / "03_data"
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_DB_PATH = DATA_DIR / "supportdesk.db"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

DATA_DIR.mkdir(parents=True, exist_ok=True)
LOGS_DIR.mkdir(parents=True, exist_ok=True)


PathLike = Union[str, Path]


def resolve_db_path(env_value: PathLike | None = None) -> PathLike:
    """Resolve DATABASE_URL to an absolute path."""
    if not env_value:
        return DEFAULT_DB_PATH

    if str(env_value) == ":memory:":
        return ":memory:"

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


@dataclass(frozen=True)
class TypingConfig:
    """Simulated bot typing delays, in seconds."""

    min_delay: float = 1.0
    max_delay: float = 2.0
    greeting_delay: float = 0.5
    refusal_delay: float = 0.5

    @classmethod
    def from_env(cls) -> "TypingConfig":
        """Build from BOT_* environment variables, falling back to defaults."""
        return cls(
            min_delay=float(os.getenv("BOT_TYPING_MIN_DELAY", cls.min_delay)),
            max_delay=float(os.getenv("BOT_TYPING_MAX_DELAY", cls.max_delay)),
            greeting_delay=float(os.getenv("BOT_GREETING_DELAY", cls.greeting_delay)),
            refusal_delay=float(os.getenv("BOT_REFUSAL_DELAY", cls.refusal_delay)),
        )

    @classmethod
    def instant(cls) -> "TypingConfig":
        """No delays at all (tests, simulator)."""
        return cls(min_delay=0.0, max_delay=0.0, greeting_delay=0.0, refusal_delay=0.0)
