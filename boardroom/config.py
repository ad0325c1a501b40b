from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from loguru import logger
from dotenv import load_dotenv

from .states import USER_ID


def _load_env() -> None:
    # Project-root .env first, then the working directory
    here = Path(__file__).resolve().parents[1]
    for env_path in (here / ".env", Path.cwd() / ".env"):
        if env_path.is_file():
            load_dotenv(dotenv_path=str(env_path), override=False)
            break


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"config_invalid | {name}={raw!r}; using default {default}")
        return default


@dataclass(frozen=True)
class TrackerConfig:
    target_messages: int = 8
    message_weight: float = 60.0
    time_weight: float = 40.0
    min_messages: int = 6
    completion_threshold: int = 80
    max_messages: int = 12
    relevance_words_target: float = 20.0
    participant_bonus: int = 10
    user_id: str = USER_ID

    def __post_init__(self) -> None:
        if self.target_messages <= 0:
            raise ValueError("target_messages must be positive")
        if self.min_messages > self.max_messages:
            raise ValueError(
                f"min_messages ({self.min_messages}) cannot exceed max_messages ({self.max_messages})"
            )

    @classmethod
    def from_env(cls) -> "TrackerConfig":
        """Build a config from BOARDROOM_* env vars, loading .env if present.

        Env vars:
          - BOARDROOM_TARGET_MESSAGES (default: 8)
          - BOARDROOM_MIN_MESSAGES (default: 6)
          - BOARDROOM_COMPLETION_THRESHOLD (default: 80)
          - BOARDROOM_MAX_MESSAGES (default: 12)
        """
        _load_env()
        defaults = cls()
        cfg = cls(
            target_messages=_env_int("BOARDROOM_TARGET_MESSAGES", defaults.target_messages),
            min_messages=_env_int("BOARDROOM_MIN_MESSAGES", defaults.min_messages),
            completion_threshold=_env_int("BOARDROOM_COMPLETION_THRESHOLD", defaults.completion_threshold),
            max_messages=_env_int("BOARDROOM_MAX_MESSAGES", defaults.max_messages),
        )
        logger.debug(
            f"tracker_config | target={cfg.target_messages} min={cfg.min_messages} "
            f"threshold={cfg.completion_threshold} max={cfg.max_messages}"
        )
        return cfg
