"""
Centralized configuration for the dominoes engine.

Configuration is loaded from (in order of precedence):
1. Environment variables
2. .env file (if exists)
3. Default values

Usage:
    from config import config
    print(config.LOG_LEVEL)
    print(config.game_defaults.mode)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def get_env(key: str, default: str = "") -> str:
    """Get environment variable with default."""
    return os.environ.get(key, default)


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable."""
    val = os.environ.get(key, "").lower()
    if val in ("true", "1", "yes", "on"):
        return True
    if val in ("false", "0", "no", "off"):
        return False
    return default


def get_env_int(key: str, default: int = 0) -> int:
    """Get integer environment variable."""
    try:
        return int(os.environ.get(key, str(default)))
    except ValueError:
        return default


def get_env_float(key: str, default: float = 0.0) -> float:
    """Get float environment variable."""
    try:
        return float(os.environ.get(key, str(default)))
    except ValueError:
        return default


def get_env_optional_int(key: str) -> Optional[int]:
    """Get integer environment variable, or None when unset or invalid."""
    raw = os.environ.get(key, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


@dataclass
class GameDefaults:
    """Default match settings, used when a GameConfig leaves a field unset."""
    mode: str = "block"
    ai_delay: float = 1.5       # seconds of AI "thinking time"
    max_draws: Optional[int] = None  # per player per round, Draw mode only
    seed: Optional[int] = None


@dataclass
class EngineSettings:
    """Engine configuration."""
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"
    AI_DEBUG: bool = False

    game_defaults: GameDefaults = field(default_factory=GameDefaults)

    @classmethod
    def from_env(cls) -> "EngineSettings":
        """Load configuration from environment variables."""
        return cls(
            LOG_LEVEL=get_env("LOG_LEVEL", "INFO"),
            ENVIRONMENT=get_env("ENVIRONMENT", "development"),
            AI_DEBUG=get_env_bool("AI_DEBUG", False),
            game_defaults=GameDefaults(
                mode=get_env("DEFAULT_MODE", "block"),
                ai_delay=get_env_float("AI_THINK_DELAY", 1.5),
                max_draws=get_env_optional_int("DRAW_CAP"),
                seed=get_env_optional_int("GAME_SEED"),
            ),
        )


# Global config instance - loaded once at module import
config = EngineSettings.from_env()


def reload_config() -> EngineSettings:
    """Reload configuration from environment (useful for testing)."""
    global config
    config = EngineSettings.from_env()
    return config
