"""Configuration management for Tutordesk."""

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from .core.dates import today_in
from .core.properties import DEFAULT_LESSON_MINUTES

logger = logging.getLogger(__name__)

TUTORDESK_HOME = Path(os.environ.get("TUTORDESK_HOME", Path.home() / "tutordesk"))
CONFIG_FILE = TUTORDESK_HOME / "config" / "tutordesk.conf"
DATA_DIR = TUTORDESK_HOME / "data"


@dataclass
class Config:
    """Tutordesk configuration."""

    timezone: str = "Asia/Seoul"
    data_dir: str = ""
    default_lesson_minutes: int = DEFAULT_LESSON_MINUTES
    archive_time: str = "00:05"
    # Remote sync
    supabase_url: str = ""
    supabase_key: str = ""


def _unquote(value: str) -> str:
    """Strip surrounding quotes, or an inline comment from an unquoted value."""
    if value[:1] in ('"', "'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        return value.split("#")[0].strip()
    return value


def parse_config(text: str) -> Config:
    """Parse KEY=value lines into a Config. Unknown keys are ignored."""
    config = Config()

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "timezone":
                config.timezone = value
            case "data_dir":
                config.data_dir = value
            case "default_lesson_minutes":
                try:
                    config.default_lesson_minutes = int(value)
                except ValueError:
                    logger.warning(f"Invalid DEFAULT_LESSON_MINUTES: {value}")
            case "archive_time":
                config.archive_time = value
            case "supabase_url":
                config.supabase_url = value
            case "supabase_key":
                config.supabase_key = value

    return config


def load_config() -> Config:
    """Load configuration from tutordesk.conf file."""
    if not CONFIG_FILE.exists():
        return Config()
    return parse_config(CONFIG_FILE.read_text())


def data_dir_for(config: Config) -> Path:
    if config.data_dir:
        return Path(config.data_dir).expanduser()
    return DATA_DIR


def today_for(config: Config, now: datetime | None = None) -> str:
    """Current local day (YYYY-MM-DD) in the configured timezone."""
    return today_in(config.timezone, now)
