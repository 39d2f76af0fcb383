"""Runtime configuration from arguments, environment and an optional .env file."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

DEFAULT_HOME = "~/.seeding"
DB_NAME = "seeding.db"


@dataclass
class Config:
    home: Path
    tick_seconds: float = 1.0
    log_level: str = "WARNING"

    @property
    def db_path(self) -> Path:
        return self.home / DB_NAME


def load_config(home: str | None = None, env_file: str | None = None) -> Config:
    """Build the Config. Explicit arguments win over SEEDING_* environment variables.

    Values from `env_file` (or a .env in the working directory) never override
    variables already set in the environment.
    """
    load_dotenv(env_file or find_dotenv(usecwd=True), override=False)

    home_dir = home or os.environ.get("SEEDING_HOME") or DEFAULT_HOME
    tick_raw = os.environ.get("SEEDING_TICK_SECONDS", "1.0")
    try:
        tick_seconds = float(tick_raw)
    except ValueError:
        raise ValueError(f"SEEDING_TICK_SECONDS must be a number, got {tick_raw!r}") from None
    if tick_seconds <= 0:
        raise ValueError("SEEDING_TICK_SECONDS must be positive")

    return Config(
        home=Path(home_dir).expanduser().resolve(),
        tick_seconds=tick_seconds,
        log_level=os.environ.get("SEEDING_LOG_LEVEL", "WARNING").upper(),
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
