# utils/config.py
import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv


@dataclass(frozen=True)
class Settings:
    token: str | None
    command_prefix: str = "!"
    skillcheck_prefix: str = "!r "
    sheets_dir: str = "."
    players_registry: str = "data/players.json"
    log_level: str = "INFO"


def load_settings(env_file: str | None = None) -> Settings:
    """Read settings from the environment, after loading a .env file if one is found."""
    env_path = env_file or find_dotenv(usecwd=True)
    if env_path:
        load_dotenv(env_path)

    return Settings(
        token=os.getenv("DISCORD_TOKEN"),
        command_prefix=os.getenv("COMMAND_PREFIX", "!"),
        skillcheck_prefix=os.getenv("SKILLCHECK_PREFIX", "!r "),
        sheets_dir=os.getenv("SHEETS_DIR", "."),
        players_registry=os.getenv("PLAYERS_REGISTRY", "data/players.json"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
