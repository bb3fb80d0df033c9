#!/usr/bin/env python3
"""
Configuration management for Dayflow Sync.

Handles database/output locations, lookback window and day boundary settings.
"""
import json
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

CONFIG_FILE = Path(__file__).parent / "config.json"

DEFAULT_DB_PATH = Path.home() / "Library" / "Application Support" / "Dayflow" / "chunks.sqlite"

DEFAULT_CONFIG = {
    "db_path": str(DEFAULT_DB_PATH),  # Dayflow's database (macOS only)
    "output_dir": "./dayflow-notes",
    "days": 7,                        # lookback window, 1-365
    "boundary_hour": 4,               # Dayflow days start at 4 AM
    "include_deleted": False,
    "note_prefix": "Dayflow_"
}

MAX_DAYS = 365


class SyncConfig(BaseModel):
    """Settings for one sync run, built once and passed explicitly."""
    model_config = ConfigDict(frozen=True)

    db_path: Path
    output_dir: Path
    days: int = Field(default=7, ge=1, le=MAX_DAYS)
    boundary_hour: int = Field(default=4, ge=0, le=23)
    include_deleted: bool = False
    force: bool = False
    note_prefix: str = "Dayflow_"
    custom_db: bool = Field(default=False, description="db_path did not come from the default")


def load_config() -> dict:
    """
    Load configuration from config.json.
    Creates file with defaults if it doesn't exist.
    """
    if CONFIG_FILE.exists():
        with open(CONFIG_FILE, 'r') as f:
            config = json.load(f)
        # Merge with defaults to handle new config options
        merged = {**DEFAULT_CONFIG, **config}
        return merged
    else:
        save_config(DEFAULT_CONFIG)
        return DEFAULT_CONFIG.copy()


def save_config(config: dict) -> None:
    """Save configuration to config.json."""
    with open(CONFIG_FILE, 'w') as f:
        json.dump(config, f, indent=2)


def get_db_path(config: dict = None, override: str = None) -> str:
    """
    Get the Dayflow database path.

    Priority:
    1. explicit override (--db flag)
    2. DAYFLOW_DB_PATH env var
    3. config["db_path"]
    """
    if override:
        return override

    env_path = os.environ.get("DAYFLOW_DB_PATH")
    if env_path:
        return env_path

    if config is None:
        config = load_config()
    return config.get("db_path") or str(DEFAULT_DB_PATH)


def get_output_dir(config: dict = None, override: str = None) -> str:
    """
    Get the notes output directory.

    Priority: override (--output), DAYFLOW_OUTPUT_DIR, config["output_dir"].
    """
    if override:
        return override

    env_dir = os.environ.get("DAYFLOW_OUTPUT_DIR")
    if env_dir:
        return env_dir

    if config is None:
        config = load_config()
    return config.get("output_dir") or DEFAULT_CONFIG["output_dir"]


def validate_config(config: dict = None) -> tuple[bool, str]:
    """
    Validate configuration is complete and usable.
    Returns (is_valid, error_message).
    """
    if config is None:
        config = load_config()

    days = config.get("days")
    if isinstance(days, bool) or not isinstance(days, int) or not 1 <= days <= MAX_DAYS:
        return False, f"Invalid days: {days}. Must be a whole number between 1 and {MAX_DAYS}"

    hour = config.get("boundary_hour")
    if isinstance(hour, bool) or not isinstance(hour, int) or not 0 <= hour <= 23:
        return False, f"Invalid boundary_hour: {hour}. Must be a whole number between 0 and 23"

    if not config.get("db_path"):
        return False, "No database path configured"

    if not config.get("output_dir"):
        return False, "No output directory configured"

    return True, ""


def build_sync_config(config: dict = None, db: str = None, output: str = None,
                      force: bool = False) -> SyncConfig:
    """
    Resolve paths and freeze the settings for a run.

    `config` is expected to have passed validate_config().
    """
    if config is None:
        config = load_config()

    db_path = get_db_path(config, override=db)
    output_dir = get_output_dir(config, override=output)

    return SyncConfig(
        db_path=Path(db_path).expanduser(),
        output_dir=Path(output_dir).expanduser().resolve(),
        days=config["days"],
        boundary_hour=config["boundary_hour"],
        include_deleted=bool(config.get("include_deleted", False)),
        force=force,
        note_prefix=config.get("note_prefix") or DEFAULT_CONFIG["note_prefix"],
        custom_db=Path(db_path).expanduser() != DEFAULT_DB_PATH,
    )


if __name__ == "__main__":
    # Show current config when run directly
    config = load_config()
    print("Current configuration:")
    print(json.dumps(config, indent=2))

    is_valid, error = validate_config(config)
    if is_valid:
        print("\nConfiguration is valid.")
        print(f"Database: {get_db_path(config)}")
        print(f"Output:   {get_output_dir(config)}")
    else:
        print(f"\nConfiguration error: {error}")
