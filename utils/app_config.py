"""Pre-DB bootstrap configuration. Zero imports from the rest of the app.

Stores user preferences that must be known before opening the DB (db_folder,
log_level). Config lives in ~/.payday_budget/config.json to avoid a
bootstrapping problem.
"""
import json
import os
from pathlib import Path

CONFIG_DIR = Path.home() / ".payday_budget"
CONFIG_FILE = CONFIG_DIR / "config.json"


def load_config(path: Path | None = None) -> dict:
    """Returns {} on missing or corrupt file; never raises."""
    try:
        with open(path or CONFIG_FILE, "r", encoding="utf-8") as f:
            config = json.load(f)
    except (OSError, ValueError):
        return {}
    return config if isinstance(config, dict) else {}


def save_config(config: dict, path: Path | None = None) -> None:
    """Creates the config folder if needed; atomic write via .tmp + os.replace()."""
    target = path or CONFIG_FILE
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_suffix(".tmp")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        os.replace(tmp, target)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def get_db_folder() -> str | None:
    """Return config["db_folder"] or None if not set."""
    return load_config().get("db_folder")


def get_log_level() -> str:
    """Log level name, overridable with the PAYDAY_BUDGET_LOG_LEVEL env var."""
    return os.environ.get("PAYDAY_BUDGET_LOG_LEVEL") or load_config().get("log_level", "INFO")
