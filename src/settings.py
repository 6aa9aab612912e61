"""Static configuration for filterlog.

All user-editable settings (retention, background session, logging) live in a
single JSON file for quick edits without touching Python.
"""

import json
import os

from dotenv import load_dotenv

from core.config import BackgroundSessionConfig, FilteringLogConfig

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# Settings are loaded from config.json; FILTERLOG_CONFIG (environment or .env)
# points elsewhere.
load_dotenv()
CONFIG_PATH = os.getenv("FILTERLOG_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _build_log_config(raw: dict) -> FilteringLogConfig:
    """Map the ``filtering_log`` section onto the core config dataclass."""

    background = raw.get("background_session", {})
    return FilteringLogConfig(
        capacity=int(raw.get("capacity", 1000)),
        host_url_prefix=raw.get("host_url_prefix", ""),
        background=BackgroundSessionConfig(
            enabled=bool(background.get("enabled", True)),
            session_id=int(background.get("id", -1)),
            title=background.get("title", "Background"),
        ),
    )


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Retention per session, host page prefix and the background session.
FILTERING_LOG = _build_log_config(_CONFIG.get("filtering_log", {}))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
