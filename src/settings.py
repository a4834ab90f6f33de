"""Static configuration for bankalerts.

Application settings (database, delivery, categorization, logging) live in a
single JSON file; secrets and per-deployment values come from the
environment, optionally through a .env file.
"""

import json
import os

from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH = os.getenv("BANKALERTS_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Where to store the SQLite database. Relative paths are resolved from the
# project root.
DB_PATH = _CONFIG.get("db_path", "bankalerts.db")
if not os.path.isabs(DB_PATH):
    DB_PATH = os.path.join(PROJECT_ROOT, DB_PATH)

# Language used for notification texts.
LOCALE = os.getenv("BANKALERTS_LOCALE") or _CONFIG.get("locale", "en")

# Delivery method switches adapters without changing core logic.
# - "saved_messages": Telegram Saved Messages of the logged-in account
# - "bot": Telegram Bot API, needs BOT_API and notifications.bot_chat_id
# - "log": only log notifications
_notifications = _CONFIG.get("notifications", {})
NOTIFICATION_METHOD = _notifications.get("notification_method", "log")
BOT_CHAT_ID = _notifications.get("bot_chat_id")

# Categorization runs inside a scheduler slot, so it stops before the next
# chunk would overrun the time limit.
_categorization = _CONFIG.get("categorization", {})
CATEGORIZATION_CHUNK_SIZE = int(_categorization.get("chunk_size", 100))
CATEGORIZATION_TIME_LIMIT = float(
    os.getenv("BANKALERTS_TIME_LIMIT") or _categorization.get("time_limit_seconds", 60)
)
CATEGORY_RULES = _categorization.get("rules", [])

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
