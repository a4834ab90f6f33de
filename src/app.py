"""Application entry point for bankalerts."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint

import settings
from adapters.keyword_categorizer import KeywordCategorizer
from adapters.log_notifier import LogNotifier
from adapters.sqlite_storage import SQLiteStore
from adapters.telegram_bot_notifier import TelegramBotNotifier
from adapters.telegram_notifier import TelegramSavedMessagesNotifier
from core.categorization import run_categorization
from core.config import CategorizationConfig
from core.dispatcher import PlatformContext, send_notifications
from core.i18n import Translation
from core.models import Account, Group, Transaction
from core.user_settings import fetch_settings, is_notification_enabled

NAME = "BANKALERTS"
FONT = "tarty-1"

LOGGER = logging.getLogger(__name__)


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = _RedactingFormatter(_collect_redaction_values(config), fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/bankalerts.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        file_handler = RotatingFileHandler(
            path,
            maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
            backupCount=int(file_cfg.get("backup_count", 5)),
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _open_store() -> SQLiteStore:
    store = SQLiteStore(settings.DB_PATH)
    store.init_db()
    return store


def _load_json(path: str):
    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


async def _notify(store: SQLiteStore, transactions: list[Transaction], dry_run: bool) -> None:
    user_settings = fetch_settings(store)
    if not is_notification_enabled(user_settings):
        LOGGER.info("No notification enabled, skipping")
        return

    method = "log" if dry_run else settings.NOTIFICATION_METHOD
    client = None
    # Select the delivery adapter from configuration to keep the core
    # dispatcher independent from delivery details.
    if method == "bot":
        bot_token = os.getenv("BOT_API")
        if not bot_token:
            raise RuntimeError("BOT_API is required when notification_method=bot")
        if not settings.BOT_CHAT_ID:
            raise RuntimeError("notifications.bot_chat_id is required for bot notifications")
        notifier = TelegramBotNotifier(bot_token=bot_token, chat_id=str(settings.BOT_CHAT_ID))
    elif method == "saved_messages":
        from client import authorize, build_client

        client = build_client()
        await client.connect()
        await authorize(client)
        notifier = TelegramSavedMessagesNotifier(client)
    elif method == "log":
        notifier = LogNotifier()
    else:
        raise RuntimeError("notification_method must be 'saved_messages', 'bot' or 'log'")
    LOGGER.info("Selected notification method - %s", method)

    context = PlatformContext(
        client=client,
        store=store,
        notifier=notifier,
        translation=Translation(settings.LOCALE),
    )
    try:
        await send_notifications(user_settings["notifications"], transactions, context)
    finally:
        if client is not None:
            await client.disconnect()


def _cmd_notify(path: str, dry_run: bool) -> None:
    store = _open_store()
    transactions = [Transaction.from_dict(raw) for raw in _load_json(path)]
    store.save_transactions(transactions)
    LOGGER.info("Imported %s transactions", len(transactions))
    asyncio.run(_notify(store, transactions, dry_run))


def _cmd_import_accounts(path: str) -> None:
    store = _open_store()
    raw = _load_json(path)
    accounts = [Account.from_dict(item) for item in raw.get("accounts", [])]
    groups = [Group.from_dict(item) for item in raw.get("groups", [])]
    store.save_accounts(accounts)
    store.save_groups(groups)
    LOGGER.info("Imported %s accounts and %s groups", len(accounts), len(groups))


def _cmd_categorize() -> None:
    store = _open_store()
    result = run_categorization(
        KeywordCategorizer(settings.CATEGORY_RULES),
        store,
        CategorizationConfig(
            chunk_size=settings.CATEGORIZATION_CHUNK_SIZE,
            time_limit_seconds=settings.CATEGORIZATION_TIME_LIMIT,
        ),
    )
    LOGGER.info(
        "Categorization done: categorized=%s, remaining=%s",
        result.categorized,
        result.remaining,
    )
    if result.remaining:
        LOGGER.info("Run `bankalerts categorize` again to process the remaining transactions")


def _cmd_settings() -> None:
    print(json.dumps(fetch_settings(_open_store()), indent=2, ensure_ascii=False))


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="bankalerts")
    parser.add_argument("--dry-run", action="store_true", help="Log notifications instead of sending them")
    subparsers = parser.add_subparsers(dest="command", required=True)

    notify = subparsers.add_parser("notify", help="Import new transactions and send notifications")
    notify.add_argument("path", help="JSON file with a list of transactions")
    accounts = subparsers.add_parser("import-accounts", help="Import accounts and groups")
    accounts.add_argument("path", help="JSON file with 'accounts' and 'groups' lists")
    subparsers.add_parser("categorize", help="Categorize pending transactions within the time budget")
    subparsers.add_parser("settings", help="Print the settings document with defaults applied")

    args = parser.parse_args(argv)
    if args.command == "settings":
        _cmd_settings()
        return

    _print_banner()
    _configure_logging()
    if args.command == "notify":
        _cmd_notify(args.path, args.dry_run)
    elif args.command == "import-accounts":
        _cmd_import_accounts(args.path)
    elif args.command == "categorize":
        _cmd_categorize()


if __name__ == "__main__":
    main()
