"""Telegram Bot API notification adapter.

Uses the Bot API for delivery so notifications can be routed via a bot chat.
"""

from __future__ import annotations

import json
import urllib.error
import urllib.request

from adapters.notification_formatting import format_notification
from core.models import Notification


class TelegramBotNotifier:
    """Notifier adapter that sends notifications via the Telegram Bot API."""

    def __init__(self, bot_token: str, chat_id: str) -> None:
        self._bot_token = bot_token
        self._chat_id = chat_id

    def _endpoint(self) -> str:
        return f"https://api.telegram.org/bot{self._bot_token}/sendMessage"

    def _payload(self, notification: Notification) -> dict:
        return {
            "chat_id": self._chat_id,
            "text": format_notification(notification, mode="html"),
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }

    async def send(self, notification: Notification) -> None:
        """Send the formatted notification via the Bot API."""

        data = json.dumps(self._payload(notification)).encode("utf-8")
        request = urllib.request.Request(self._endpoint(), data=data, method="POST")
        request.add_header("Content-Type", "application/json")
        # Blocking call; notification volumes per run are small.
        try:
            with urllib.request.urlopen(request, timeout=10):
                pass
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace")
            raise RuntimeError(f"Bot API error {e.code}: {body}") from e
