"""Shared notification formatting helpers.

Keeping formatting here prevents drift between adapters and keeps messages
consistent regardless of delivery channel.
"""

from __future__ import annotations

import html

from core.models import Notification

DIVIDER = "──────────────"


def _escape_md(value: str) -> str:
    for ch in r"*[`":
        value = value.replace(ch, f"\\{ch}")
    return value


def _format_markdown(notification: Notification) -> str:
    """Create the Markdown body used by Saved Messages."""

    lines = [f"**{_escape_md(notification.title)}**", DIVIDER]
    lines.extend(f"• {_escape_md(line)}" for line in notification.body)
    return "\n".join(lines)


def _format_html(notification: Notification) -> str:
    """Create the HTML body used by the Bot API adapter."""

    parts = [f"<b>{html.escape(notification.title)}</b>", DIVIDER]
    parts.extend(f"• {html.escape(line)}" for line in notification.body)
    return "\n".join(parts)


def format_notification(notification: Notification, mode: str) -> str:
    """Return the notification formatted for the requested mode."""

    if mode == "markdown":
        return _format_markdown(notification)
    if mode == "html":
        return _format_html(notification)
    if mode == "plain":
        return "\n".join([notification.title, *notification.body])
    raise ValueError(f"Unsupported notification format: {mode}")
