"""Notification dispatch pipeline.

This module is integration-agnostic. It only relies on ports for storage and
delivery, so the same pipeline runs against SQLite, Telegram or test fakes.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from core.accounts import fetch_groups, resolve_accounts
from core.i18n import Translation
from core.models import DispatchData, DispatchOptions, Transaction
from core.notification_classes import NOTIFICATION_CLASSES, NotificationClass
from core.ports import NotifierPort, StorePort
from core.rules_engine import active_rules, enabled_classes

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlatformContext:
    """Read-only collaborators shared by every class during a run."""

    client: Any
    store: StorePort
    notifier: NotifierPort
    translation: Translation


def serialize_error(exc: BaseException) -> str:
    return json.dumps({"name": type(exc).__name__, "message": str(exc)})


class NotificationDispatcher:
    """Sends one notification per enabled class for a batch of transactions."""

    def __init__(
        self,
        context: PlatformContext,
        notification_classes: Iterable[NotificationClass] = NOTIFICATION_CLASSES,
    ) -> None:
        self._context = context
        self._classes = list(notification_classes)

    def enabled_classes(self, config: Mapping[str, Any]) -> list[NotificationClass]:
        return enabled_classes(self._classes, config)

    def build_options(
        self,
        klass: NotificationClass,
        config: Mapping[str, Any],
        data: DispatchData,
    ) -> DispatchOptions:
        translation = self._context.translation
        rules = active_rules(klass, config)
        if klass.supports_multiple_rules:
            extra: dict[str, Any] = {"rules": [dict(rule) for rule in rules]}
        else:
            extra = {"fields": dict(rules[0]) if rules else {}}
        return DispatchOptions(
            client=self._context.client,
            t=translation.t,
            locales={translation.lang: translation.dictionary},
            lang=translation.lang,
            data=data,
            **extra,
        )

    async def send_notification_for_class(
        self,
        klass: NotificationClass,
        config: Mapping[str, Any],
        data: DispatchData,
    ) -> None:
        """Build and send one class's notification; failures are logged, not raised."""

        try:
            options = self.build_options(klass, config, data)
            notification = klass.build(options)
            if notification is None:
                LOGGER.info("Nothing to send for %s", klass.setting_key)
                return
            await self._context.notifier.send(notification)
            LOGGER.info("Sent %s notification", klass.setting_key)
        except Exception as exc:
            LOGGER.warning("Failed to send %s notification: %s", klass.setting_key, serialize_error(exc))

    async def send_notifications(
        self, config: Mapping[str, Any], transactions: Sequence[Transaction]
    ) -> None:
        """Run the pipeline for one batch.

        Store failures while resolving accounts or groups propagate; a class
        failing to build or send never stops the following classes.
        """

        classes = self.enabled_classes(config)
        accounts = resolve_accounts(transactions, self._context.store)
        groups = fetch_groups(self._context.store)
        LOGGER.info("%s new transactions on %s accounts.", len(transactions), len(accounts))

        data = DispatchData(accounts=accounts, groups=groups, transactions=list(transactions))
        for klass in classes:
            await self.send_notification_for_class(klass, config, data)


async def send_notifications(
    config: Mapping[str, Any],
    transactions: Sequence[Transaction],
    context: PlatformContext,
    notification_classes: Iterable[NotificationClass] = NOTIFICATION_CLASSES,
) -> None:
    """Entry point used by the CLI and by callers outside the core."""

    dispatcher = NotificationDispatcher(context, notification_classes)
    await dispatcher.send_notifications(config, transactions)
