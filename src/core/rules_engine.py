"""Notification rule resolution and enablement (core domain)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable, List, Mapping

if TYPE_CHECKING:
    from core.notification_classes import NotificationClass

LOGGER = logging.getLogger(__name__)


def resolve_rules(klass: "NotificationClass", config: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    """Return the rules configured for a notification class.

    Settings written before a class supported several alerts hold a single
    mapping; newer settings hold a list. Both are normalized to a list here so
    nothing downstream looks at the raw shape again.
    """

    class_rules = config.get(klass.setting_key)
    if isinstance(class_rules, Mapping):
        return [class_rules]
    if isinstance(class_rules, (list, tuple)):
        return [rule for rule in class_rules if isinstance(rule, Mapping)]
    return []


def valid_rules(klass: "NotificationClass", config: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    """Keep the rules accepted by the class validity predicate, if it has one."""

    rules = resolve_rules(klass, config)
    if klass.is_valid_rule is None:
        return rules
    return [rule for rule in rules if klass.is_valid_rule(rule)]


def active_rules(klass: "NotificationClass", config: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    """Valid rules that are explicitly enabled."""

    return [rule for rule in valid_rules(klass, config) if rule.get("enabled") is True]


def is_class_enabled(klass: "NotificationClass", config: Mapping[str, Any]) -> bool:
    return bool(active_rules(klass, config))


def enabled_classes(
    classes: Iterable["NotificationClass"], config: Mapping[str, Any]
) -> List["NotificationClass"]:
    """Return the classes with at least one valid enabled rule, in order."""

    enabled: List["NotificationClass"] = []
    for klass in classes:
        is_enabled = is_class_enabled(klass, config)
        LOGGER.info("%s is %s", klass.setting_key, "enabled" if is_enabled else "not enabled")
        if is_enabled:
            enabled.append(klass)
    return enabled
