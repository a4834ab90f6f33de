"""Helpers around the user's settings document."""

from __future__ import annotations

import copy
import logging
from typing import Any, Mapping

from core.notification_classes import NOTIFICATION_CLASSES
from core.ports import StorePort
from core.rules_engine import is_class_enabled

LOGGER = logging.getLogger(__name__)

DEFAULT_SETTINGS: dict[str, Any] = {
    "notifications": {
        "balanceLower": [{"enabled": True, "threshold": 100}],
        "transactionGreater": [{"enabled": True, "threshold": 600}],
        "healthBillLinked": {"enabled": True},
        "lateHealthReimbursement": {"enabled": False, "days": 30},
        "delayedDebit": {"enabled": False, "days": 2},
    },
    "categoryBudgetAlerts": [],
}


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def get_defaulted_settings(settings: Mapping[str, Any] | None) -> dict[str, Any]:
    return _deep_merge(DEFAULT_SETTINGS, settings or {})


def fetch_settings(store: StorePort) -> dict[str, Any]:
    return get_defaulted_settings(store.get_settings())


def update_settings(store: StorePort, settings: dict[str, Any]) -> None:
    store.save_settings(settings)


def is_notification_enabled(settings: Mapping[str, Any]) -> bool:
    config = settings.get("notifications") or {}
    return any(is_class_enabled(klass, config) for klass in NOTIFICATION_CLASSES)


def fetch_category_alerts(store: StorePort) -> list[dict[str, Any]]:
    try:
        settings = fetch_settings(store)
    except Exception as exc:
        LOGGER.error("Error while fetching category alerts (%s)", exc)
        return []
    return settings["categoryBudgetAlerts"]


def update_category_alerts(store: StorePort, alerts: list[dict[str, Any]]) -> None:
    settings = fetch_settings(store)
    settings["categoryBudgetAlerts"] = alerts
    update_settings(store, settings)
