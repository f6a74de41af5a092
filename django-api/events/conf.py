"""Settings for the events app, read from ``settings.EVENT_REGISTRATION``."""

from functools import lru_cache
from typing import Any

from django.conf import settings
from django.utils.module_loading import import_string

DEFAULTS: dict[str, Any] = {
    "STORE": "events.stores.django_store.DjangoEventStore",
    "NOTIFIER": "events.services.notifier.SignalNotifier",
    "PRINCIPAL_PROVIDER": "events.handlers.authentication.SignedTokenPrincipalProvider",
    "MAX_ATTEMPTS": 3,
    "RETRY_BACKOFF_SECONDS": 0.05,
    "STORE_TIMEOUT_SECONDS": 5,
    "TOKEN_MAX_AGE_SECONDS": 86400,
    "PAGE_SIZE": 20,
    "MAX_PAGE_SIZE": 100,
    "CACHE_TIMEOUT_SECONDS": 300,
    "UPCOMING_CACHE_TIMEOUT_SECONDS": 30,
}


def registration_setting(name: str) -> Any:
    overrides = getattr(settings, "EVENT_REGISTRATION", {})
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]


def get_event_store():
    """The process-wide store for the configured ``STORE`` path."""
    return _shared_store(registration_setting("STORE"))


@lru_cache(maxsize=None)
def _shared_store(path: str):
    return import_string(path)()


def get_notifier():
    return import_string(registration_setting("NOTIFIER"))()


def get_principal_provider():
    return import_string(registration_setting("PRINCIPAL_PROVIDER"))()
