"""Cache keys for read-side event payloads."""

import hashlib
import json

from django.core.cache import cache

LIST_GENERATION_KEY = "events:list:generation"


def event_detail_key(event_id: str) -> str:
    return f"events:{event_id}"


def event_list_key(params: dict) -> str:
    """Key for a listing; bumping the generation retires every listing at once."""
    generation = cache.get_or_set(LIST_GENERATION_KEY, 1, timeout=None)
    digest = hashlib.sha256(
        json.dumps(params, sort_keys=True, default=str).encode()
    ).hexdigest()[:16]
    return f"events:list:{generation}:{digest}"


def invalidate_event(event_id: str) -> None:
    cache.delete(event_detail_key(event_id))
    try:
        cache.incr(LIST_GENERATION_KEY)
    except ValueError:
        cache.set(LIST_GENERATION_KEY, 1, timeout=None)
