"""Time sources injected into services."""

from datetime import datetime
from typing import Protocol

from django.utils import timezone


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall-clock time, timezone-aware."""

    def now(self) -> datetime:
        return timezone.now()
