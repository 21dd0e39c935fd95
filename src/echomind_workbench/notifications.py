"""Bounded, self-expiring toast notifications."""

from __future__ import annotations

from collections import deque
import itertools
import logging
import time
from typing import Callable

from echomind_workbench.models import TOAST_TYPES, ToastMessage, ToastType

LOGGER = logging.getLogger("echomind_workbench.notifications")

MAX_TOASTS = 5
DEFAULT_TOAST_LIFETIME_SECONDS = 5.0


class ToastQueue:
    """Keep the most recent toasts, dropping the oldest and anything past its lifetime."""

    def __init__(
        self,
        *,
        lifetime_seconds: float = DEFAULT_TOAST_LIFETIME_SECONDS,
        capacity: int = MAX_TOASTS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.lifetime_seconds = lifetime_seconds
        self._clock = clock
        self._ids = itertools.count(1)
        self._entries: deque[tuple[ToastMessage, float]] = deque(maxlen=capacity)

    def add(self, toast_type: ToastType, title: str, message: str) -> ToastMessage:
        """Append a toast and return it; the oldest one is evicted at capacity."""
        if toast_type not in TOAST_TYPES:
            raise ValueError(f"Unsupported toast type: {toast_type}")
        toast = ToastMessage(id=next(self._ids), type=toast_type, title=title, message=message)
        self._entries.append((toast, self._clock() + self.lifetime_seconds))
        LOGGER.debug("toast type=%s title=%s", toast_type, title)
        return toast

    def dismiss(self, toast_id: int) -> bool:
        """Remove a toast before it expires. Returns False when it is already gone."""
        for entry in self._entries:
            if entry[0].id == toast_id:
                self._entries.remove(entry)
                return True
        return False

    def active(self) -> list[ToastMessage]:
        """Return live toasts oldest first after evicting expired ones."""
        now = self._clock()
        live = [entry for entry in self._entries if entry[1] > now]
        if len(live) != len(self._entries):
            self._entries = deque(live, maxlen=self._entries.maxlen)
        return [toast for toast, _ in self._entries]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self.active())
