"""TTL cache for condition results.

Keys are ``(block_id, expression)``.  Each entry expires after the TTL of
its category (see expression.condition_category):

    interaction  1 s     hover / click / focus
    time        30 s     time / hour / minute / weekday
    theme, file 60 s
    default      5 s

Expired entries are dropped when read, and writes sweep the whole map at
most once per shortest TTL.

One cache is owned by the caller and handed to the evaluator.  Not
thread-safe; all access happens on the caller's thread / event loop.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from camo.core.constants import INTERACTION_TTL_S, TIME_TTL_S, LONG_TTL_S, DEFAULT_TTL_S
from camo.core.expression import condition_category

Clock = Callable[[], float]


@dataclass
class _Entry:
    value:      bool
    category:   str
    expires_at: float


class ConditionCache:
    def __init__(
        self,
        interaction_ttl: float = INTERACTION_TTL_S,
        time_ttl:        float = TIME_TTL_S,
        long_ttl:        float = LONG_TTL_S,
        default_ttl:     float = DEFAULT_TTL_S,
        clock:           Clock | None = None,
    ) -> None:
        self._ttl = {
            "interaction": interaction_ttl,
            "time":        time_ttl,
            "theme":       long_ttl,
            "file":        long_ttl,
            "default":     default_ttl,
        }
        self._clock = clock or time.monotonic
        self._entries: dict[tuple[str, str], _Entry] = {}
        self._sweep_every = min(self._ttl.values())
        self._next_sweep  = self._clock() + self._sweep_every

    @classmethod
    def from_settings(cls, settings, clock: Clock | None = None) -> "ConditionCache":
        return cls(
            interaction_ttl = settings.interaction_ttl,
            time_ttl        = settings.time_ttl,
            long_ttl        = settings.long_ttl,
            default_ttl     = settings.default_ttl,
            clock           = clock,
        )

    # ------------------------------------------------------------------
    def ttl_for(self, category: str) -> float:
        return self._ttl.get(category, self._ttl["default"])

    def get(self, block_id: str, expression: str) -> bool | None:
        """Cached result, or None when missing or expired."""
        key   = (block_id, expression)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry.value

    def set(self, block_id: str, expression: str, value: bool) -> None:
        """Store a result; expired entries are swept at most once per shortest TTL."""
        now = self._clock()
        if now >= self._next_sweep:
            self.purge_expired()
        category = condition_category(expression)
        self._entries[(block_id, expression)] = _Entry(
            value      = value,
            category   = category,
            expires_at = now + self.ttl_for(category),
        )

    def invalidate(self, block_id: str, category: str | None = None) -> int:
        """Drop a block's entries (only ``category`` when given).  Returns the count."""
        keys = [
            k for k, e in self._entries.items()
            if k[0] == block_id and (category is None or e.category == category)
        ]
        for k in keys:
            del self._entries[k]
        return len(keys)

    def forget_block(self, block_id: str) -> int:
        return self.invalidate(block_id)

    def purge_expired(self) -> int:
        now  = self._clock()
        self._next_sweep = now + self._sweep_every
        keys = [k for k, e in self._entries.items() if now >= e.expires_at]
        for k in keys:
            del self._entries[k]
        return len(keys)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: tuple[str, str]) -> bool:
        return self.get(*key) is not None
