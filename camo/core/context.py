"""Evaluation context — the facts conditions are evaluated against.

The caller builds one ``EvaluationContext`` per render / interaction and
passes it to the evaluator and executor.  All records are frozen; use
``dataclasses.replace`` to derive a changed copy.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from camo.core.constants import MOBILE_MAX_WIDTH, TABLET_MAX_WIDTH

_WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


@dataclass(frozen=True)
class InteractionState:
    hover: bool = False
    click: bool = False
    focus: bool = False


@dataclass(frozen=True)
class ThemeInfo:
    name: str = "light"

    @property
    def dark(self) -> bool:
        return self.name.lower() == "dark"

    @property
    def light(self) -> bool:
        return not self.dark


@dataclass(frozen=True)
class ClockInfo:
    iso:     str = ""
    hour:    int = 0
    minute:  int = 0
    weekday: str = "monday"

    @property
    def minutes(self) -> int:
        """Minutes since midnight."""
        return self.hour * 60 + self.minute

    @classmethod
    def from_datetime(cls, dt: datetime) -> "ClockInfo":
        return cls(
            iso     = dt.isoformat(timespec="seconds"),
            hour    = dt.hour,
            minute  = dt.minute,
            weekday = _WEEKDAYS[dt.weekday()],
        )


@dataclass(frozen=True)
class ViewportInfo:
    width:    int        = 1280
    height:   int        = 800
    category: str | None = None     # derived from width when None

    @property
    def resolved_category(self) -> str:
        if self.category:
            return self.category
        if self.width <= MOBILE_MAX_WIDTH:
            return "mobile"
        if self.width <= TABLET_MAX_WIDTH:
            return "tablet"
        return "desktop"


@dataclass(frozen=True)
class BlockState:
    id:       str  = ""
    visible:  bool = True
    revealed: bool = False


@dataclass(frozen=True)
class EvaluationContext:
    interaction: InteractionState          = field(default_factory=InteractionState)
    theme:       ThemeInfo                 = field(default_factory=ThemeInfo)
    clock:       ClockInfo                 = field(default_factory=ClockInfo)
    viewport:    ViewportInfo              = field(default_factory=ViewportInfo)
    user:        Mapping[str, Any] | None  = None
    file:        Mapping[str, Any] | None  = None
    block:       BlockState                = field(default_factory=BlockState)

    @classmethod
    def now(cls, **kwargs: Any) -> "EvaluationContext":
        """Context whose clock is the current local time."""
        kwargs.setdefault("clock", ClockInfo.from_datetime(datetime.now()))
        return cls(**kwargs)

    def as_lookup(self) -> dict[str, Any]:
        """Nested dict view used for dot-path lookups (``viewport.mobile``)."""
        interaction = {
            "hover": self.interaction.hover,
            "click": self.interaction.click,
            "focus": self.interaction.focus,
        }
        category = self.viewport.resolved_category
        lookup: dict[str, Any] = {
            **interaction,
            "interaction": interaction,
            "theme": {
                "name":  self.theme.name,
                "dark":  self.theme.dark,
                "light": self.theme.light,
            },
            "time":    self.clock.minutes,
            "hour":    self.clock.hour,
            "minute":  self.clock.minute,
            "weekday": self.clock.weekday,
            "iso":     self.clock.iso,
            "viewport": {
                "width":    self.viewport.width,
                "height":   self.viewport.height,
                "category": category,
                "mobile":   category == "mobile",
                "tablet":   category == "tablet",
                "desktop":  category == "desktop",
            },
            "block": {
                "id":       self.block.id,
                "visible":  self.block.visible,
                "revealed": self.block.revealed,
            },
        }
        if self.user is not None:
            lookup["user"] = dict(self.user)
        if self.file is not None:
            lookup["file"] = dict(self.file)
        return lookup
