"""Keyword table for metadata statements.

Each keyword maps to the zones a statement using it must carry and to the
IR bucket (execution priority) its instructions land in.  The grammar
validator, the IR extractor and the syntax highlighter all read this table.

Zones
-----
declaration : keyword [variable]…          (always present)
target      : // function[argument]
effect      : % {action}(option) …
output      : -> {outcome}
"""
from __future__ import annotations

from dataclasses import dataclass

from camo.core.constants import (
    BUCKET_VISUAL, BUCKET_LAYOUT, BUCKET_ANIMATION,
    BUCKET_INTERACTION, BUCKET_STATE, DEFAULT_BUCKET,
)

ZONE_DECLARATION = "declaration"
ZONE_TARGET      = "target"
ZONE_EFFECT      = "effect"
ZONE_OUTPUT      = "output"

CONDITIONAL_KEYWORD = "if"
BRANCH_LABELS: frozenset[str] = frozenset({"true", "false", "else"})
NEGATING_LABELS: frozenset[str] = frozenset({"false", "else"})


@dataclass(frozen=True)
class KeywordSpec:
    bucket:         int
    required_zones: frozenset[str]
    description:    str = ""


def _spec(bucket: int, *zones: str, description: str = "") -> KeywordSpec:
    return KeywordSpec(bucket, frozenset((ZONE_DECLARATION,) + zones), description)


_T, _E, _O = ZONE_TARGET, ZONE_EFFECT, ZONE_OUTPUT

KEYWORD_SPECS: dict[str, KeywordSpec] = {
    # Visual (bucket 1)
    "set":          _spec(BUCKET_VISUAL, _T, _E, description="Set visual property or style"),
    "apply":        _spec(BUCKET_VISUAL, _T, _E, description="Apply visual effect"),
    "remove":       _spec(BUCKET_VISUAL, _T,     description="Remove effect or property"),
    "blur":         _spec(BUCKET_VISUAL, _T,     description="Apply blur effect"),
    "hide":         _spec(BUCKET_VISUAL, _T,     description="Hide content"),
    "reveal":       _spec(BUCKET_VISUAL, _T,     description="Reveal content"),
    "mask":         _spec(BUCKET_VISUAL, _T, _E, description="Mask content with pattern"),
    "redact":       _spec(BUCKET_VISUAL, _T,     description="Redact sensitive information"),
    # Layout (bucket 2)
    "resize":       _spec(BUCKET_LAYOUT, _T, _E, description="Resize element"),
    "position":     _spec(BUCKET_LAYOUT, _T, _E, description="Position element"),
    # Animation (bucket 3)
    "animate":      _spec(BUCKET_ANIMATION, _T, _E, description="Animate element"),
    "transition":   _spec(BUCKET_ANIMATION, _T, _E, description="Apply transition"),
    # Interaction (bucket 4)
    "click":        _spec(BUCKET_INTERACTION, _T, _E, description="Click interaction"),
    "hover":        _spec(BUCKET_INTERACTION, _T, _E, description="Hover interaction"),
    "toggle":       _spec(BUCKET_INTERACTION, _T,     description="Define toggle behaviour"),
    # State (bucket 5)
    "store":        _spec(BUCKET_STATE, _T, _O,     description="Store state or data"),
    "retrieve":     _spec(BUCKET_STATE, _T, _O,     description="Retrieve stored data"),
    "protect":      _spec(BUCKET_STATE, _T, _E, _O, description="Apply security protection"),
    "encrypt":      _spec(BUCKET_STATE, _T, _E,     description="Encrypt content"),
    "authenticate": _spec(BUCKET_STATE, _T,         description="Require authentication"),
    "coordinate":   _spec(BUCKET_STATE, _T, _E,     description="Coordinate with other blocks"),
    "link":         _spec(BUCKET_STATE, _T,         description="Connect to other blocks"),
    "navigate":     _spec(BUCKET_STATE, _T,         description="Define navigation paths"),
    "group":        _spec(BUCKET_STATE, _T,         description="Group related blocks"),
    "reset":        _spec(BUCKET_STATE, _T,         description="Reset stored state"),
    "snapshot":     _spec(BUCKET_STATE, _T,         description="Snapshot current state"),
    "save":         _spec(BUCKET_STATE, _T,         description="Save state"),
    "load":         _spec(BUCKET_STATE, _T,         description="Load state"),
    "track":        _spec(BUCKET_STATE, _T,         description="Track state changes"),
    # Conditional form and its branch labels
    "if":           _spec(DEFAULT_BUCKET, _T, description="Conditional group: if{expression}"),
    "true":         _spec(DEFAULT_BUCKET, _T, description="Branch taken when the condition holds"),
    "false":        _spec(DEFAULT_BUCKET, _T, description="Branch taken when the condition fails"),
    "else":         _spec(DEFAULT_BUCKET, _T, description="Alias of false"),
}


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def get_spec(keyword: str | None) -> KeywordSpec | None:
    if not keyword:
        return None
    return KEYWORD_SPECS.get(keyword.lower())


def is_known(keyword: str | None) -> bool:
    return get_spec(keyword) is not None


def bucket_for(keyword: str | None) -> int:
    """Return the bucket for ``keyword``; unknown keywords land in bucket 1."""
    spec = get_spec(keyword)
    return spec.bucket if spec is not None else DEFAULT_BUCKET


def requires(keyword: str | None, zone: str) -> bool:
    spec = get_spec(keyword)
    return spec is not None and zone in spec.required_zones


def resolve_alias(keyword: str, alias_map: dict[str, str]) -> str:
    """Map an alias to its canonical keyword.

    ``alias_map`` keys and values must already be lower-case
    (see SettingsManager.keyword_aliases).  The alias is only applied when
    the canonical keyword is in the table.

    >>> resolve_alias("shade", {"shade": "blur"})
    'blur'
    """
    low = keyword.lower()
    canonical = alias_map.get(low, low)
    if is_known(canonical):
        return canonical
    return keyword
