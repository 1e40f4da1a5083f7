"""Intermediate representation produced by ir_extractor.py.

An ``IRInstruction`` says: in this bucket, for this selector, apply this
effect when every gating condition holds.  Instructions are plain data;
the optimizer returns new lists and the executor only reads them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from camo.core.grammar_validator import Diagnostic

# Option values after coercion at the extraction boundary
ParamValue = Union[str, int, float, bool]

SCOPE_BLOCK   = "block"
SCOPE_CONTENT = "content"
SCOPE_ELEMENT = "element"

# Narrowest wins: block < content < element
SCOPE_ORDER = {SCOPE_BLOCK: 0, SCOPE_CONTENT: 1, SCOPE_ELEMENT: 2}


class ConditionKind(Enum):
    IF    = "if"        # expression must hold
    ELSE  = "else"      # expression must not hold
    LABEL = "label"     # branch marker, never gates


@dataclass(frozen=True)
class Condition:
    kind:       ConditionKind
    expression: str
    line:       int = 0

    @property
    def gate(self) -> bool:
        return self.kind is not ConditionKind.LABEL


@dataclass(frozen=True)
class Selector:
    kind:     str
    pattern:  str | None                    = None
    index:    int | tuple[int, int] | None  = None
    modifier: str | None                    = None
    scope:    str                           = SCOPE_BLOCK


@dataclass
class Effect:
    type:   str
    params: dict[str, ParamValue] = field(default_factory=dict)


@dataclass(frozen=True)
class InstructionMeta:
    line:     int
    column:   int
    operator: str
    keyword:  str
    original: str
    depth:    int


@dataclass
class IRInstruction:
    id:         str
    bucket:     int
    target:     Selector
    effect:     Effect | None            = None
    variable:   str | None               = None     # declaration [variable], e.g. "background"
    outcome:    str | None               = None
    conditions: tuple[Condition, ...]    = ()
    metadata:   InstructionMeta | None   = None
    children:   list["IRInstruction"]    = field(default_factory=list, repr=False)

    @property
    def gates(self) -> tuple[Condition, ...]:
        return tuple(c for c in self.conditions if c.gate)

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly view used by the command line front end."""
        index = list(self.target.index) if isinstance(self.target.index, tuple) else self.target.index
        return {
            "id":     self.id,
            "bucket": self.bucket,
            "variable": self.variable,
            "target": {
                "kind":     self.target.kind,
                "pattern":  self.target.pattern,
                "index":    index,
                "modifier": self.target.modifier,
                "scope":    self.target.scope,
            },
            "effect": None if self.effect is None else {
                "type":   self.effect.type,
                "params": dict(self.effect.params),
            },
            "outcome":    self.outcome,
            "conditions": [{"kind": c.kind.value, "expression": c.expression} for c in self.conditions],
            "line":       self.metadata.line if self.metadata else 0,
            "children":   [child.id for child in self.children],
        }


@dataclass
class ExtractionStats:
    total_instructions:   int = 0
    conditional_branches: int = 0
    hierarchical_depth:   int = 0
    bucket_counts:        dict[int, int] = field(default_factory=dict)


@dataclass
class ExtractionResult:
    instructions: list[IRInstruction] = field(default_factory=list)
    errors:       list[Diagnostic]    = field(default_factory=list)
    warnings:     list[Diagnostic]    = field(default_factory=list)
    stats:        ExtractionStats     = field(default_factory=ExtractionStats)

    @property
    def valid(self) -> bool:
        return not self.errors
