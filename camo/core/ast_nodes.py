"""AST node dataclasses for metadata statements.

One ``Statement`` is built per statement line by ast_builder.py and consumed
by ir_extractor.py.

Zones
-----
DeclarationZone — keyword [variable]…  (plus the IF condition block)
TargetZone      — // function[argument]
EffectZone      — % {action}(option) …
OutputZone      — -> {outcome}

Ownership
---------
``StatementTree`` owns every statement in a flat arena (source order).
A statement owns its ``children`` list; the link back to its parent is the
arena index in ``parent_index``, looked up through the tree.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from camo.core.prefix import (
    ROOT_OPERATOR, HIERARCHICAL_OPERATOR,
    RELATION_OPERATOR, PARAMETER_OPERATOR, TRIGGER_OPERATOR,
)

OPERATOR_ROOT         = "root"
OPERATOR_HIERARCHICAL = "hierarchical"


@dataclass
class TargetZone:
    """// function[argument] — ``argument`` is the first bracket after the function."""
    function: str
    argument: str | None = None
    raw:      str        = ""


@dataclass
class EffectZone:
    """% {action}(option) … — parameters keyed by action name, raw option text."""
    action:     str | None     = None
    parameters: dict[str, str] = field(default_factory=dict)


@dataclass
class OutputZone:
    """-> {outcome}"""
    outcome: str


@dataclass
class Statement:
    """One parsed metadata line."""
    operator:     str                     # OPERATOR_ROOT | OPERATOR_HIERARCHICAL
    keyword:      str | None       = None
    variables:    list[str]        = field(default_factory=list)
    target:       TargetZone | None = None
    effect:       EffectZone | None = None
    output:       OutputZone | None = None
    condition:    str | None       = None   # IF form only
    label:        str | None       = None   # true / false / else
    depth:        int              = 0
    line:         int              = 0      # 1-based source line
    column:       int              = 0      # 1-based column of the opener
    index:        int              = -1     # position in StatementTree.statements
    parent_index: int | None       = None
    children:     list["Statement"] = field(default_factory=list, repr=False)

    @property
    def variable(self) -> str | None:
        """Primary variable: the first ``[variable]`` of the declaration."""
        return self.variables[0] if self.variables else None

    @property
    def hierarchical(self) -> bool:
        return self.operator == OPERATOR_HIERARCHICAL

    def to_source(self) -> str:
        """Canonical one-line spelling, used for debug output."""
        parts = [HIERARCHICAL_OPERATOR if self.hierarchical else ROOT_OPERATOR]
        decl = self.keyword or ""
        if self.condition is not None:
            decl += "{" + self.condition + "}"
        decl += "".join(f"[{v}]" for v in self.variables)
        if decl:
            parts.append(decl)
        if self.target is not None:
            tgt = self.target.function
            if self.target.argument is not None:
                tgt += f"[{self.target.argument}]"
            parts += [RELATION_OPERATOR, tgt]
        if self.effect is not None:
            pairs = [f"{{{k}}}({v})" for k, v in self.effect.parameters.items()]
            if not pairs and self.effect.action:
                pairs = [f"{{{self.effect.action}}}"]
            parts += [PARAMETER_OPERATOR, " ".join(pairs)]
        if self.output is not None:
            parts += [TRIGGER_OPERATOR, "{" + self.output.outcome + "}"]
        return " ".join(p for p in parts if p)


@dataclass
class StatementTree:
    """Forest of statements; ``roots`` are exactly the statements without a parent."""
    statements: list[Statement] = field(default_factory=list)
    roots:      list[Statement] = field(default_factory=list)

    def parent_of(self, statement: Statement) -> Statement | None:
        if statement.parent_index is None:
            return None
        return self.statements[statement.parent_index]

    def ancestors(self, statement: Statement) -> Iterator[Statement]:
        """Yield parents from nearest to farthest."""
        parent = self.parent_of(statement)
        while parent is not None:
            yield parent
            parent = self.parent_of(parent)

    def walk(self) -> Iterator[Statement]:
        """Depth-first, source-order traversal of the whole forest."""
        stack = list(reversed(self.roots))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    @property
    def max_depth(self) -> int:
        return max((s.depth for s in self.statements), default=0)

    def __len__(self) -> int:
        return len(self.statements)
