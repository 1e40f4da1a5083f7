"""IR extractor — turns a StatementTree into normalized IR instructions.

Responsibilities
----------------
- Check each statement has a keyword and a target function
- Map keyword → bucket, function[argument] → Selector
- Coerce option text to bool / int / float / str once, here
- Carry conditions down the tree (inherited first, then own)
- Produce stable ids: ``{block_id}-{keyword}-{line}``

Conditions
----------
``if{expr}`` adds an IF gate.  A ``false`` / ``else`` child flips the
nearest inherited IF into an ELSE gate.  Every branch label also records a
LABEL condition, which never gates.

Invalid statements
------------------
A statement without keyword or target yields an error and no instruction.
Its children are skipped as well (one warning each) so the children of a
broken ``if`` never run ungated.
"""
from __future__ import annotations

import re
from typing import Callable

from camo.core.ast_nodes import Statement, StatementTree
from camo.core.constants import BUCKET_NAMES
from camo.core.grammar_validator import Diagnostic, SEVERITY_ERROR, SEVERITY_WARNING
from camo.core.ir_nodes import (
    Condition, ConditionKind, Effect, ExtractionResult, ExtractionStats,
    InstructionMeta, IRInstruction, ParamValue, Selector,
    SCOPE_BLOCK, SCOPE_CONTENT, SCOPE_ELEMENT, SCOPE_ORDER,
)
from camo.core.keywords import (
    KEYWORD_SPECS, KeywordSpec, CONDITIONAL_KEYWORD, NEGATING_LABELS,
    ZONE_EFFECT, ZONE_OUTPUT,
    bucket_for, get_spec, is_known, requires,
)

LogFn = Callable[[str, str], None]   # (level, message)

_STAGE = "extract"

# function name → selector kind ("all" and unknown functions → content)
TARGET_KINDS: dict[str, str] = {
    "content":   "content",
    "text":      "text",
    "paragraph": "paragraph",
    "line":      "line",
    "element":   "element",
    "pattern":   "pattern",
    "all":       "content",
}

_DEFAULT_SCOPE: dict[str, str] = {
    "content":   SCOPE_BLOCK,
    "text":      SCOPE_CONTENT,
    "paragraph": SCOPE_CONTENT,
    "line":      SCOPE_CONTENT,
    "element":   SCOPE_ELEMENT,
    "pattern":   SCOPE_ELEMENT,
}

_INDEX_RE = re.compile(r"^\d+$")
_RANGE_RE = re.compile(r"^(\d+)-(\d+)$")
_FLOAT_RE = re.compile(r"^\d+\.\d+$")


def coerce_param(raw: str) -> ParamValue:
    """Convert raw option text to the most natural value.

    >>> coerce_param("true"), coerce_param("12"), coerce_param("0.5"), coerce_param("#fff")
    (True, 12, 0.5, '#fff')
    """
    if raw == "true":
        return True
    if raw == "false":
        return False
    if _INDEX_RE.match(raw):
        return int(raw)
    if _FLOAT_RE.match(raw):
        return float(raw)
    return raw


def selector_to_string(selector: Selector) -> str:
    """Render a selector back to ``function[argument]`` form."""
    if isinstance(selector.index, tuple):
        return f"{selector.pattern}[{selector.index[0]}-{selector.index[1]}]"
    if selector.index is not None:
        return f"{selector.pattern}[{selector.index}]"
    if selector.modifier:
        return f"{selector.kind}[{selector.modifier}]"
    return selector.pattern or selector.kind


class IRExtractor:
    """Stateless apart from the log callback; one instance can serve many blocks."""

    def __init__(self, log: LogFn | None = None) -> None:
        self._log = log or (lambda lvl, msg: None)

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    @staticmethod
    def supported_keywords() -> list[str]:
        return sorted(KEYWORD_SPECS)

    @staticmethod
    def keyword_spec(keyword: str) -> KeywordSpec | None:
        return get_spec(keyword)

    def transform(self, tree: StatementTree, block_id: str) -> ExtractionResult:
        result = ExtractionResult()
        for root in tree.roots:
            self._visit(root, block_id, None, (), result)

        stats = ExtractionStats(bucket_counts={bucket: 0 for bucket in BUCKET_NAMES})
        for instr in result.instructions:
            stats.total_instructions += 1
            stats.bucket_counts[instr.bucket] = stats.bucket_counts.get(instr.bucket, 0) + 1
            if instr.gates:
                stats.conditional_branches += 1
            if instr.metadata is not None:
                stats.hierarchical_depth = max(stats.hierarchical_depth, instr.metadata.depth)
        result.stats = stats

        self._log("DEBUG", f"Block {block_id!r}: {stats.total_instructions} instruction(s), "
                           f"{len(result.errors)} error(s), {len(result.warnings)} warning(s)")
        return result

    # ------------------------------------------------------------------
    # Tree walk
    # ------------------------------------------------------------------

    def _visit(
        self,
        stmt:       Statement,
        block_id:   str,
        parent:     Selector | None,
        inherited:  tuple[Condition, ...],
        result:     ExtractionResult,
    ) -> IRInstruction | None:
        if not self._check_statement(stmt, result):
            self._skip_children(stmt, result)
            return None

        keyword = stmt.keyword
        if not is_known(keyword):
            self._warning(result, f"Unknown keyword {keyword!r}; using the "
                                  f"{BUCKET_NAMES[bucket_for(keyword)]} bucket", stmt)
        if requires(keyword, ZONE_EFFECT) and (stmt.effect is None or stmt.effect.action is None):
            self._warning(result, f"Keyword {keyword!r} expects an effect zone", stmt)
        if requires(keyword, ZONE_OUTPUT) and stmt.output is None:
            self._warning(result, f"Keyword {keyword!r} expects an output zone", stmt)
        if keyword == CONDITIONAL_KEYWORD and not stmt.condition:
            self._warning(result, "'if' without a {condition} block adds no gate", stmt)

        selector   = self._normalize_selector(stmt, parent)
        conditions = self._conditions(stmt, inherited)

        effect = None
        if stmt.effect is not None and stmt.effect.action is not None:
            effect = Effect(
                type   = stmt.effect.action,
                params = {k: coerce_param(v) for k, v in stmt.effect.parameters.items()},
            )

        instr = IRInstruction(
            id         = f"{block_id}-{keyword}-{stmt.line}",
            bucket     = bucket_for(keyword),
            variable   = stmt.variable,
            target     = selector,
            effect     = effect,
            outcome    = stmt.output.outcome if stmt.output is not None else None,
            conditions = conditions,
            metadata   = InstructionMeta(
                line     = stmt.line,
                column   = stmt.column,
                operator = stmt.operator,
                keyword  = keyword,
                original = stmt.to_source(),
                depth    = stmt.depth,
            ),
        )
        result.instructions.append(instr)

        for child in stmt.children:
            child_instr = self._visit(child, block_id, selector, conditions, result)
            if child_instr is not None:
                instr.children.append(child_instr)
        return instr

    def _check_statement(self, stmt: Statement, result: ExtractionResult) -> bool:
        ok = True
        if not stmt.keyword:
            self._error(result, f"Statement at line {stmt.line} is missing keyword", stmt)
            ok = False
        if stmt.target is None or not stmt.target.function:
            self._error(result, f"Statement at line {stmt.line} is missing target function", stmt)
            ok = False
        return ok

    def _skip_children(self, stmt: Statement, result: ExtractionResult) -> None:
        for child in stmt.children:
            self._warning(result, f"Skipped statement at line {child.line}: "
                                  f"parent at line {stmt.line} is invalid", child)
            self._skip_children(child, result)

    # ------------------------------------------------------------------
    # Normalisation
    # ------------------------------------------------------------------

    @staticmethod
    def _normalize_selector(stmt: Statement, parent: Selector | None) -> Selector:
        function = stmt.target.function
        kind     = TARGET_KINDS.get(function, "content")
        pattern  = function
        index: int | tuple[int, int] | None = None
        modifier = None

        argument = stmt.target.argument
        if argument:
            if _INDEX_RE.match(argument):
                index = int(argument)
            elif (m := _RANGE_RE.match(argument)) is not None:
                index = (int(m.group(1)), int(m.group(2)))
            else:
                modifier = argument
                pattern  = argument

        scope = _DEFAULT_SCOPE[kind]
        if parent is not None and SCOPE_ORDER[parent.scope] > SCOPE_ORDER[scope]:
            scope = parent.scope
        return Selector(kind=kind, pattern=pattern, index=index, modifier=modifier, scope=scope)

    @staticmethod
    def _conditions(stmt: Statement, inherited: tuple[Condition, ...]) -> tuple[Condition, ...]:
        conditions = list(inherited)
        if stmt.keyword == CONDITIONAL_KEYWORD and stmt.condition:
            conditions.append(Condition(ConditionKind.IF, stmt.condition, stmt.line))
        if stmt.label:
            if stmt.label in NEGATING_LABELS:
                for i in range(len(conditions) - 1, -1, -1):
                    if conditions[i].kind is ConditionKind.IF:
                        cond = conditions[i]
                        conditions[i] = Condition(ConditionKind.ELSE, cond.expression, cond.line)
                        break
            conditions.append(Condition(ConditionKind.LABEL, stmt.label, stmt.line))
        return tuple(conditions)

    # ------------------------------------------------------------------

    @staticmethod
    def _error(result: ExtractionResult, message: str, stmt: Statement) -> None:
        result.errors.append(Diagnostic(SEVERITY_ERROR, message, stmt.line, stmt.column, _STAGE))

    @staticmethod
    def _warning(result: ExtractionResult, message: str, stmt: Statement) -> None:
        result.warnings.append(Diagnostic(SEVERITY_WARNING, message, stmt.line, stmt.column, _STAGE))


def transform(tree: StatementTree, block_id: str, log: LogFn | None = None) -> ExtractionResult:
    """Module-level shortcut for ``IRExtractor(log).transform(tree, block_id)``."""
    return IRExtractor(log).transform(tree, block_id)
