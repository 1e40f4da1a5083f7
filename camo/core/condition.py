"""Conditional evaluator for IR instruction gates.

Evaluates ``if{...}`` expressions against an ``EvaluationContext``.
Evaluation is fail-closed: malformed expressions, unresolved paths and
invalid regexes all give False, and nothing raises.

Interaction overlay
-------------------
Hover / click / focus change far more often than the rest of the context.
``update_interaction_state(block_id, hover=True)`` records the live flags
for one block; they override the context's interaction record for that
block, and the block's cached interaction results are dropped.
Overlays live until ``forget_block``: an all-False overlay still overrides
the context, so hosts call ``forget_block`` when a block is unloaded.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Callable, Iterable

from camo.core.condition_cache import ConditionCache
from camo.core.context import EvaluationContext
from camo.core.expression import parse_condition, eval_parsed
from camo.core.ir_nodes import Condition, ConditionKind

LogFn = Callable[[str, str], None]   # (level, message)

_INTERACTION_FLAGS = frozenset({"hover", "click", "focus"})


class ConditionEvaluator:
    def __init__(self, cache: ConditionCache | None = None, log: LogFn | None = None) -> None:
        self._cache = cache
        self._log   = log or (lambda lvl, msg: None)
        self._interaction: dict[str, dict[str, bool]] = {}

    @property
    def cache(self) -> ConditionCache | None:
        return self._cache

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def evaluate(self, expression: str, context: EvaluationContext, block_id: str = "") -> bool:
        """Evaluate one expression.  Results are cached per block when a cache is set."""
        use_cache = self._cache is not None and bool(block_id)
        if use_cache:
            cached = self._cache.get(block_id, expression)
            if cached is not None:
                return cached

        ctx = self._effective_context(context, block_id)
        try:
            result = eval_parsed(parse_condition(expression), ctx.as_lookup(), self._log)
        except (TypeError, ValueError) as exc:
            self._log("WARNING", f"Condition {expression!r} could not be evaluated: {exc}")
            result = False

        if use_cache:
            self._cache.set(block_id, expression, result)
        return result

    def evaluate_condition(self, condition: Condition, context: EvaluationContext, block_id: str = "") -> bool:
        if condition.kind is ConditionKind.LABEL:
            return True
        held = self.evaluate(condition.expression, context, block_id)
        return held if condition.kind is ConditionKind.IF else not held

    def evaluate_all(self, conditions: Iterable[Condition], context: EvaluationContext, block_id: str = "") -> bool:
        """AND across IF / ELSE gates; labels are ignored; no gates → True."""
        for cond in conditions:
            if not self.evaluate_condition(cond, context, block_id):
                return False
        return True

    def update_interaction_state(self, block_id: str, **flags: bool) -> None:
        unknown = set(flags) - _INTERACTION_FLAGS
        if unknown:
            raise TypeError(f"Unknown interaction flag(s): {', '.join(sorted(unknown))}")
        self._interaction.setdefault(block_id, {}).update({k: bool(v) for k, v in flags.items()})
        if self._cache is not None:
            self._cache.invalidate(block_id, "interaction")

    def forget_block(self, block_id: str) -> None:
        self._interaction.pop(block_id, None)
        if self._cache is not None:
            self._cache.forget_block(block_id)

    # ------------------------------------------------------------------

    def _effective_context(self, context: EvaluationContext, block_id: str) -> EvaluationContext:
        flags = self._interaction.get(block_id)
        if not flags:
            return context
        return replace(context, interaction=replace(context.interaction, **flags))
