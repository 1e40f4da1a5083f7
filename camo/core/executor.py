"""IR executor — resolves IR instructions into effect directives.

Execution model
---------------
- Instructions run strictly in list order; each handler is awaited before
  the next instruction starts (no fan-out).
- Gating conditions are checked first; a failing gate → ``skipped``.
- The handler comes from a bucket dispatch table.  Hosts replace or add
  handlers with ``register_handler(bucket, fn)``.
- A handler takes ``(instruction, context)`` and returns None, one
  ``EffectDirective`` or an iterable of them, directly or as an awaitable.
- An exception inside a handler marks that instruction ``failed``; the
  remaining instructions still run.

The executor renders nothing itself: directives are handed back to the host,
which applies them to the document.
"""
from __future__ import annotations

import inspect
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

from camo.core.condition import ConditionEvaluator
from camo.core.constants import (
    BUCKET_VISUAL, BUCKET_LAYOUT, BUCKET_ANIMATION, BUCKET_INTERACTION, BUCKET_STATE,
)
from camo.core.context import EvaluationContext
from camo.core.ir_extractor import selector_to_string
from camo.core.ir_nodes import IRInstruction, ParamValue

LogFn   = Callable[[str, str], None]
Handler = Callable[[IRInstruction, EvaluationContext], Any]

STATUS_APPLIED = "applied"
STATUS_SKIPPED = "skipped"
STATUS_FAILED  = "failed"


# ---------------------------------------------------------------------------
# Result records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EffectDirective:
    target:         str
    effect_type:    str
    parameters:     dict[str, ParamValue]
    instruction_id: str


@dataclass
class InstructionResult:
    instruction_id: str
    status:         str
    directives:     list[EffectDirective] = field(default_factory=list)
    error:          str | None            = None
    duration_ms:    float                 = 0.0


@dataclass
class PerformanceMetrics:
    start_time:        float = 0.0    # wall clock, seconds since the epoch
    end_time:          float = 0.0
    total_ms:          float = 0.0
    instruction_count: int   = 0
    applied:           int   = 0
    skipped:           int   = 0
    failed:            int   = 0


@dataclass
class ExecutionResult:
    success:     bool
    results:     list[InstructionResult] = field(default_factory=list)
    performance: PerformanceMetrics      = field(default_factory=PerformanceMetrics)

    @property
    def directives(self) -> list[EffectDirective]:
        return [d for r in self.results for d in r.directives]


# ---------------------------------------------------------------------------
# Executor
# ---------------------------------------------------------------------------

class IRExecutor:
    """Executes IR instruction lists for one host."""

    def __init__(
        self,
        evaluator: ConditionEvaluator,
        handlers:  dict[int, Handler] | None = None,
        log:       LogFn | None = None,
    ) -> None:
        self._evaluator = evaluator
        self._log       = log or (lambda level, msg: None)
        self._handlers: dict[int, Handler] = {
            bucket: method.__get__(self) for bucket, method in _DISPATCH.items()
        }
        for bucket, fn in (handlers or {}).items():
            self.register_handler(bucket, fn)

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def register_handler(self, bucket: int, fn: Handler) -> None:
        self._handlers[bucket] = fn

    def handler_for(self, bucket: int) -> Handler:
        return self._handlers.get(bucket, self._emit_effect)

    async def execute(
        self,
        instructions: list[IRInstruction],
        context:      EvaluationContext,
        block_id:     str = "",
    ) -> ExecutionResult:
        perf = PerformanceMetrics(start_time=time.time(), instruction_count=len(instructions))
        t0   = time.perf_counter()

        results: list[InstructionResult] = []
        for instr in instructions:
            result = await self._execute_one(instr, context, block_id)
            results.append(result)
            if result.status == STATUS_APPLIED:
                perf.applied += 1
            elif result.status == STATUS_SKIPPED:
                perf.skipped += 1
            else:
                perf.failed += 1

        perf.total_ms = (time.perf_counter() - t0) * 1000.0
        perf.end_time = time.time()
        self._log("DEBUG", f"Executed {len(instructions)} instruction(s) in {perf.total_ms:.2f} ms "
                           f"({perf.applied} applied, {perf.skipped} skipped, {perf.failed} failed)")
        return ExecutionResult(success=perf.failed == 0, results=results, performance=perf)

    # ------------------------------------------------------------------
    # Per-instruction execution
    # ------------------------------------------------------------------

    async def _execute_one(
        self,
        instr:    IRInstruction,
        context:  EvaluationContext,
        block_id: str,
    ) -> InstructionResult:
        if not self._evaluator.evaluate_all(instr.conditions, context, block_id):
            return InstructionResult(instr.id, STATUS_SKIPPED)

        t0 = time.perf_counter()
        try:
            out = self.handler_for(instr.bucket)(instr, context)
            if inspect.isawaitable(out):
                out = await out
            directives = _as_directives(out)
        except Exception as exc:
            self._log("ERROR", f"Instruction {instr.id} failed: {exc}")
            return InstructionResult(
                instr.id, STATUS_FAILED, error=str(exc),
                duration_ms=(time.perf_counter() - t0) * 1000.0,
            )
        return InstructionResult(
            instr.id, STATUS_APPLIED, directives=directives,
            duration_ms=(time.perf_counter() - t0) * 1000.0,
        )

    # ------------------------------------------------------------------
    # Default bucket handlers
    # ------------------------------------------------------------------

    def _emit_effect(self, instr: IRInstruction, context: EvaluationContext) -> EffectDirective:
        """Visual / layout / animation / interaction: one directive per instruction."""
        return EffectDirective(
            target         = selector_to_string(instr.target),
            effect_type    = instr.effect.type if instr.effect else instr.metadata.keyword,
            parameters     = dict(instr.effect.params) if instr.effect else {},
            instruction_id = instr.id,
        )

    def _emit_state(self, instr: IRInstruction, context: EvaluationContext) -> EffectDirective:
        """State bucket: the outcome travels with the parameters."""
        directive = self._emit_effect(instr, context)
        if instr.outcome is not None:
            directive.parameters["outcome"] = instr.outcome
        return directive


def _as_directives(out: Any) -> list[EffectDirective]:
    if out is None:
        return []
    if isinstance(out, EffectDirective):
        return [out]
    if isinstance(out, Iterable) and not isinstance(out, (str, bytes, Mapping)):
        directives = list(out)
        if all(isinstance(d, EffectDirective) for d in directives):
            return directives
    raise TypeError(f"Handler returned {type(out).__name__}, expected EffectDirective(s)")


# ---------------------------------------------------------------------------
# Dispatch table — maps bucket → default handler
# ---------------------------------------------------------------------------

_DISPATCH: dict[int, Any] = {
    BUCKET_VISUAL:      IRExecutor._emit_effect,
    BUCKET_LAYOUT:      IRExecutor._emit_effect,
    BUCKET_ANIMATION:   IRExecutor._emit_effect,
    BUCKET_INTERACTION: IRExecutor._emit_effect,
    BUCKET_STATE:       IRExecutor._emit_state,
}
