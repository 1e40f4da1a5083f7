"""IR optimizer.

Passes
------
1. dead-instruction elimination : no effect, or an effect without parameters
2. consolidation                : same bucket + variable + target + effect type
                                  + outcome + conditions
                                  → one instruction, parameters merged in order
                                  (later values win), first id and position kept
3. bucket ordering              : stable sort by bucket

``optimize`` is idempotent and never mutates its input; merged effects and
instructions are fresh copies.
"""
from __future__ import annotations

from dataclasses import dataclass, replace

from camo.core.ir_nodes import Effect, IRInstruction


@dataclass
class OptimizationReport:
    input_count:  int = 0
    removed:      int = 0     # dead instructions dropped
    merged:       int = 0     # instructions folded into an earlier one
    output_count: int = 0


def _is_dead(instr: IRInstruction) -> bool:
    return instr.effect is None or not instr.effect.params


def _merge_key(instr: IRInstruction) -> tuple:
    return (instr.bucket, instr.variable, instr.target, instr.effect.type, instr.outcome, instr.conditions)


def optimize_with_report(instructions: list[IRInstruction]) -> tuple[list[IRInstruction], OptimizationReport]:
    report = OptimizationReport(input_count=len(instructions))

    # Pass 1: dead-instruction elimination
    live = [i for i in instructions if not _is_dead(i)]
    report.removed = len(instructions) - len(live)

    # Pass 2: consolidation
    merged: list[IRInstruction] = []
    by_key: dict[tuple, int] = {}
    for instr in live:
        key = _merge_key(instr)
        if key in by_key:
            pos  = by_key[key]
            head = merged[pos]
            params = dict(head.effect.params)
            params.update(instr.effect.params)
            merged[pos] = replace(head, effect=Effect(head.effect.type, params))
            report.merged += 1
        else:
            by_key[key] = len(merged)
            merged.append(replace(instr, effect=Effect(instr.effect.type, dict(instr.effect.params))))

    # Pass 3: stable bucket ordering
    result = sorted(merged, key=lambda i: i.bucket)
    report.output_count = len(result)
    return result, report


def optimize(instructions: list[IRInstruction]) -> list[IRInstruction]:
    """Return the optimized instruction list (see module docstring)."""
    return optimize_with_report(instructions)[0]
