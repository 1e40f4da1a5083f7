"""Metadata processor — the end-to-end statement pipeline.

Architecture
------------
MetadataProcessor
  ├─ tokenizer.expand_aliases        — [KEYWORDS] aliases → canonical keywords
  ├─ grammar_validator.GrammarValidator — per-line diagnostics
  ├─ ast_builder.build_lines         — StatementTree
  ├─ ir_extractor.IRExtractor        — IR instructions + diagnostics
  ├─ optimizer.optimize_with_report  — dead code, merge, bucket order
  └─ executor.IRExecutor             — directives (uses ConditionEvaluator)

Recovery
--------
A line with grammar errors is blanked before building, together with every
statement nested below it, so line numbers (and instruction ids) of the
remaining lines do not move.  In strict mode any grammar error blanks the
whole block.  A compile that ends with errors and no instructions is a
*fallback*: ``process`` executes nothing for it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from camo.core.ast_builder import build_lines
from camo.core.ast_nodes import StatementTree
from camo.core.condition import ConditionEvaluator
from camo.core.condition_cache import ConditionCache
from camo.core.context import EvaluationContext
from camo.core.executor import ExecutionResult, Handler, IRExecutor
from camo.core.grammar_validator import Diagnostic, GrammarValidator, SEVERITY_WARNING
from camo.core.ir_extractor import IRExtractor
from camo.core.ir_nodes import ExtractionResult, IRInstruction
from camo.core.optimizer import OptimizationReport, optimize_with_report
from camo.core.presets import PresetDictionary
from camo.core.settings_manager import SettingsManager
from camo.core.tokenizer import expand_aliases, split_lines

LogFn = Callable[[str, str], None]   # (level, message)


class CompileError(Exception):
    """Raised for API misuse, e.g. compiling an unknown preset id."""


@dataclass
class CompileResult:
    block_id:     str
    valid:        bool
    diagnostics:  list[Diagnostic]     = field(default_factory=list)
    tree:         StatementTree        = field(default_factory=StatementTree)
    extraction:   ExtractionResult     = field(default_factory=ExtractionResult)
    instructions: list[IRInstruction]  = field(default_factory=list)
    report:       OptimizationReport   = field(default_factory=OptimizationReport)
    fallback:     bool                 = False

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]


@dataclass
class ProcessResult:
    compile:   CompileResult
    execution: ExecutionResult | None = None

    @property
    def success(self) -> bool:
        return not self.compile.fallback and self.execution is not None and self.execution.success


class MetadataProcessor:
    """Compiles and executes metadata blocks.

    Parameters
    ----------
    settings  : SettingsManager, optional — defaults to built-in constants
    evaluator : ConditionEvaluator, optional — built with a ConditionCache
                configured from ``settings`` when omitted
    handlers  : bucket → handler overrides passed to the IRExecutor
    log       : callback(level, message)
    """

    def __init__(
        self,
        settings:  SettingsManager | None = None,
        evaluator: ConditionEvaluator | None = None,
        handlers:  dict[int, Handler] | None = None,
        log:       LogFn | None = None,
        presets:   PresetDictionary | None = None,
    ) -> None:
        self._settings  = settings or SettingsManager()
        self._log       = log or (lambda lvl, msg: None)
        self._evaluator = evaluator or ConditionEvaluator(
            ConditionCache.from_settings(self._settings), log=self._log,
        )
        self._executor  = IRExecutor(self._evaluator, handlers, log=self._log)
        self._extractor = IRExtractor(log=self._log)
        self._presets   = presets or PresetDictionary()

    # ------------------------------------------------------------------

    @property
    def settings(self) -> SettingsManager:
        return self._settings

    @property
    def evaluator(self) -> ConditionEvaluator:
        return self._evaluator

    @property
    def executor(self) -> IRExecutor:
        return self._executor

    @property
    def presets(self) -> PresetDictionary:
        return self._presets

    # ------------------------------------------------------------------
    # Compile
    # ------------------------------------------------------------------

    def compile(self, lines: list[str] | str, block_id: str, optimize: bool = True) -> CompileResult:
        if isinstance(lines, str):
            lines = split_lines(lines)
        indent  = self._settings.indent_width
        aliases = self._settings.keyword_aliases
        source  = [expand_aliases(line, aliases) for line in lines]

        validator   = GrammarValidator(indent, log=self._log)
        diagnostics: list[Diagnostic] = []
        bad_lines:   set[int] = set()
        for result in validator.validate_lines(source):
            diagnostics.extend(result.diagnostics)
            if not result.valid:
                bad_lines.add(result.line)

        strict = self._settings.strict
        if bad_lines and strict:
            source = [""] * len(source)
            self._log("WARNING", f"Block {block_id!r}: grammar errors in strict mode, block skipped")
        elif bad_lines:
            skipped = self._skipped_lines(source, bad_lines, indent)
            for line_no in sorted(skipped - bad_lines):
                diagnostics.append(Diagnostic(
                    SEVERITY_WARNING, f"Line {line_no} skipped: it is nested under a line with errors",
                    line_no, 1, "compile",
                ))
            source = ["" if i + 1 in skipped else line for i, line in enumerate(source)]

        tree       = build_lines(source, indent)
        extraction = self._extractor.transform(tree, block_id)
        diagnostics.extend(extraction.errors)
        diagnostics.extend(extraction.warnings)
        diagnostics.sort(key=lambda d: (d.line, d.column))

        if optimize:
            instructions, report = optimize_with_report(extraction.instructions)
        else:
            instructions = list(extraction.instructions)
            report = OptimizationReport(len(instructions), 0, 0, len(instructions))

        has_errors = any(d.is_error for d in diagnostics)
        fallback   = has_errors and (strict or not instructions)
        if has_errors:
            self._log("WARNING", f"Block {block_id!r}: {sum(d.is_error for d in diagnostics)} error(s)")
        self._log("INFO", f"Block {block_id!r} compiled: {len(instructions)} instruction(s)")

        return CompileResult(
            block_id     = block_id,
            valid        = not has_errors,
            diagnostics  = diagnostics,
            tree         = tree,
            extraction   = extraction,
            instructions = instructions,
            report       = report,
            fallback     = fallback,
        )

    @staticmethod
    def _skipped_lines(source: list[str], bad_lines: set[int], indent: int) -> set[int]:
        """Lines with errors plus every statement nested below them."""
        skipped = set(bad_lines)
        for stmt in build_lines(source, indent).walk():
            if stmt.line in skipped:
                stack = list(stmt.children)
                while stack:
                    child = stack.pop()
                    skipped.add(child.line)
                    stack.extend(child.children)
        return skipped

    def compile_preset(self, preset_id: str, block_id: str | None = None) -> CompileResult:
        if preset_id not in self._presets:
            raise CompileError(f"Unknown preset: {preset_id!r}")
        return self.compile(self._presets.compile_preset(preset_id), block_id or f"preset-{preset_id}")

    # ------------------------------------------------------------------
    # Process
    # ------------------------------------------------------------------

    async def process(
        self,
        lines:    list[str] | str,
        block_id: str,
        context:  EvaluationContext | None = None,
    ) -> ProcessResult:
        compiled = self.compile(lines, block_id)
        if compiled.fallback:
            self._log("WARNING", f"Block {block_id!r}: compile fell back, nothing executed")
            return ProcessResult(compiled)
        execution = await self._executor.execute(
            compiled.instructions, context or EvaluationContext.now(), block_id,
        )
        if execution.success:
            self._log("SUCCESS", f"Block {block_id!r}: {execution.performance.applied} applied")
        return ProcessResult(compiled, execution)

    # ------------------------------------------------------------------
    # Interaction state
    # ------------------------------------------------------------------

    def update_interaction_state(self, block_id: str, **flags: bool) -> None:
        self._evaluator.update_interaction_state(block_id, **flags)

    def forget_block(self, block_id: str) -> None:
        self._evaluator.forget_block(block_id)
