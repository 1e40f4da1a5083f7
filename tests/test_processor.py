"""Tests for camo.core.processor — end-to-end compile and process."""
import asyncio

import pytest

from camo.core.context import EvaluationContext, InteractionState
from camo.core.processor import CompileError, MetadataProcessor
from camo.core.settings_manager import SettingsManager


@pytest.fixture
def processor():
    return MetadataProcessor()


def settings_with(tmp_path, text):
    ini = tmp_path / "settings.ini"
    ini.write_text(text, encoding="utf-8")
    return SettingsManager(ini)


class TestCompile:
    def test_scenario(self, processor, scenario_line):
        result = processor.compile([scenario_line], "b1")
        assert result.valid
        assert not result.fallback
        assert [i.id for i in result.instructions] == ["b1-set-1"]

    def test_text_input(self, processor):
        result = processor.compile(":: hide // text\n:: set[x] // text % {a}(1)\n", "b")
        assert [i.id for i in result.instructions] == ["b-set-2"]
        assert result.report.removed == 1

    def test_invalid_syntax_falls_back(self, processor):
        result = processor.compile(["invalid syntax"], "b")
        assert not result.valid
        assert result.fallback
        assert result.instructions == []
        assert result.errors[0].stage == "grammar"

    def test_bad_line_and_descendants_blanked(self, processor):
        result = processor.compile([
            ":: set[a] // content % {color}(red)",
            ":: if{hover}",
            "  :^: true // text % {opacity}(1)",
            ":: set[b] // text[2] % {color}(blue)",
        ], "b")
        assert not result.valid
        assert not result.fallback
        assert [i.id for i in result.instructions] == ["b-set-1", "b-set-4"]
        assert any(d.stage == "compile" and d.line == 3 for d in result.warnings)

    def test_declaration_variables_kept_apart(self, processor):
        result = processor.compile([
            ":: set[background] // content[all] % {color}(#000000)",
            ":: set[text] // content[all] % {color}(#ffffff)",
        ], "b")
        assert [(i.id, i.variable) for i in result.instructions] == [
            ("b-set-1", "background"), ("b-set-2", "text"),
        ]
        assert result.report.merged == 0

    def test_recompile_ids_identical(self, processor, hierarchy_lines):
        first  = [i.id for i in processor.compile(hierarchy_lines, "n").instructions]
        second = [i.id for i in processor.compile(hierarchy_lines, "n").instructions]
        assert first == second

    def test_no_optimize(self, processor):
        result = processor.compile([":: hide // text"], "b", optimize=False)
        assert len(result.instructions) == 1

    def test_strict_mode_blanks_everything(self, tmp_path):
        proc = MetadataProcessor(settings_with(tmp_path, "[COMPILER]\nstrict = true\n"))
        result = proc.compile([":: set[a] // content % {color}(red)", "bad line"], "b")
        assert result.fallback
        assert result.instructions == []

    def test_aliases_expanded(self, tmp_path):
        proc = MetadataProcessor(settings_with(tmp_path, "[KEYWORDS]\nPaint = set\n"))
        result = proc.compile([":: paint[x] // text % {color}(red)"], "b")
        assert result.valid
        assert result.instructions[0].id == "b-set-1"

    def test_log_levels(self, log, scenario_line):
        MetadataProcessor(log=log).compile([scenario_line], "b")
        assert "INFO" in log.levels()


class TestPresets:
    def test_compile_preset(self, processor):
        result = processor.compile_preset("blackout")
        assert result.block_id == "preset-blackout"
        assert result.valid
        assert len(result.instructions) == 3

    def test_every_builtin_compiles(self, processor):
        for preset_id in processor.presets.preset_ids():
            assert processor.compile_preset(preset_id).valid, preset_id

    def test_unknown_preset(self, processor):
        with pytest.raises(CompileError):
            processor.compile_preset("nope")


class TestProcess:
    LINES = [
        ":: if{hover} // content",
        "  :^: true // text % {opacity}(1)",
        "  :^: else // text % {opacity}(0.2)",
    ]

    def test_process_applies_else_branch(self, processor):
        result = asyncio.run(processor.process(self.LINES, "b", EvaluationContext()))
        assert result.success
        assert [d.parameters for d in result.execution.directives] == [{"opacity": 0.2}]

    def test_interaction_update_switches_branch(self, processor):
        ctx = EvaluationContext()
        asyncio.run(processor.process(self.LINES, "b", ctx))
        processor.update_interaction_state("b", hover=True)
        result = asyncio.run(processor.process(self.LINES, "b", ctx))
        assert [d.parameters for d in result.execution.directives] == [{"opacity": 1}]

    def test_explicit_context_hover(self, processor):
        ctx = EvaluationContext(interaction=InteractionState(hover=True))
        result = asyncio.run(processor.process(self.LINES, "other", ctx))
        assert [d.parameters for d in result.execution.directives] == [{"opacity": 1}]

    def test_fallback_executes_nothing(self, processor):
        result = asyncio.run(processor.process(["invalid syntax"], "b"))
        assert result.execution is None
        assert not result.success

    def test_forget_block(self, processor):
        processor.update_interaction_state("b", hover=True)
        processor.forget_block("b")
        result = asyncio.run(processor.process(self.LINES, "b", EvaluationContext()))
        assert [d.parameters for d in result.execution.directives] == [{"opacity": 0.2}]
