"""Tests for camo.cli — typer commands via CliRunner."""
import json

import pytest
from typer.testing import CliRunner

from camo.cli import app


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def notes(tmp_path, scenario_line):
    path = tmp_path / "notes.camo"
    path.write_text(scenario_line + "\n:: hide // text[2]\n", encoding="utf-8")
    return path


@pytest.fixture
def broken(tmp_path):
    path = tmp_path / "broken.camo"
    path.write_text("invalid syntax\n", encoding="utf-8")
    return path


class TestCheck:
    def test_valid_file(self, runner, notes):
        result = runner.invoke(app, ["check", str(notes)])
        assert result.exit_code == 0
        assert "✓ notes.camo: 1 instruction(s)" in result.stdout

    def test_errors_exit_one(self, runner, broken):
        result = runner.invoke(app, ["check", str(broken)])
        assert result.exit_code == 1
        assert "Statement must start with" in result.stdout
        assert "1 error(s)" in result.stdout

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(app, ["check", str(tmp_path / "nope.camo")])
        assert result.exit_code == 2


class TestCompile:
    def test_json_output(self, runner, notes):
        result = runner.invoke(app, ["compile", str(notes), "--json", "-b", "blk"])
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["block_id"] == "blk"
        assert payload["valid"] is True
        assert payload["fallback"] is False
        assert [i["id"] for i in payload["instructions"]] == ["blk-set-1"]
        assert payload["instructions"][0]["effect"] == {"type": "color", "params": {"color": "#ff0000"}}
        assert payload["report"]["removed"] == 1

    def test_no_optimize_keeps_effectless(self, runner, notes):
        result = runner.invoke(app, ["compile", str(notes), "--json", "--no-optimize"])
        ids = [i["id"] for i in json.loads(result.stdout)["instructions"]]
        assert ids == ["notes-set-1", "notes-hide-2"]

    def test_text_output(self, runner, notes):
        result = runner.invoke(app, ["compile", str(notes)])
        assert result.exit_code == 0
        assert "notes-set-1  [visual]  content[all] color(color='#ff0000') -> visual[solid]" in result.stdout

    def test_fallback_reported(self, runner, broken):
        result = runner.invoke(app, ["compile", str(broken)])
        assert "Compile fell back" in result.stdout

    def test_settings_aliases(self, runner, tmp_path):
        ini = tmp_path / "settings.ini"
        ini.write_text("[KEYWORDS]\nshade = blur\n", encoding="utf-8")
        src = tmp_path / "a.camo"
        src.write_text(":: shade // text % {radius}(4)\n", encoding="utf-8")
        result = runner.invoke(app, ["compile", str(src), "--json", "--settings", str(ini)])
        assert json.loads(result.stdout)["instructions"][0]["id"] == "a-blur-1"


class TestPresets:
    def test_list(self, runner):
        result = runner.invoke(app, ["presets"])
        assert result.exit_code == 0
        assert result.stdout.split() == [
            "blackout", "blueprint", "modern95", "ghost", "matrix", "classified",
        ]

    def test_show(self, runner):
        result = runner.invoke(app, ["presets", "classified"])
        assert result.exit_code == 0
        assert result.stdout.startswith(":: set[background] // content[all]")

    def test_unknown(self, runner):
        result = runner.invoke(app, ["presets", "nope"])
        assert result.exit_code == 1
