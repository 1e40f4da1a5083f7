"""Command line front end.

    camo check notes.camo             # grammar + extraction diagnostics
    camo compile notes.camo --json    # optimized IR as JSON
    camo presets blackout             # statement lines of a preset
"""
from __future__ import annotations

import json
from pathlib import Path

import typer

from camo.core.constants import BUCKET_NAMES
from camo.core.ir_extractor import selector_to_string
from camo.core.ir_nodes import IRInstruction
from camo.core.processor import CompileResult, MetadataProcessor
from camo.core.settings_manager import SettingsManager
from camo.core.tokenizer import split_lines

app = typer.Typer(help="Compile metadata statements into presentation instructions.")


def _stderr_log(level: str, msg: str) -> None:
    typer.echo(f"[{level}] {msg}", err=True)


def _processor(ctx: typer.Context, settings_path: Path | None) -> MetadataProcessor:
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    return MetadataProcessor(SettingsManager(settings_path), log=_stderr_log if verbose else None)


def _read_lines(path: Path) -> list[str]:
    if not path.exists():
        typer.echo(f"File not found: {path}", err=True)
        raise typer.Exit(code=2)
    return split_lines(path.read_text(encoding="utf-8"))


def _print_diagnostics(result: CompileResult, limit: int) -> None:
    shown = result.diagnostics[:limit]
    for diag in shown:
        typer.echo(f"{diag.line}:{diag.column}: {diag.severity} [{diag.stage}] {diag.message}")
    if len(result.diagnostics) > limit:
        typer.echo(f"... {len(result.diagnostics) - limit} more")


def _format_instruction(instr: IRInstruction) -> str:
    effect = ""
    if instr.effect is not None:
        params = ", ".join(f"{k}={v!r}" for k, v in instr.effect.params.items())
        effect = f" {instr.effect.type}({params})"
    gates = " and ".join(
        (c.expression if c.kind.value == "if" else f"not ({c.expression})") for c in instr.gates
    )
    text = f"{instr.id}  [{BUCKET_NAMES.get(instr.bucket, instr.bucket)}]  {selector_to_string(instr.target)}{effect}"
    if instr.outcome:
        text += f" -> {instr.outcome}"
    if gates:
        text += f"  when {gates}"
    return text


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log pipeline messages to stderr"),
) -> None:
    ctx.obj = {"verbose": verbose}


@app.command("check")
def check(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="File with one metadata statement per line"),
    settings: Path | None = typer.Option(None, "--settings", "-s", help="settings.ini to use"),
) -> None:
    """Validate a file and print its diagnostics."""
    processor = _processor(ctx, settings)
    result = processor.compile(_read_lines(file), file.stem)
    _print_diagnostics(result, processor.settings.max_diagnostics)
    if result.errors:
        typer.echo(f"✗ {len(result.errors)} error(s), {len(result.warnings)} warning(s)")
        raise typer.Exit(code=1)
    typer.echo(f"✓ {file.name}: {len(result.instructions)} instruction(s), "
               f"{len(result.warnings)} warning(s)")


@app.command("compile")
def compile_(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="File with one metadata statement per line"),
    block_id: str | None = typer.Option(None, "--block-id", "-b", help="Block id (default: file name)"),
    as_json: bool = typer.Option(False, "--json", help="Print the IR as JSON"),
    no_optimize: bool = typer.Option(False, "--no-optimize", help="Skip the optimizer"),
    settings: Path | None = typer.Option(None, "--settings", "-s", help="settings.ini to use"),
) -> None:
    """Compile a file and print its instructions."""
    processor = _processor(ctx, settings)
    result = processor.compile(_read_lines(file), block_id or file.stem, optimize=not no_optimize)

    if as_json:
        payload = {
            "block_id":     result.block_id,
            "valid":        result.valid,
            "fallback":     result.fallback,
            "diagnostics":  [
                {"severity": d.severity, "stage": d.stage, "line": d.line,
                 "column": d.column, "message": d.message}
                for d in result.diagnostics
            ],
            "instructions": [instr.to_dict() for instr in result.instructions],
            "report": {
                "removed": result.report.removed,
                "merged":  result.report.merged,
            },
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    _print_diagnostics(result, processor.settings.max_diagnostics)
    for instr in result.instructions:
        typer.echo(_format_instruction(instr))
    if result.fallback:
        typer.echo("Compile fell back: nothing would be executed")


@app.command("presets")
def presets(
    ctx: typer.Context,
    preset_id: str | None = typer.Argument(None, help="Preset to show"),
) -> None:
    """List built-in presets, or print the statements of one."""
    dictionary = _processor(ctx, None).presets
    if preset_id is None:
        for pid in dictionary.preset_ids():
            typer.echo(pid)
        return
    if preset_id not in dictionary:
        typer.echo(f"Unknown preset: {preset_id}", err=True)
        raise typer.Exit(code=1)
    for line in dictionary.compile_preset(preset_id):
        typer.echo(line)
