"""Preset dictionary — named bundles of metadata statements.

A preset is just a list of statement lines that is compiled like any other
block.  The built-ins below ship with the package; hosts can register their
own, or build one from simple style fields with ``register_custom_preset``.
"""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PresetDefinition:
    id:        str
    css_class: str | None     = None
    metadata:  tuple[str, ...] = field(default_factory=tuple)


_BUILTINS: tuple[PresetDefinition, ...] = (
    PresetDefinition("blackout", "camo-preset-blackout", (
        ":: set[background] // content[all] % {color}(#000000) -> {visual[blackout]}",
        ":: set[opacity] // text[all] % {value}(0) -> {text[hidden]}",
        ":: reveal[click] // content[all] % {animation}(fade) -> {interaction[ready]}",
    )),
    PresetDefinition("blueprint", "camo-preset-blueprint", (
        ":: set[background] // content[all] % {color}(#0D1F2D) -> {visual[blueprint]}",
        ":: apply[grid] // overlay % {spacing}(20px) -> {grid[applied]}",
        ":: set[text] // color % {color}(#4FC3F7) -> {text[cyan]}",
    )),
    PresetDefinition("modern95", "camo-preset-modern95", (
        ":: set[background] // content[all] % {color}(#2B2B2B) -> {visual[charcoal]}",
        ":: set[text] // color % {color}(#00FF41) -> {text[terminal_green]}",
    )),
    PresetDefinition("ghost", "camo-preset-ghost", (
        ":: set[opacity] // content[all] % {value}(0.15) -> {visual[translucent]}",
        ":: reveal[hover] // opacity % {target}(1.0) -> {interaction[hover_reveal]}",
    )),
    PresetDefinition("matrix", "camo-preset-matrix", (
        ":: set[background] // content[all] % {color}(#000000) -> {visual[black]}",
        ":: reveal[click] // animation % {type}(digital_fade) -> {ready}",
    )),
    PresetDefinition("classified", "camo-preset-classified", (
        ":: set[background] // content[all] % {color}(#F5F5DC) -> {visual[document]}",
    )),
)


class PresetDictionary:
    def __init__(self) -> None:
        self._presets: dict[str, PresetDefinition] = {}
        for preset in _BUILTINS:
            self.register_preset(preset)

    def register_preset(self, preset: PresetDefinition) -> None:
        """Add or replace a preset."""
        self._presets[preset.id] = preset

    def register_custom_preset(
        self,
        preset_id:  str,
        background: str | None   = None,
        color:      str | None   = None,
        blur:       float | None = None,
    ) -> PresetDefinition:
        """Build a preset from simple style fields; only the given fields emit lines."""
        lines: list[str] = []
        if background:
            lines.append(f":: set[background] // content[all] % {{color}}({background}) -> {{visual[bg]}}")
        if color:
            lines.append(f":: set[text] // color % {{color}}({color}) -> {{text[color]}}")
        if blur is not None:
            lines.append(f":: set[blur] // content[all] % {{intensity}}({blur:g}) -> {{visual[blurred]}}")
        preset = PresetDefinition(preset_id, None, tuple(lines))
        self.register_preset(preset)
        return preset

    def get_preset(self, preset_id: str) -> PresetDefinition | None:
        return self._presets.get(preset_id)

    def compile_preset(self, preset_id: str) -> list[str]:
        """Statement lines of a preset (a fresh list); empty for unknown ids."""
        preset = self._presets.get(preset_id)
        return list(preset.metadata) if preset is not None else []

    def preset_ids(self) -> list[str]:
        return list(self._presets)

    def __contains__(self, preset_id: str) -> bool:
        return preset_id in self._presets
