"""Tests for camo.core.presets."""
from camo.core.presets import PresetDefinition, PresetDictionary


class TestBuiltins:
    def test_builtin_ids(self):
        ids = PresetDictionary().preset_ids()
        assert {"blackout", "blueprint", "modern95", "ghost", "matrix", "classified"} <= set(ids)

    def test_get_preset(self):
        preset = PresetDictionary().get_preset("ghost")
        assert preset.css_class == "camo-preset-ghost"
        assert len(preset.metadata) == 2

    def test_compile_preset_returns_copy(self):
        presets = PresetDictionary()
        lines = presets.compile_preset("blackout")
        lines.append("extra")
        assert len(presets.compile_preset("blackout")) == 3

    def test_unknown(self):
        presets = PresetDictionary()
        assert presets.get_preset("nope") is None
        assert presets.compile_preset("nope") == []
        assert "nope" not in presets


class TestCustom:
    def test_register_preset(self):
        presets = PresetDictionary()
        presets.register_preset(PresetDefinition("mine", None, (":: hide // text",)))
        assert "mine" in presets
        assert presets.compile_preset("mine") == [":: hide // text"]

    def test_custom_fields(self):
        preset = PresetDictionary().register_custom_preset("c", background="#111", blur=2.0)
        assert preset.metadata == (
            ":: set[background] // content[all] % {color}(#111) -> {visual[bg]}",
            ":: set[blur] // content[all] % {intensity}(2) -> {visual[blurred]}",
        )

    def test_custom_color_only(self):
        preset = PresetDictionary().register_custom_preset("c", color="red")
        assert preset.metadata == (":: set[text] // color % {color}(red) -> {text[color]}",)

    def test_instances_independent(self):
        a = PresetDictionary()
        a.register_custom_preset("only-a", color="red")
        assert "only-a" not in PresetDictionary()
