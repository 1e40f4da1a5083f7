"""Tests for camo.core.settings_manager."""
import pytest

from camo.core import constants
from camo.core.settings_manager import SettingsManager


@pytest.fixture
def ini(tmp_path):
    path = tmp_path / "settings.ini"
    path.write_text(
        "[COMPILER]\n"
        "indent_width = 4\n"
        "strict = yes   ; inline comment\n"
        "\n"
        "[CACHE]\n"
        "interaction_ttl = 0.5\n"
        "\n"
        "[KEYWORDS]\n"
        "Shade = BLUR\n",
        encoding="utf-8",
    )
    return path


class TestDefaults:
    def test_no_file(self):
        s = SettingsManager()
        assert s.indent_width == constants.INDENT_WIDTH
        assert s.strict is False
        assert s.max_diagnostics == constants.MAX_DIAGNOSTICS
        assert s.interaction_ttl == constants.INTERACTION_TTL_S
        assert s.default_ttl == constants.DEFAULT_TTL_S
        assert s.keyword_aliases == {}

    def test_missing_path_is_ignored(self, tmp_path):
        assert SettingsManager(tmp_path / "absent.ini").indent_width == constants.INDENT_WIDTH


class TestIniValues:
    def test_values(self, ini):
        s = SettingsManager(ini)
        assert s.indent_width == 4
        assert s.strict is True
        assert s.interaction_ttl == 0.5
        assert s.time_ttl == constants.TIME_TTL_S

    def test_aliases_lowercased(self, ini):
        assert SettingsManager(ini).keyword_aliases == {"shade": "blur"}

    def test_indent_width_floor(self, tmp_path):
        path = tmp_path / "s.ini"
        path.write_text("[COMPILER]\nindent_width = 0\n", encoding="utf-8")
        assert SettingsManager(path).indent_width == 1


class TestTypedGetters:
    def test_fallbacks(self, ini):
        s = SettingsManager(ini)
        assert s.getint("COMPILER", "missing", 7) == 7
        assert s.getfloat("NOPE", "x", 1.5) == 1.5
        assert s.getbool("COMPILER", "strict") is True
        assert not hasattr(s, "get")


class TestWrite:
    def test_set_persists(self, ini):
        SettingsManager(ini).set("CACHE", "long_ttl", "90")
        assert SettingsManager(ini).long_ttl == 90.0

    def test_set_new_section_in_memory(self):
        s = SettingsManager()
        s.set("KEYWORDS", "paint", "set")
        assert s.keyword_aliases == {"paint": "set"}

    def test_save_without_path(self):
        with pytest.raises(ValueError):
            SettingsManager().save()
