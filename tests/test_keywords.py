"""Tests for camo.core.keywords."""
import pytest

from camo.core.keywords import (
    KEYWORD_SPECS, ZONE_TARGET, ZONE_EFFECT, ZONE_OUTPUT, ZONE_DECLARATION,
    bucket_for, get_spec, is_known, requires, resolve_alias,
)


class TestLookups:
    @pytest.mark.parametrize("keyword,bucket", [
        ("set", 1), ("hide", 1), ("resize", 2), ("animate", 3),
        ("hover", 4), ("toggle", 4), ("store", 5), ("protect", 5),
    ])
    def test_buckets(self, keyword, bucket):
        assert bucket_for(keyword) == bucket

    def test_unknown_lands_in_visual(self):
        assert bucket_for("sparkle") == 1
        assert bucket_for(None) == 1

    def test_case_insensitive(self):
        assert is_known("SET")
        assert get_spec("Store").bucket == 5

    def test_every_keyword_has_declaration(self):
        assert all(ZONE_DECLARATION in s.required_zones for s in KEYWORD_SPECS.values())

    def test_requires(self):
        assert requires("set", ZONE_EFFECT)
        assert not requires("hide", ZONE_EFFECT)
        assert requires("store", ZONE_OUTPUT)
        assert requires("if", ZONE_TARGET)
        assert not requires("sparkle", ZONE_TARGET)


class TestAliases:
    def test_known_canonical(self):
        assert resolve_alias("Shade", {"shade": "blur"}) == "blur"

    def test_unknown_canonical_keeps_keyword(self):
        assert resolve_alias("shade", {"shade": "sparkle"}) == "shade"

    def test_canonical_keyword_lowercased(self):
        assert resolve_alias("HIDE", {}) == "hide"
