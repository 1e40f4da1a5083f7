"""Tests for camo.core.condition — gates, caching, interaction overlay."""
from dataclasses import replace

import pytest

from camo.core.condition import ConditionEvaluator
from camo.core.condition_cache import ConditionCache
from camo.core.context import EvaluationContext, InteractionState, ThemeInfo
from camo.core.ir_nodes import Condition, ConditionKind


@pytest.fixture
def ctx():
    return EvaluationContext(theme=ThemeInfo("dark"))


@pytest.fixture
def cached(clock):
    return ConditionEvaluator(ConditionCache(clock=clock))


IF    = ConditionKind.IF
ELSE  = ConditionKind.ELSE
LABEL = ConditionKind.LABEL


class TestEvaluate:
    def test_simple(self, ctx):
        ev = ConditionEvaluator()
        assert ev.evaluate("theme == dark", ctx) is True
        assert ev.evaluate("hover", ctx) is False

    def test_unresolved_is_false(self, ctx):
        assert ConditionEvaluator().evaluate("file.name == notes", ctx) is False

    def test_never_raises_on_garbage(self, ctx, log):
        ev = ConditionEvaluator(log=log)
        for expr in ("", "==", "~ (", "a ~ (", "...", ">=<=!=="):
            assert ev.evaluate(expr, ctx) is False


class TestEvaluateAll:
    def test_empty_is_true(self, ctx):
        assert ConditionEvaluator().evaluate_all([], ctx) is True

    def test_if_and_else(self, ctx):
        ev = ConditionEvaluator()
        assert ev.evaluate_all([Condition(IF, "theme == dark")], ctx)
        assert not ev.evaluate_all([Condition(ELSE, "theme == dark")], ctx)
        assert ev.evaluate_all([Condition(ELSE, "hover")], ctx)

    def test_labels_ignored(self, ctx):
        conds = [Condition(IF, "theme.dark"), Condition(LABEL, "true")]
        assert ConditionEvaluator().evaluate_all(conds, ctx)
        assert ConditionEvaluator().evaluate_all([Condition(LABEL, "nonsense")], ctx)

    def test_and_semantics(self, ctx):
        conds = [Condition(IF, "theme.dark"), Condition(IF, "hover")]
        assert not ConditionEvaluator().evaluate_all(conds, ctx)


class TestCaching:
    def test_result_cached_per_block(self, cached, ctx):
        assert cached.evaluate("hover", ctx, "b1") is False
        hovered = replace(ctx, interaction=InteractionState(hover=True))
        # still within the 1 s interaction TTL
        assert cached.evaluate("hover", hovered, "b1") is False
        assert cached.evaluate("hover", hovered, "b2") is True

    def test_interaction_entries_expire_after_one_second(self, cached, ctx, clock):
        cached.evaluate("hover", ctx, "b1")
        clock.advance(1.0)
        hovered = replace(ctx, interaction=InteractionState(hover=True))
        assert cached.evaluate("hover", hovered, "b1") is True

    def test_theme_entries_live_longer(self, cached, ctx, clock):
        assert cached.evaluate("theme == dark", ctx, "b1") is True
        clock.advance(30.0)
        light = replace(ctx, theme=ThemeInfo("light"))
        assert cached.evaluate("theme == dark", light, "b1") is True
        clock.advance(30.0)
        assert cached.evaluate("theme == dark", light, "b1") is False

    def test_no_block_id_bypasses_cache(self, cached, ctx):
        cached.evaluate("hover", ctx)
        assert len(cached.cache) == 0

    def test_cache_does_not_grow_with_expired_results(self, cached, ctx, clock):
        for i in range(100):
            cached.evaluate(f"user.n{i} == 1", ctx, "b1")
            clock.advance(10.0)
        assert len(cached.cache) == 1


class TestInteractionOverlay:
    def test_overlay_applies_to_block(self, cached, ctx):
        cached.update_interaction_state("b1", hover=True)
        assert cached.evaluate("hover", ctx, "b1") is True
        assert cached.evaluate("hover", ctx, "b2") is False
        assert ctx.interaction.hover is False

    def test_update_invalidates_interaction_entries_only(self, cached, ctx):
        cached.evaluate("hover", ctx, "b1")
        cached.evaluate("theme == dark", ctx, "b1")
        cached.update_interaction_state("b1", hover=True)
        assert cached.cache.get("b1", "hover") is None
        assert cached.cache.get("b1", "theme == dark") is True
        assert cached.evaluate("hover", ctx, "b1") is True

    def test_unknown_flag_rejected(self, cached):
        with pytest.raises(TypeError):
            cached.update_interaction_state("b1", wiggle=True)

    def test_forget_block(self, cached, ctx):
        cached.update_interaction_state("b1", click=True)
        cached.evaluate("click", ctx, "b1")
        cached.forget_block("b1")
        assert len(cached.cache) == 0
        assert cached.evaluate("click", ctx, "b1") is False

    def test_false_overlay_overrides_context_until_forgotten(self, cached, ctx):
        hovered = replace(ctx, interaction=InteractionState(hover=True))
        cached.update_interaction_state("b1", hover=False)
        assert cached.evaluate("hover", hovered, "b1") is False
        cached.forget_block("b1")
        assert cached.evaluate("hover", hovered, "b1") is True
