"""Centralised tunables and magic numbers.

All numeric constants that control compiler and evaluator behaviour are
collected here so they are easy to find, document, and adjust.
"""

# ---------------------------------------------------------------------------
# Tokenizer / AST builder  (camo/core/tokenizer.py, ast_builder.py)
# ---------------------------------------------------------------------------
INDENT_WIDTH = 2       # leading spaces per hierarchy level (tabs expand to this)

# ---------------------------------------------------------------------------
# IR buckets  (camo/core/ir_extractor.py, optimizer.py, executor.py)
# ---------------------------------------------------------------------------
BUCKET_VISUAL      = 1
BUCKET_LAYOUT      = 2
BUCKET_ANIMATION   = 3
BUCKET_INTERACTION = 4
BUCKET_STATE       = 5

BUCKET_NAMES = {
    BUCKET_VISUAL:      "visual",
    BUCKET_LAYOUT:      "layout",
    BUCKET_ANIMATION:   "animation",
    BUCKET_INTERACTION: "interaction",
    BUCKET_STATE:       "state",
}
DEFAULT_BUCKET = BUCKET_VISUAL

# ---------------------------------------------------------------------------
# Condition cache  (camo/core/condition_cache.py)
# ---------------------------------------------------------------------------
INTERACTION_TTL_S = 1.0    # hover / click / focus change quickly
TIME_TTL_S        = 30.0   # time / hour / minute / weekday
LONG_TTL_S        = 60.0   # theme / file
DEFAULT_TTL_S     = 5.0    # everything else

# ---------------------------------------------------------------------------
# Evaluation context  (camo/core/context.py)
# ---------------------------------------------------------------------------
MOBILE_MAX_WIDTH = 768     # viewport width <= this → "mobile"
TABLET_MAX_WIDTH = 1024    # viewport width <= this → "tablet", else "desktop"

# ---------------------------------------------------------------------------
# Diagnostics  (camo/cli.py)
# ---------------------------------------------------------------------------
MAX_DIAGNOSTICS = 50       # per-file cap when printing diagnostics
