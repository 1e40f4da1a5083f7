"""Condition expression parsing and evaluation.

Grammar
-------
    path                 → present and truthy
    !path                → absent or falsy
    path OP literal      → comparison, OP in  >= <= != == > < = ~

The operators are tried in that order and the first one found splits the
expression, so ``>=`` is never read as ``>``.  ``=`` is an alias of ``==``
and ``~`` is a regex search.

Literals
--------
true / false → bool,  12 → int,  1.5 → float,  18:30 → minutes since
midnight (int),  "text" / 'text' / text → str.

Paths
-----
Dot paths into ``EvaluationContext.as_lookup()``: ``hover``,
``theme.dark``, ``viewport.width``, ``user.role``.  An unresolved path is
``UNDEFINED``; every comparison against it is False.

There is no eval() here; the operator set is closed.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping

LogFn = Callable[[str, str], None]


class _Undefined:
    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED: Any = _Undefined()

OPERATORS: tuple[str, ...] = (">=", "<=", "!=", "==", ">", "<", "=", "~")

OP_EXISTS     = "exists"
OP_NOT_EXISTS = "not_exists"

# lhs root → cache category (see ConditionCache)
_CATEGORIES: dict[str, str] = {
    "hover": "interaction", "click": "interaction", "focus": "interaction",
    "interaction": "interaction",
    "time": "time", "hour": "time", "minute": "time", "weekday": "time", "iso": "time",
    "theme": "theme",
    "file": "file",
}

_INT_RE   = re.compile(r"^-?\d+$")
_FLOAT_RE = re.compile(r"^-?\d+\.\d+$")
_TIME_RE  = re.compile(r"^(\d{1,2}):(\d{2})$")


@dataclass(frozen=True)
class ParsedCondition:
    lhs:      str
    operator: str | None        # None → malformed, always False
    rhs:      Any = None
    raw_rhs:  str = ""


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _unquote(text: str) -> str | None:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        return text[1:-1]
    return None


def parse_literal(text: str) -> Any:
    """Convert right-hand-side text to the most natural Python value.

    >>> parse_literal("18:30"), parse_literal("true"), parse_literal("'dark'")
    (1110, True, 'dark')
    """
    text = text.strip()
    quoted = _unquote(text)
    if quoted is not None:
        return quoted
    low = text.lower()
    if low == "true":  return True
    if low == "false": return False
    if _INT_RE.match(text):
        return int(text)
    if _FLOAT_RE.match(text):
        return float(text)
    m = _TIME_RE.match(text)
    if m:
        return int(m.group(1)) * 60 + int(m.group(2))
    return text


def parse_condition(expression: str) -> ParsedCondition:
    """Split ``expression`` into lhs / operator / rhs.  Never raises."""
    expr = expression.strip()
    for op in OPERATORS:
        idx = expr.find(op)
        if idx < 0:
            continue
        lhs = expr[:idx].strip()
        raw = expr[idx + len(op):].strip()
        if not lhs or not raw:
            return ParsedCondition(lhs, None)
        operator = "==" if op == "=" else op
        if operator == "~":
            rhs = _unquote(raw)
            return ParsedCondition(lhs, operator, raw if rhs is None else rhs, raw)
        return ParsedCondition(lhs, operator, parse_literal(raw), raw)

    if expr.startswith("!"):
        path = expr[1:].strip()
        return ParsedCondition(path, OP_NOT_EXISTS if path else None)
    return ParsedCondition(expr, OP_EXISTS if expr else None)


def condition_category(expression: str) -> str:
    """Cache category of an expression: interaction / time / theme / file / default."""
    lhs = parse_condition(expression).lhs
    root = lhs.split(".", 1)[0].lower()
    return _CATEGORIES.get(root, "default")


# ---------------------------------------------------------------------------
# Lookup and comparison
# ---------------------------------------------------------------------------

def resolve_path(lookup: Mapping[str, Any], path: str) -> Any:
    """Walk ``a.b.c`` through nested mappings; UNDEFINED when any step is missing."""
    value: Any = lookup
    for part in path.split("."):
        if not isinstance(value, Mapping) or part not in value:
            return UNDEFINED
        value = value[part]
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _comparable(value: Any, rhs: Any) -> Any:
    """Bring the looked-up value to the rhs's type where that is meaningful."""
    if isinstance(value, Mapping) and "name" in value:
        value = value["name"]
    if isinstance(value, str) and not isinstance(rhs, str):
        value = parse_literal(value)
    return value


def eval_parsed(parsed: ParsedCondition, lookup: Mapping[str, Any], log: LogFn | None = None) -> bool:
    """Evaluate a parsed condition against a lookup mapping.  Never raises."""
    _log = log or (lambda lvl, msg: None)
    if parsed.operator is None:
        _log("WARNING", f"Malformed condition: lhs={parsed.lhs!r}")
        return False

    value = resolve_path(lookup, parsed.lhs)
    if parsed.operator == OP_EXISTS:
        return value is not UNDEFINED and bool(value)
    if parsed.operator == OP_NOT_EXISTS:
        return value is UNDEFINED or not value
    if value is UNDEFINED:
        return False

    op  = parsed.operator
    rhs = parsed.rhs

    if op == "~":
        if isinstance(value, Mapping) and "name" in value:
            value = value["name"]
        try:
            return re.search(str(rhs), str(value)) is not None
        except re.error as exc:
            _log("WARNING", f"Invalid regex {rhs!r}: {exc}")
            return False

    value = _comparable(value, rhs)
    if isinstance(value, str) and isinstance(rhs, str):
        value, rhs = value.casefold(), rhs.casefold()

    if op == "==":
        return value == rhs
    if op == "!=":
        return value != rhs

    both_numbers = _is_number(value) and _is_number(rhs)
    both_strings = isinstance(value, str) and isinstance(rhs, str)
    if not (both_numbers or both_strings):
        return False
    if op == ">":  return value > rhs
    if op == "<":  return value < rhs
    if op == ">=": return value >= rhs
    if op == "<=": return value <= rhs
    return False
