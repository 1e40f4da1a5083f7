"""Metadata statement tokenizer.

Responsibilities
----------------
- Split one statement line into typed tokens (operators, bracketed blocks,
  literals, identifiers) in a fixed precedence order
- Keep 1-based line/column and 0-based offsets for diagnostics
- Skip unrecognised characters silently (never fatal)
- Rewrite keyword aliases from settings.ini [KEYWORDS] section

Precedence
----------
structural operators  >  bracketed blocks  >  literals  >  identifiers  >  whitespace

The first pattern that matches at the current offset wins, so ``:^:`` is
never read as ``::`` and ``(a//b)`` stays one option block.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from camo.core.constants import INDENT_WIDTH
from camo.core.keywords import resolve_alias
from camo.core.prefix import (
    ROOT_REGPREFIX, HIERARCHICAL_REGPREFIX, RELATION_REGPREFIX,
    PARAMETER_REGPREFIX, TRIGGER_REGPREFIX,
)


class TokenKind(Enum):
    ROOT           = "ROOT"             # ::
    HIERARCHICAL   = "HIERARCHICAL"     # :^:
    RELATION       = "RELATION"         # //
    PARAMETER      = "PARAMETER"        # %
    TRIGGER        = "TRIGGER"          # ->
    ACTION_BLOCK   = "ACTION_BLOCK"     # {action}
    VARIABLE_BLOCK = "VARIABLE_BLOCK"   # [variable]
    OPTION_BLOCK   = "OPTION_BLOCK"     # (option)
    STRING         = "STRING"           # "text" or 'text'
    NUMBER         = "NUMBER"           # 12 or 1.5
    IDENTIFIER     = "IDENTIFIER"       # keyword, function names
    EOF            = "EOF"


OPENERS: frozenset[TokenKind] = frozenset({TokenKind.ROOT, TokenKind.HIERARCHICAL})


@dataclass(frozen=True)
class Token:
    kind:         TokenKind
    value:        str       # inner text for bracketed blocks and strings
    line:         int       # 1-based
    column:       int       # 1-based
    start_offset: int       # 0-based, inclusive
    end_offset:   int       # 0-based, exclusive


# ---------------------------------------------------------------------------
# Patterns — tried in this order at every offset
# ---------------------------------------------------------------------------

_WHITESPACE = "WHITESPACE"

_PATTERNS: list[tuple[object, re.Pattern]] = [
    (TokenKind.HIERARCHICAL,   re.compile(HIERARCHICAL_REGPREFIX)),
    (TokenKind.ROOT,           re.compile(ROOT_REGPREFIX)),
    (TokenKind.RELATION,       re.compile(RELATION_REGPREFIX)),
    (TokenKind.PARAMETER,      re.compile(PARAMETER_REGPREFIX)),
    (TokenKind.TRIGGER,        re.compile(TRIGGER_REGPREFIX)),
    (TokenKind.ACTION_BLOCK,   re.compile(r"\{([^}]+)\}")),
    (TokenKind.VARIABLE_BLOCK, re.compile(r"\[([^\]]+)\]")),
    (TokenKind.OPTION_BLOCK,   re.compile(r"\(([^)]+)\)")),
    (TokenKind.STRING,         re.compile(r'"([^"]*)"|\'([^\']*)\'')),
    (TokenKind.NUMBER,         re.compile(r"\d+(?:\.\d+)?")),
    (TokenKind.IDENTIFIER,     re.compile(r"[A-Za-z_][A-Za-z0-9_]*")),
    (_WHITESPACE,              re.compile(r"\s+")),
]


def _token_value(m: re.Match) -> str:
    for group in m.groups():
        if group is not None:
            return group
    return m.group(0)


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------

def tokenize(line: str, line_no: int = 1, indent_width: int = INDENT_WIDTH) -> list[Token]:
    """Split one statement line into a token list terminated by EOF.

    Tabs are expanded to ``indent_width`` first; columns and offsets refer
    to the expanded line.
    """
    tokens = _scan(line.expandtabs(indent_width), line_no)
    end = len(line.expandtabs(indent_width))
    tokens.append(Token(TokenKind.EOF, "", line_no, end + 1, end, end))
    return tokens


def tokenize_lines(
    lines:        list[str],
    start_line:   int = 1,
    indent_width: int = INDENT_WIDTH,
) -> list[Token]:
    """Tokenize every line into one stream with a single trailing EOF."""
    tokens: list[Token] = []
    line_no = start_line
    for raw in lines:
        tokens.extend(_scan(raw.expandtabs(indent_width), line_no))
        line_no += 1
    last = max(start_line, line_no - 1)
    tokens.append(Token(TokenKind.EOF, "", last, 1, 0, 0))
    return tokens


def _scan(text: str, line_no: int) -> list[Token]:
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        for kind, pattern in _PATTERNS:
            m = pattern.match(text, pos)
            if m is None:
                continue
            if kind is not _WHITESPACE:
                tokens.append(Token(
                    kind         = kind,
                    value        = _token_value(m),
                    line         = line_no,
                    column       = pos + 1,
                    start_offset = pos,
                    end_offset   = m.end(),
                ))
            pos = m.end()
            break
        else:
            pos += 1        # unrecognised character
    return tokens


def indent_depth(line: str, indent_width: int = INDENT_WIDTH) -> int:
    """Return the indentation level of ``line`` (``indent_width`` spaces per level)."""
    expanded = line.expandtabs(indent_width)
    leading = len(expanded) - len(expanded.lstrip(" "))
    return leading // max(1, indent_width)


def split_lines(text: str) -> list[str]:
    """Split block text into raw lines, keeping indentation and blank lines.

    Blank lines are kept so that line numbers in diagnostics and instruction
    ids match the source.
    """
    return [raw.rstrip() for raw in text.splitlines()]


_DELIMITERS = {
    TokenKind.ACTION_BLOCK:   ("{", "}"),
    TokenKind.VARIABLE_BLOCK: ("[", "]"),
    TokenKind.OPTION_BLOCK:   ("(", ")"),
    TokenKind.STRING:         ('"', '"'),
}


def token_text(token: Token) -> str:
    """Return the source-like spelling of a token (delimiters restored)."""
    open_, close = _DELIMITERS.get(token.kind, ("", ""))
    return f"{open_}{token.value}{close}"


def reconstruct(tokens: list[Token], start: int, end: int) -> str:
    """Rebuild source-like text from ``tokens[start:end + 1]`` (inclusive)."""
    if start < 0 or end < start or end >= len(tokens):
        return ""
    parts: list[str] = []
    prev: Token | None = None
    for tok in tokens[start:end + 1]:
        if tok.kind is TokenKind.EOF:
            break
        if prev is not None and (tok.line != prev.line or tok.start_offset > prev.end_offset):
            parts.append(" ")
        parts.append(token_text(tok))
        prev = tok
    return "".join(parts)


_KEYWORD_RE = re.compile(
    r"^(?P<head>\s*(?:" + HIERARCHICAL_REGPREFIX + r"|" + ROOT_REGPREFIX + r")+\s*)"
    r"(?P<keyword>[A-Za-z_][A-Za-z0-9_]*)"
)


def expand_aliases(line: str, alias_map: dict[str, str]) -> str:
    """Replace an alias keyword with its canonical equivalent.

    ``alias_map`` keys and values must already be lower-case
    (see SettingsManager.keyword_aliases).

    Examples
    --------
    >>> expand_aliases(":: shade[x] // text[1]", {"shade": "blur"})
    ':: blur[x] // text[1]'
    """
    if not alias_map:
        return line
    m = _KEYWORD_RE.match(line)
    if m is None:
        return line
    keyword = m.group("keyword")
    canonical = resolve_alias(keyword, alias_map)
    if canonical == keyword:
        return line
    return line[:m.start("keyword")] + canonical + line[m.end("keyword"):]
