"""Grammar validator for metadata statement lines.

Checks one line at a time and accumulates every problem it finds; it never
stops at the first error.  The stateful ``GrammarValidator`` keeps a stack
of (depth, keyword) frames across the lines of one block so hierarchy and
branch-label rules can be checked.

Rules
-----
- opener        : line starts with ``::`` or ``:^:``; ``:^:`` at depth 0 is an error
- declaration   : missing keyword → error, unknown keyword → warning
- zones         : required zones present; ``//`` < ``%`` < ``->`` when present
- effect pairs  : every ``{action}`` after ``%`` is followed by ``(params)``
- output        : ``->`` is followed by a ``{outcome}`` block
- brackets      : ``{}`` ``[]`` ``()`` balance on the line
- hierarchy     : hierarchical lines need a shallower parent;
                  true/false/else need an ``if`` ancestor; one ``else`` per group
- if form       : ``if`` carries a ``{condition}`` block

The validator is advisory.  The AST builder accepts anything.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from camo.core.constants import INDENT_WIDTH
from camo.core.keywords import (
    CONDITIONAL_KEYWORD, BRANCH_LABELS,
    ZONE_TARGET, ZONE_EFFECT, ZONE_OUTPUT,
    is_known, requires,
)
from camo.core.prefix import BRACKETS
from camo.core.tokenizer import Token, TokenKind, OPENERS, tokenize

LogFn = Callable[[str, str], None]   # (level, message)

SEVERITY_ERROR   = "error"
SEVERITY_WARNING = "warning"


# ---------------------------------------------------------------------------
# Result records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Diagnostic:
    severity: str           # SEVERITY_ERROR | SEVERITY_WARNING
    message:  str
    line:     int = 0
    column:   int = 0
    stage:    str = "grammar"

    @property
    def is_error(self) -> bool:
        return self.severity == SEVERITY_ERROR

    def __str__(self) -> str:
        return f"line {self.line}, col {self.column}: {self.severity}: {self.message}"


@dataclass
class ValidationResult:
    line:     int = 0
    errors:   list[Diagnostic] = field(default_factory=list)
    warnings: list[Diagnostic] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return sorted(self.errors + self.warnings, key=lambda d: (d.line, d.column))


@dataclass
class _Frame:
    depth:      int
    keyword:    str | None
    else_count: int = 0


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------

class GrammarValidator:
    """Validates the lines of one block in order."""

    def __init__(self, indent_width: int = INDENT_WIDTH, log: LogFn | None = None) -> None:
        self._indent = max(1, indent_width)
        self._log    = log or (lambda lvl, msg: None)
        self._stack: list[_Frame] = []

    def reset(self) -> None:
        self._stack.clear()

    def validate_lines(self, lines: list[str], start_line: int = 1) -> list[ValidationResult]:
        self.reset()
        return [self.validate(raw, start_line + i) for i, raw in enumerate(lines)]

    def validate(self, line: str, line_no: int = 1) -> ValidationResult:
        result = ValidationResult(line=line_no)
        if line.strip():
            self._validate_statement(line, line_no, result)
        if result.errors:
            self._log("DEBUG", f"Line {line_no}: {len(result.errors)} grammar error(s)")
        return result

    def _validate_statement(self, line: str, line_no: int, result: ValidationResult) -> None:
        expanded = line.expandtabs(self._indent)
        tokens = [t for t in tokenize(line, line_no, self._indent) if t.kind is not TokenKind.EOF]
        self._check_brackets(expanded, line_no, result)

        col = len(expanded) - len(expanded.lstrip()) + 1
        if not tokens or tokens[0].kind not in OPENERS or tokens[0].column != col:
            self._error(result, "Statement must start with '::' or ':^:'", line_no, col)
            return

        opener = tokens[0]
        pos    = 0
        chain  = 0
        if opener.kind is TokenKind.HIERARCHICAL:
            while pos < len(tokens) and tokens[pos].kind is TokenKind.HIERARCHICAL:
                chain += 1
                pos += 1
            depth = max(0, (opener.column - 1) // self._indent + chain - 1)
            if depth == 0:
                self._error(result, "Hierarchical statement ':^:' cannot appear at depth 0",
                            line_no, opener.column)
        else:
            pos   = 1
            depth = 0

        # The statement ends at the next opener on the line
        body = []
        for tok in tokens[pos:]:
            if tok.kind in OPENERS:
                break
            body.append(tok)

        keyword = self._check_declaration(body, opener, result)
        self._check_zones(body, keyword, result)
        self._check_hierarchy(opener, depth, keyword, result)

    # ------------------------------------------------------------------
    # Individual rules
    # ------------------------------------------------------------------

    def _check_declaration(self, body: list[Token], opener: Token, result: ValidationResult) -> str | None:
        if not body or body[0].kind is not TokenKind.IDENTIFIER:
            col = body[0].column if body else opener.end_offset + 1
            self._error(result, "Missing keyword after statement operator", opener.line, col)
            return None

        first   = body[0]
        keyword = first.value.lower()
        if not is_known(keyword):
            self._warning(result, f"Unknown keyword: {first.value!r}", first.line, first.column)

        if keyword == CONDITIONAL_KEYWORD:
            if len(body) < 2 or body[1].kind is not TokenKind.ACTION_BLOCK:
                self._error(result, "'if' requires a {condition} block", first.line, first.column)
        return keyword

    def _check_zones(self, body: list[Token], keyword: str | None, result: ValidationResult) -> None:
        rel  = _first(body, TokenKind.RELATION)
        par  = _first(body, TokenKind.PARAMETER)
        trg  = _first(body, TokenKind.TRIGGER)
        line = result.line

        # Operator order  // < % < ->
        if rel is not None and par is not None and body[par].start_offset < body[rel].start_offset:
            self._error(result, "'%' must come after the '//' target zone", line, body[par].column)
        if trg is not None:
            for other, name in ((rel, "//"), (par, "%")):
                if other is not None and body[trg].start_offset < body[other].start_offset:
                    self._error(result, f"'->' must come after '{name}'", line, body[trg].column)

        # Target zone
        if rel is None:
            if requires(keyword, ZONE_TARGET):
                self._error(result, f"Keyword {keyword!r} requires a target zone ('// function')",
                            line, _end_column(body))
        else:
            nxt = body[rel + 1] if rel + 1 < len(body) else None
            if nxt is None or nxt.kind not in (TokenKind.IDENTIFIER, TokenKind.STRING):
                self._error(result, "Missing target function after '//'", line, body[rel].column)

        # Effect zone
        if par is None:
            if requires(keyword, ZONE_EFFECT):
                self._error(result, f"Keyword {keyword!r} requires an effect zone ('% {{action}}(params)')",
                            line, _end_column(body))
        else:
            self._check_effect_pairs(body, par, trg, result)

        # Output zone
        if trg is None:
            if requires(keyword, ZONE_OUTPUT):
                self._error(result, f"Keyword {keyword!r} requires an output zone ('-> {{outcome}}')",
                            line, _end_column(body))
        else:
            nxt = body[trg + 1] if trg + 1 < len(body) else None
            if nxt is None or nxt.kind is not TokenKind.ACTION_BLOCK:
                self._error(result, "'->' must be followed by an {outcome} block", line, body[trg].column)

    def _check_effect_pairs(self, body: list[Token], par: int, trg: int | None, result: ValidationResult) -> None:
        column = body[par].column
        end    = trg if trg is not None and trg > par else len(body)
        span   = body[par + 1:end]

        pairs = 0
        i = 0
        while i < len(span):
            tok = span[i]
            if tok.kind is TokenKind.ACTION_BLOCK and i + 1 < len(span) \
                    and span[i + 1].kind is TokenKind.OPTION_BLOCK:
                pairs += 1
                i += 2
                continue
            if tok.kind is TokenKind.ACTION_BLOCK:
                self._error(result, f"Effect action {{{tok.value}}} is missing its (params) block",
                            result.line, column)
            else:
                self._error(result, f"Unexpected {tok.kind.value.lower()} in effect zone",
                            result.line, column)
            i += 1

        if pairs == 0 and not span:
            self._error(result, "'%' must be followed by at least one {action}(params) pair",
                        result.line, column)

    def _check_brackets(self, text: str, line_no: int, result: ValidationResult) -> None:
        for open_, close in BRACKETS.items():
            depth      = 0
            first_open = 0
            for i, ch in enumerate(text):
                if ch == open_:
                    if depth == 0:
                        first_open = i + 1
                    depth += 1
                elif ch == close:
                    if depth == 0:
                        self._error(result, f"Unmatched '{ch}'", line_no, i + 1)
                        continue
                    depth -= 1
            if depth > 0:
                self._error(result, f"Unclosed '{open_}'", line_no, first_open)

    def _check_hierarchy(self, opener: Token, depth: int, keyword: str | None, result: ValidationResult) -> None:
        while self._stack and self._stack[-1].depth >= depth:
            self._stack.pop()

        if opener.kind is TokenKind.HIERARCHICAL and depth > 0 and not self._stack:
            self._error(result, "Hierarchical statement has no parent at a shallower depth",
                        opener.line, opener.column)

        if keyword in BRANCH_LABELS:
            group = next((f for f in reversed(self._stack) if f.keyword == CONDITIONAL_KEYWORD), None)
            if group is None:
                self._error(result, f"Branch {keyword!r} requires an enclosing 'if' statement",
                            opener.line, opener.column)
            elif keyword == "else":
                group.else_count += 1
                if group.else_count > 1:
                    self._error(result, "Only one 'else' branch is allowed per conditional group",
                                opener.line, opener.column)

        self._stack.append(_Frame(depth, keyword))

    # ------------------------------------------------------------------

    @staticmethod
    def _error(result: ValidationResult, message: str, line: int, column: int) -> None:
        result.errors.append(Diagnostic(SEVERITY_ERROR, message, line, column))

    @staticmethod
    def _warning(result: ValidationResult, message: str, line: int, column: int) -> None:
        result.warnings.append(Diagnostic(SEVERITY_WARNING, message, line, column))


def _first(tokens: list[Token], kind: TokenKind) -> int | None:
    for i, tok in enumerate(tokens):
        if tok.kind is kind:
            return i
    return None


def _end_column(tokens: list[Token]) -> int:
    return tokens[-1].end_offset + 1 if tokens else 1


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def validate_grammar(line: str, line_no: int = 1, indent_width: int = INDENT_WIDTH) -> ValidationResult:
    """Validate a single line with a fresh hierarchy stack."""
    return GrammarValidator(indent_width).validate(line, line_no)
