"""AST builder — converts a token stream into a forest of statements.

Entry point
-----------
    from camo.core.ast_builder import build
    tree = build(tokenize_lines(lines))    # StatementTree

Each statement span starts at a ``::`` / ``:^:`` token and ends at the next
opener or at the end of its line.  Within a span the zones are read in
order: declaration, target (after //), effect (after %), output (after ->).

Depth
-----
Root statements are depth 0.  A hierarchical statement's depth is its
indentation level plus the number of chained ``:^:`` operators minus one,
so ``  :^: x`` and ``:^::^: x`` are both depth 1.

Malformed input never raises and is never dropped: a statement without a
discoverable parent becomes a root, and the grammar validator is the one
that reports the structural problem.
"""
from __future__ import annotations

from camo.core.ast_nodes import (
    Statement, StatementTree, TargetZone, EffectZone, OutputZone,
    OPERATOR_ROOT, OPERATOR_HIERARCHICAL,
)
from camo.core.constants import INDENT_WIDTH
from camo.core.keywords import CONDITIONAL_KEYWORD, BRANCH_LABELS
from camo.core.tokenizer import Token, TokenKind, OPENERS, tokenize_lines, reconstruct

# Tokens that close the target span
_TARGET_STOP = OPENERS | {TokenKind.PARAMETER, TokenKind.TRIGGER, TokenKind.EOF}
# Tokens that close the effect span
_EFFECT_STOP = OPENERS | {TokenKind.TRIGGER, TokenKind.EOF}


class _Builder:
    def __init__(self, tokens: list[Token], indent_width: int) -> None:
        self._tokens = tokens
        self._indent = max(1, indent_width)
        self._pos    = 0

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def _at_end(self) -> bool:
        return self._pos >= len(self._tokens) or self._tokens[self._pos].kind is TokenKind.EOF

    def _peek(self, line: int) -> Token | None:
        """Current token if it is on ``line`` and not EOF."""
        if self._at_end:
            return None
        tok = self._tokens[self._pos]
        return tok if tok.line == line else None

    def _peek_kind(self, line: int, *kinds: TokenKind) -> Token | None:
        tok = self._peek(line)
        return tok if tok is not None and tok.kind in kinds else None

    # ------------------------------------------------------------------
    # Core parsing
    # ------------------------------------------------------------------

    def build(self) -> StatementTree:
        tree = StatementTree()
        while not self._at_end:
            if self._tokens[self._pos].kind in OPENERS:
                stmt = self._parse_statement()
                stmt.index = len(tree.statements)
                tree.statements.append(stmt)
            else:
                self._pos += 1          # stray token outside any statement
        _link_hierarchy(tree)
        return tree

    def _parse_statement(self) -> Statement:
        opener = self._tokens[self._pos]
        line   = opener.line

        chain = 0
        if opener.kind is TokenKind.HIERARCHICAL:
            while self._peek_kind(line, TokenKind.HIERARCHICAL):
                chain += 1
                self._pos += 1
            depth    = (opener.column - 1) // self._indent + chain - 1
            operator = OPERATOR_HIERARCHICAL
        else:
            self._pos += 1
            depth    = 0
            operator = OPERATOR_ROOT

        stmt = Statement(operator=operator, depth=max(0, depth), line=line, column=opener.column)
        self._parse_declaration(stmt, line)
        self._parse_target(stmt, line)
        self._parse_effect(stmt, line)
        self._parse_output(stmt, line)

        # Anything left on the line before the next opener is ignored
        while (tok := self._peek(line)) is not None and tok.kind not in OPENERS:
            self._pos += 1
        return stmt

    def _parse_declaration(self, stmt: Statement, line: int) -> None:
        tok = self._peek_kind(line, TokenKind.IDENTIFIER)
        if tok is None:
            return
        stmt.keyword = tok.value.lower()
        self._pos += 1

        if stmt.keyword == CONDITIONAL_KEYWORD:
            cond = self._peek_kind(line, TokenKind.ACTION_BLOCK)
            if cond is not None:
                stmt.condition = cond.value.strip()
                self._pos += 1
        elif stmt.keyword in BRANCH_LABELS:
            stmt.label = stmt.keyword

        while (var := self._peek_kind(line, TokenKind.VARIABLE_BLOCK)) is not None:
            stmt.variables.append(var.value.strip())
            self._pos += 1

    def _parse_target(self, stmt: Statement, line: int) -> None:
        if self._peek_kind(line, TokenKind.RELATION) is None:
            return
        self._pos += 1

        function: str | None = None
        argument: str | None = None
        start = self._pos
        while (tok := self._peek(line)) is not None and tok.kind not in _TARGET_STOP:
            if function is None and tok.kind is TokenKind.IDENTIFIER:
                function = tok.value.lower()
            elif function is None and tok.kind is TokenKind.STRING:
                function = tok.value
            elif function is not None and argument is None and tok.kind is TokenKind.VARIABLE_BLOCK:
                argument = tok.value.strip()
            self._pos += 1
        raw = reconstruct(self._tokens, start, self._pos - 1) if self._pos > start else ""
        stmt.target = TargetZone(function=function or "", argument=argument, raw=raw)

    def _parse_effect(self, stmt: Statement, line: int) -> None:
        if self._peek_kind(line, TokenKind.PARAMETER) is None:
            return
        self._pos += 1

        effect = EffectZone()
        while (tok := self._peek(line)) is not None and tok.kind not in _EFFECT_STOP:
            self._pos += 1
            if tok.kind is not TokenKind.ACTION_BLOCK:
                continue
            name = tok.value.strip()
            if effect.action is None:
                effect.action = name
            option = self._peek_kind(line, TokenKind.OPTION_BLOCK)
            if option is not None:
                effect.parameters[name] = option.value.strip()
                self._pos += 1
        stmt.effect = effect

    def _parse_output(self, stmt: Statement, line: int) -> None:
        if self._peek_kind(line, TokenKind.TRIGGER) is None:
            return
        self._pos += 1
        tok = self._peek(line)
        if tok is not None and tok.kind not in OPENERS:
            stmt.output = OutputZone(outcome=tok.value.strip())
            self._pos += 1


def _link_hierarchy(tree: StatementTree) -> None:
    """Second pass: attach each statement to the nearest shallower predecessor."""
    stack: list[Statement] = []
    for stmt in tree.statements:
        while stack and stack[-1].depth >= stmt.depth:
            stack.pop()
        if stack:
            parent = stack[-1]
            stmt.parent_index = parent.index
            parent.children.append(stmt)
        else:
            tree.roots.append(stmt)
        stack.append(stmt)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build(tokens: list[Token], indent_width: int = INDENT_WIDTH) -> StatementTree:
    """Convert a token stream into a ``StatementTree``.  Never raises."""
    return _Builder(tokens, indent_width).build()


def build_lines(lines: list[str], indent_width: int = INDENT_WIDTH) -> StatementTree:
    """Convenience: tokenize ``lines`` (numbered from 1) and build the tree."""
    return build(tokenize_lines(lines, indent_width=indent_width), indent_width)


def count_statements(nodes: list[Statement]) -> int:
    """Recursively count statements below (and including) ``nodes``."""
    total = 0
    for node in nodes:
        total += 1 + count_statements(node.children)
    return total
