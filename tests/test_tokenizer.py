"""Tests for camo.core.tokenizer — token kinds, positions, helpers."""
from camo.core.tokenizer import (
    Token, TokenKind, tokenize, tokenize_lines,
    indent_depth, split_lines, reconstruct, expand_aliases, token_text,
)


def kinds(tokens):
    return [t.kind for t in tokens]


# ---------------------------------------------------------------------------
# Full statement
# ---------------------------------------------------------------------------

class TestStatementLine:
    def test_scenario_token_stream(self, scenario_line):
        tokens = tokenize(scenario_line)
        assert kinds(tokens) == [
            TokenKind.ROOT,
            TokenKind.IDENTIFIER,
            TokenKind.VARIABLE_BLOCK,
            TokenKind.RELATION,
            TokenKind.IDENTIFIER,
            TokenKind.VARIABLE_BLOCK,
            TokenKind.PARAMETER,
            TokenKind.ACTION_BLOCK,
            TokenKind.OPTION_BLOCK,
            TokenKind.TRIGGER,
            TokenKind.ACTION_BLOCK,
            TokenKind.EOF,
        ]

    def test_block_values_are_inner_text(self, scenario_line):
        tokens = tokenize(scenario_line)
        assert tokens[2].value == "background"
        assert tokens[8].value == "#ff0000"
        assert tokens[10].value == "visual[solid]"

    def test_positions(self):
        tokens = tokenize(":: set[x]", line_no=7)
        root, kw, var = tokens[0], tokens[1], tokens[2]
        assert (root.line, root.column, root.start_offset, root.end_offset) == (7, 1, 0, 2)
        assert (kw.column, kw.start_offset, kw.end_offset) == (4, 3, 6)
        assert var.column == 7

    def test_single_eof(self):
        tokens = tokenize(":: set")
        assert kinds(tokens).count(TokenKind.EOF) == 1
        assert tokens[-1].kind is TokenKind.EOF

    def test_tokens_are_frozen(self):
        tok = tokenize("::")[0]
        assert isinstance(tok, Token)
        try:
            tok.value = "x"
        except AttributeError:
            pass
        else:
            raise AssertionError("Token should be immutable")


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------

class TestPrecedence:
    def test_hierarchical_before_root(self):
        assert tokenize(":^: x")[0].kind is TokenKind.HIERARCHICAL

    def test_chained_hierarchical(self):
        tokens = tokenize(":^::^: x")
        assert kinds(tokens)[:2] == [TokenKind.HIERARCHICAL, TokenKind.HIERARCHICAL]
        assert tokens[1].column == 4

    def test_operator_inside_option_stays_in_block(self):
        tokens = tokenize("(a//b)")
        assert kinds(tokens) == [TokenKind.OPTION_BLOCK, TokenKind.EOF]
        assert tokens[0].value == "a//b"

    def test_string_literal(self):
        tokens = tokenize('"hello world" \'x\'')
        assert [t.value for t in tokens[:2]] == ["hello world", "x"]
        assert tokens[0].kind is TokenKind.STRING

    def test_number_literal(self):
        tokens = tokenize("12 3.5")
        assert [(t.kind, t.value) for t in tokens[:2]] == [
            (TokenKind.NUMBER, "12"), (TokenKind.NUMBER, "3.5"),
        ]

    def test_unrecognised_characters_skipped(self):
        assert kinds(tokenize(":: set @ x")) == [
            TokenKind.ROOT, TokenKind.IDENTIFIER, TokenKind.IDENTIFIER, TokenKind.EOF,
        ]

    def test_empty_line(self):
        assert kinds(tokenize("")) == [TokenKind.EOF]

    def test_tabs_expand_to_indent_width(self):
        tok = tokenize("\t:^: x")[0]
        assert tok.column == 3


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestHelpers:
    def test_tokenize_lines_one_eof(self):
        tokens = tokenize_lines([":: a", ":: b"])
        assert kinds(tokens).count(TokenKind.EOF) == 1
        assert [t.line for t in tokens if t.kind is TokenKind.ROOT] == [1, 2]

    def test_tokenize_lines_start_line(self):
        tokens = tokenize_lines([":: a"], start_line=10)
        assert tokens[0].line == 10

    def test_indent_depth(self):
        assert indent_depth(":: x") == 0
        assert indent_depth("    :^: x") == 2
        assert indent_depth("\t:^: x") == 1

    def test_split_lines_keeps_blanks_and_indent(self):
        assert split_lines("a\n\n  b  \n") == ["a", "", "  b"]

    def test_reconstruct(self):
        tokens = tokenize(":: set[x] // text[1]")
        assert reconstruct(tokens, 0, 2) == ":: set[x]"
        assert reconstruct(tokens, 3, 5) == "// text[1]"

    def test_reconstruct_bad_range(self):
        assert reconstruct(tokenize("::"), 3, 1) == ""

    def test_token_text_restores_delimiters(self):
        tok = tokenize("{color}")[0]
        assert token_text(tok) == "{color}"


class TestAliases:
    def test_alias_rewritten(self):
        assert expand_aliases(":: shade[x] // text[1]", {"shade": "blur"}) == ":: blur[x] // text[1]"

    def test_alias_case_insensitive_and_indented(self):
        assert expand_aliases("  :^: SHADE[x]", {"shade": "blur"}) == "  :^: blur[x]"

    def test_unknown_canonical_left_alone(self):
        assert expand_aliases(":: foo // x", {"foo": "bar"}) == ":: foo // x"

    def test_no_aliases(self):
        assert expand_aliases(":: set", {}) == ":: set"
