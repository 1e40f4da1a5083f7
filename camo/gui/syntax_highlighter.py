"""Syntax highlighter for metadata statements."""
from PySide6.QtCore import QRegularExpression
from PySide6.QtGui import QSyntaxHighlighter, QTextCharFormat, QColor, QFont

from camo.core.keywords import KEYWORD_SPECS, CONDITIONAL_KEYWORD, BRANCH_LABELS
from camo.core.prefix import (
    HIERARCHICAL_REGPREFIX, ROOT_REGPREFIX,
    RELATION_REGPREFIX, PARAMETER_REGPREFIX, TRIGGER_REGPREFIX,
)

# ---------------------------------------------------------------------------
# Keyword sets
# ---------------------------------------------------------------------------
_CTRL_KEYWORDS = {CONDITIONAL_KEYWORD} | set(BRANCH_LABELS)
_KEYWORDS      = set(KEYWORD_SPECS) - _CTRL_KEYWORDS

# ---------------------------------------------------------------------------
# Colour palette (VS Code Dark+ inspired)
# ---------------------------------------------------------------------------
_COL_STRING   = "#CE9178"   # orange
_COL_VARIABLE = "#9CDCFE"   # light blue
_COL_CTRL     = "#C586C0"   # purple
_COL_KEYWORD  = "#569CD6"   # blue
_COL_ACTION   = "#DCDCAA"   # yellow
_COL_OPTION   = "#4EC9B0"   # teal
_COL_NUMBER   = "#B5CEA8"   # light green
_COL_OPERATOR = "#D4D4D4"   # near-white
_COL_ERROR    = "#F44747"   # red


def _fmt(color: str, bold: bool = False, italic: bool = False) -> QTextCharFormat:
    f = QTextCharFormat()
    f.setForeground(QColor(color))
    if bold:
        f.setFontWeight(QFont.Weight.Bold)
    if italic:
        f.setFontItalic(True)
    return f


def _keyword_pattern(words: set[str]) -> str:
    escaped = sorted(words, key=len, reverse=True)
    return r"\b(" + "|".join(escaped) + r")\b"


class MetadataSyntaxHighlighter(QSyntaxHighlighter):
    """QSyntaxHighlighter for metadata statement blocks.

    ``set_error_lines`` takes the 1-based line numbers reported by the
    grammar validator and underlines those lines.
    """

    def __init__(self, document) -> None:
        super().__init__(document)
        self._rules: list[tuple[QRegularExpression, QTextCharFormat]] = []
        self._error_lines: set[int] = set()
        self._error_fmt = QTextCharFormat()
        self._error_fmt.setUnderlineStyle(QTextCharFormat.UnderlineStyle.WaveUnderline)
        self._error_fmt.setUnderlineColor(QColor(_COL_ERROR))
        self._build_rules()

    def _build_rules(self) -> None:
        add = self._rules.append
        operators = "|".join((
            HIERARCHICAL_REGPREFIX, ROOT_REGPREFIX,
            RELATION_REGPREFIX, PARAMETER_REGPREFIX, TRIGGER_REGPREFIX,
        ))

        # 1. Keywords (case-insensitive, like the tokenizer)
        keyword_opt = QRegularExpression.PatternOption.CaseInsensitiveOption
        add((QRegularExpression(_keyword_pattern(_KEYWORDS), keyword_opt), _fmt(_COL_KEYWORD, bold=True)))
        add((QRegularExpression(_keyword_pattern(_CTRL_KEYWORDS), keyword_opt), _fmt(_COL_CTRL, bold=True)))

        # 2. Numbers
        add((QRegularExpression(r"\b\d+(\.\d+)?\b"), _fmt(_COL_NUMBER)))

        # 3. Bracketed blocks (after numbers so "[1]" takes the block colour)
        add((QRegularExpression(r"\[[^\]]+\]"), _fmt(_COL_VARIABLE)))
        add((QRegularExpression(r"\([^)]+\)"), _fmt(_COL_OPTION)))
        add((QRegularExpression(r"\{[^}]+\}"), _fmt(_COL_ACTION)))

        # 4. Strings
        add((QRegularExpression(r'"[^"]*"|\'[^\']*\''), _fmt(_COL_STRING)))

        # 5. Operators last so they always win
        add((QRegularExpression(operators), _fmt(_COL_OPERATOR, bold=True)))

    # ------------------------------------------------------------------
    def set_error_lines(self, lines) -> None:
        self._error_lines = {int(n) for n in lines}
        self.rehighlight()

    @property
    def error_lines(self) -> set[int]:
        return set(self._error_lines)

    def highlightBlock(self, text: str) -> None:
        for pattern, fmt in self._rules:
            it = pattern.globalMatch(text)
            while it.hasNext():
                m = it.next()
                self.setFormat(m.capturedStart(), m.capturedLength(), fmt)

        if self.currentBlock().blockNumber() + 1 in self._error_lines and text:
            for i in range(len(text)):
                fmt = QTextCharFormat(self.format(i))
                fmt.merge(self._error_fmt)
                self.setFormat(i, 1, fmt)
