"""Shared test fixtures."""
import os
import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path so `camo.*` imports work
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Qt tests run headless
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


class LogCollector:
    """Callable log sink: collects (level, message) pairs."""

    def __init__(self):
        self.records = []

    def __call__(self, level, msg):
        self.records.append((level, msg))

    def levels(self):
        return [lvl for lvl, _ in self.records]


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def log():
    return LogCollector()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scenario_line():
    return ":: set[background] // content[all] % {color}(#ff0000) -> {visual[solid]}"


@pytest.fixture
def hierarchy_lines():
    return [
        ":: set[a] // content[all] % {color}(red)",        # depth 0
        "  :^: hide[b] // text[1]",                         # depth 1
        "  :^: blur[c] // text[2]",                         # depth 1
        "    :^: mask[d] // line[3] % {pattern}(dots)",     # depth 2
        "  :^: reveal[e] // paragraph[1-3]",                # depth 1
        ":: set[f] // element[x] % {size}(12)",             # depth 0
    ]
