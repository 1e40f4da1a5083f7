"""Settings manager — reads/writes settings.ini via configparser.

Sections
--------
[COMPILER]  indent_width, strict, max_diagnostics
[CACHE]     interaction_ttl, time_ttl, long_ttl, default_ttl   (seconds)
[KEYWORDS]  alias = canonical keyword
"""
from configparser import ConfigParser
from pathlib import Path

from camo.core.constants import (
    INDENT_WIDTH, MAX_DIAGNOSTICS,
    INTERACTION_TTL_S, TIME_TTL_S, LONG_TTL_S, DEFAULT_TTL_S,
)


class SettingsManager:
    def __init__(self, ini_path: Path | None = None) -> None:
        self.ini_path = Path(ini_path) if ini_path is not None else None
        self.config = ConfigParser(comment_prefixes=("#", ";"), inline_comment_prefixes=("#", ";"))
        if self.ini_path is not None and self.ini_path.exists():
            self.config.read(self.ini_path, encoding="utf-8")

    # ------------------------------------------------------------------
    # Generic getters
    # ------------------------------------------------------------------
    def getint(self, section: str, key: str, fallback: int = 0) -> int:
        return self.config.getint(section, key, fallback=fallback)

    def getfloat(self, section: str, key: str, fallback: float = 0.0) -> float:
        return self.config.getfloat(section, key, fallback=fallback)

    def getbool(self, section: str, key: str, fallback: bool = False) -> bool:
        return self.config.getboolean(section, key, fallback=fallback)

    def set(self, section: str, key: str, value: str) -> None:
        if not self.config.has_section(section):
            self.config.add_section(section)
        self.config.set(section, key, value)
        if self.ini_path is not None:
            self.save()

    def save(self) -> None:
        if self.ini_path is None:
            raise ValueError("SettingsManager has no ini_path to save to")
        with open(self.ini_path, "w", encoding="utf-8") as f:
            self.config.write(f)

    # ------------------------------------------------------------------
    # Convenience properties
    # ------------------------------------------------------------------
    @property
    def indent_width(self) -> int:
        return max(1, self.getint("COMPILER", "indent_width", INDENT_WIDTH))

    @property
    def strict(self) -> bool:
        return self.getbool("COMPILER", "strict", False)

    @property
    def max_diagnostics(self) -> int:
        return self.getint("COMPILER", "max_diagnostics", MAX_DIAGNOSTICS)

    @property
    def interaction_ttl(self) -> float:
        return self.getfloat("CACHE", "interaction_ttl", INTERACTION_TTL_S)

    @property
    def time_ttl(self) -> float:
        return self.getfloat("CACHE", "time_ttl", TIME_TTL_S)

    @property
    def long_ttl(self) -> float:
        return self.getfloat("CACHE", "long_ttl", LONG_TTL_S)

    @property
    def default_ttl(self) -> float:
        return self.getfloat("CACHE", "default_ttl", DEFAULT_TTL_S)

    @property
    def keyword_aliases(self) -> dict[str, str]:
        """Return alias→canonical mapping from [KEYWORDS] section."""
        if not self.config.has_section("KEYWORDS"):
            return {}
        return {k.lower(): v.strip().lower() for k, v in self.config.items("KEYWORDS")}
