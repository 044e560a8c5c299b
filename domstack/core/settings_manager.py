"""Settings manager — reads/writes settings.ini via configparser."""
from __future__ import annotations

from configparser import ConfigParser
from pathlib import Path

from domstack.core.constants import DEFAULT_ROOT_ID, LOG_LEVELS, NAME_ATTRIBUTES


class SettingsManager:
    def __init__(self, ini_path: Path | None = None) -> None:
        self.ini_path = ini_path
        self.config = ConfigParser(comment_prefixes=("#", ";"), inline_comment_prefixes=("#",))
        if ini_path is not None and ini_path.exists():
            self.config.read(ini_path, encoding="utf-8")

    # ------------------------------------------------------------------
    # Generic getters
    # ------------------------------------------------------------------
    def get(self, section: str, key: str, fallback: str = "") -> str:
        return self.config.get(section, key, fallback=fallback)

    def getbool(self, section: str, key: str, fallback: bool = False) -> bool:
        return self.config.getboolean(section, key, fallback=fallback)

    def set(self, section: str, key: str, value: str) -> None:
        if not self.config.has_section(section):
            self.config.add_section(section)
        self.config.set(section, key, value)

    def save(self) -> None:
        if self.ini_path is None:
            raise ValueError("settings have no ini_path to save to")
        with open(self.ini_path, "w", encoding="utf-8") as f:
            self.config.write(f)

    # ------------------------------------------------------------------
    # Convenience properties
    # ------------------------------------------------------------------
    @property
    def root_id(self) -> str:
        return self.get("PROGRAM", "root_id", DEFAULT_ROOT_ID)

    @property
    def name_attributes(self) -> tuple[str, ...]:
        raw = self.get("PROGRAM", "name_attributes", "")
        names = tuple(n.strip().lower() for n in raw.split(",") if n.strip())
        return names or NAME_ATTRIBUTES

    @property
    def literal_fallback(self) -> bool:
        return self.getbool("EVALUATOR", "literal_fallback", True)

    @property
    def log_level(self) -> str:
        level = self.get("LOG", "level", "INFO").upper()
        return level if level in LOG_LEVELS else "INFO"

    @property
    def show_store(self) -> bool:
        return self.getbool("LOG", "show_store", True)

    @property
    def color(self) -> str:
        """'always', 'never' or 'auto' (colour only when writing to a TTY)."""
        mode = self.get("LOG", "color", "auto").lower()
        return mode if mode in ("always", "never", "auto") else "auto"
