"""Reader for ``key = value`` configuration files."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable

import aiofiles

from .logging_utils import LoggerLike, ensure_structured_logger


class ConfigManager:
    """Parses flat ``config.txt`` files into string dictionaries.

    Blank lines and ``#`` comments are skipped, inline comments are stripped,
    and values wrapped in single or double quotes are unquoted. A missing file
    yields an empty dictionary so callers fall back to their defaults.
    """

    def __init__(self, logger: LoggerLike = None) -> None:
        self.logger = ensure_structured_logger(logger, fallback_name="ConfigManager")

    @staticmethod
    def parse_lines(lines: Iterable[str]) -> Dict[str, str]:
        config: Dict[str, str] = {}

        for raw_line in lines:
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip()

            if "#" in value:
                value = value.split("#")[0].strip()

            if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
                value = value[1:-1]

            if key:
                config[key] = value

        return config

    def read_config(self, config_path: Path) -> Dict[str, str]:
        config_path = Path(config_path)
        if not config_path.exists():
            self.logger.debug("Config %s not found, using defaults", config_path)
            return {}
        with open(config_path, "r", encoding="utf-8") as fh:
            config = self.parse_lines(fh)
        self.logger.debug("Loaded %d keys from %s", len(config), config_path)
        return config

    async def read_config_async(self, config_path: Path) -> Dict[str, str]:
        config_path = Path(config_path)
        if not config_path.exists():
            self.logger.debug("Config %s not found, using defaults", config_path)
            return {}
        lines: list[str] = []
        async with aiofiles.open(config_path, "r", encoding="utf-8") as fh:
            async for line in fh:
                lines.append(line)
        config = self.parse_lines(lines)
        self.logger.debug("Loaded %d keys from %s", len(config), config_path)
        return config


__all__ = ["ConfigManager"]
