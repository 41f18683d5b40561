"""Configuration management for transpane."""

import os
from pathlib import Path
from typing import Any

import yaml

from .cache import DEFAULT_CACHE_SIZE
from .errors import TranspaneError
from .log import get_logger
from .privacy import PrivacyMode
from .session import DEFAULT_HISTORY_LIMIT

logger = get_logger("config")

CONFIG_DIR = Path.home() / ".transpane"

DEFAULT_CONFIG = """# Language translations are written in
target_language: zh

# Used instead when the detected source language already is the target
secondary_language: en

# Never swap to the secondary language
lock_target_language: false

# standard, secure (nothing recorded), offline (no network), strict (both)
privacy_mode: standard

# normal or subtitle; selects the default backend priority
mode: normal

# Display scale factor (device pixels per UI pixel)
scale_factor: 1.0

# Scattered blocks translated in parallel
concurrency_limit: 2

# Backend order; leave empty to use the built-in defaults
translation_priority: []
ocr_priority: []

# Per-provider settings, e.g.
# providers:
#   openai:
#     api_key: sk-...
#   deepl:
#     api_key: xxxxxxxx:fx
#   local-llm:
#     endpoint: http://localhost:1234/v1
#   gemini:
#     api_key: AIza...
#   deepseek:
#     api_key: sk-...
providers: {}

# Per-engine settings, e.g.
# ocr_engines:
#   tesseract:
#     language: eng+chi_sim
#   ocrspace:
#     api_key: K...
ocr_engines: {}

# Translation cache entries and in-memory history entries
cache_size: 200
history_limit: 100
"""


class Config:
    """Application configuration."""

    def __init__(
        self,
        target_language: str = "zh",
        secondary_language: str = "en",
        lock_target_language: bool = False,
        privacy_mode: PrivacyMode | str = PrivacyMode.STANDARD,
        mode: str = "normal",
        scale_factor: float = 1.0,
        concurrency_limit: int = 2,
        translation_priority: list[str] | None = None,
        ocr_priority: list[str] | None = None,
        providers: dict[str, dict[str, Any]] | None = None,
        ocr_engines: dict[str, dict[str, Any]] | None = None,
        cache_size: int = DEFAULT_CACHE_SIZE,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        self.target_language = target_language
        self.secondary_language = secondary_language
        self.lock_target_language = lock_target_language
        self.privacy_mode = PrivacyMode.parse(privacy_mode)
        self.mode = mode  # "normal" or "subtitle"
        if scale_factor <= 0:
            logger.warning("scale_factor must be positive, using 1.0", scale_factor=scale_factor)
            scale_factor = 1.0
        self.scale_factor = scale_factor
        self.concurrency_limit = max(1, concurrency_limit)
        self.translation_priority = list(translation_priority or [])
        self.ocr_priority = list(ocr_priority or [])
        self.providers = {key: dict(value or {}) for key, value in (providers or {}).items()}
        self.ocr_engines = {key: dict(value or {}) for key, value in (ocr_engines or {}).items()}
        self.cache_size = cache_size
        self.history_limit = history_limit

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Build a config from parsed YAML, applying defaults for missing keys."""
        return cls(
            target_language=str(data.get("target_language", "zh")),
            secondary_language=str(data.get("secondary_language", "en")),
            lock_target_language=bool(data.get("lock_target_language", False)),
            privacy_mode=data.get("privacy_mode", "standard"),
            mode=str(data.get("mode", "normal")),
            scale_factor=float(data.get("scale_factor", 1.0)),
            concurrency_limit=int(data.get("concurrency_limit", 2)),
            translation_priority=data.get("translation_priority") or [],
            ocr_priority=data.get("ocr_priority") or [],
            providers=data.get("providers") or {},
            ocr_engines=data.get("ocr_engines") or {},
            cache_size=int(data.get("cache_size", DEFAULT_CACHE_SIZE)),
            history_limit=int(data.get("history_limit", DEFAULT_HISTORY_LIMIT)),
        )

    @classmethod
    def load(cls, config_path: str | None = None, write_default: bool = True) -> "Config":
        """Load configuration from YAML file.

        Args:
            config_path: Path to config file. If None, looks for config.yml
                        in common locations.
            write_default: Write a commented default file to the home
                        directory when no config file is found.

        Returns:
            Config instance with loaded values.

        Raises:
            TranspaneError: If the file is not valid YAML.
        """
        if config_path is None:
            search_paths = [
                Path("config.yml"),
                CONFIG_DIR / "config.yml",
            ]
            for path in search_paths:
                if path.exists():
                    config_path = str(path)
                    break

        if config_path and os.path.exists(config_path):
            with open(config_path, "r", encoding="utf-8") as f:
                try:
                    data = yaml.safe_load(f) or {}
                except yaml.YAMLError as e:
                    raise TranspaneError(f"invalid config file {config_path}: {e}") from e
            if not isinstance(data, dict):
                raise TranspaneError(f"invalid config file {config_path}: expected a mapping")
            logger.debug("config loaded", path=config_path)
            return cls.from_dict(data)

        config = cls()
        if write_default:
            config._create_default_config()
        return config

    def _create_default_config(self) -> None:
        """Create a default config file in the user's home directory."""
        config_path = CONFIG_DIR / "config.yml"
        if config_path.exists():
            return

        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(DEFAULT_CONFIG)

        logger.info("created default config", path=str(config_path))
