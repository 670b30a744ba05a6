"""
Language registry for parser adapters.

This module manages language registration, file extension lookup and the
creation and caching of initialized parser adapters. Language names and
extensions are matched case-insensitively.
"""

import asyncio
import importlib
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from polyast.config import Settings, settings as default_settings
from polyast.utils.logging import log_error_with_context
from polyast.utils.metrics import ParseMetricsCollector, emit_metric
from parsers.base import LanguageParser

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"

REQUIRED_FIELDS = ("file_extensions", "parser")

ParserFactory = Callable[..., LanguageParser]


class LanguageConfig(BaseModel):
    """Registration entry for one language."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1, description="Language identifier")
    display_name: Optional[str] = Field(None, description="Human readable name")
    file_extensions: List[str] = Field(default_factory=list, description="Handled extensions")
    parser: Optional[str] = Field(None, description="Dotted path of the adapter class")
    factory: Optional[ParserFactory] = Field(
        None, exclude=True, description="Callable building the adapter; overrides parser"
    )

    @field_validator("file_extensions")
    @classmethod
    def _normalize_extensions(cls, extensions: List[str]) -> List[str]:
        normalized = []
        for ext in extensions:
            ext = ext.strip().lower()
            if not ext:
                continue
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        return normalized

    def resolve_factory(self) -> ParserFactory:
        """
        Return the callable that builds this language's adapter.

        Raises:
            ValueError: If neither a factory nor a parser path is configured
            ImportError: If the parser module cannot be imported
            AttributeError: If the module has no such class
        """
        if self.factory is not None:
            return self.factory
        if not self.parser or "." not in self.parser:
            raise ValueError(f"No parser configured for language '{self.name}'")

        module_path, class_name = self.parser.rsplit(".", 1)
        module = importlib.import_module(module_path)
        return getattr(module, class_name)


class ParserRegistry:
    """Manages language registration and parser adapter instances."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        metrics: Optional[ParseMetricsCollector] = None,
        load_builtin: bool = True,
    ):
        """
        Initialize the registry.

        Args:
            settings: Settings handed to every adapter; defaults to the global settings
            metrics: Collector shared by every adapter the registry creates
            load_builtin: Register the languages from the language table
        """
        self._settings = settings or default_settings
        self._metrics = metrics or ParseMetricsCollector()
        self._languages: Dict[str, LanguageConfig] = {}
        self._extension_map: Dict[str, str] = {}
        self._parsers: Dict[str, LanguageParser] = {}
        self._config_cache: Dict[str, Dict[str, LanguageConfig]] = {}
        self._lock = asyncio.Lock()

        if load_builtin:
            config_path = self._settings.languages_config_path or DEFAULT_CONFIG_PATH
            for config in self.load_language_config(Path(config_path)).values():
                self.register_language(config)

    @property
    def metrics(self) -> ParseMetricsCollector:
        return self._metrics

    def load_language_config(self, config_path: Path) -> Dict[str, LanguageConfig]:
        """
        Load a language table from YAML.

        Args:
            config_path: Path to the YAML file

        Returns:
            Dictionary mapping language name to its configuration

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If an entry is missing a required field
            yaml.YAMLError: If the file is malformed
        """
        cache_key = str(config_path)
        if cache_key in self._config_cache:
            return self._config_cache[cache_key]

        if not config_path.exists():
            raise FileNotFoundError(f"Language configuration not found: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse language configuration {config_path}: {e}")
            raise

        entries = raw.get("languages")
        if not isinstance(entries, dict):
            raise ValueError(f"Missing 'languages' mapping in {config_path}")

        configs: Dict[str, LanguageConfig] = {}
        for name, entry in entries.items():
            entry = entry or {}
            for field in REQUIRED_FIELDS:
                if field not in entry:
                    raise ValueError(
                        f"Missing required field '{field}' for language '{name}' in {config_path}"
                    )
            configs[str(name)] = LanguageConfig(name=str(name), **entry)

        self._config_cache[cache_key] = configs
        logger.info(f"Loaded {len(configs)} language configurations from {config_path}")
        return configs

    def register_language(self, config: LanguageConfig) -> None:
        """
        Register a language, replacing any previous registration of the same name.

        Args:
            config: Language configuration to register
        """
        key = config.name.casefold()

        if key in self._languages:
            logger.warning(f"Language '{config.name}' already registered, overwriting")
            self.unregister_language(config.name)

        self._languages[key] = config

        for ext in config.file_extensions:
            if ext in self._extension_map:
                logger.warning(
                    f"Extension '{ext}' already mapped to '{self._extension_map[ext]}', "
                    f"overwriting with '{key}'"
                )
            self._extension_map[ext] = key

        logger.debug(
            f"Registered language '{config.name}' with extensions: {config.file_extensions}"
        )

    def unregister_language(self, language: str) -> bool:
        """
        Unregister a language and dispose its cached parser.

        Returns:
            True if the language was registered, False otherwise
        """
        key = language.casefold()
        config = self._languages.pop(key, None)
        if config is None:
            return False

        for ext in config.file_extensions:
            if self._extension_map.get(ext) == key:
                del self._extension_map[ext]

        parser = self._parsers.pop(key, None)
        if parser is not None:
            parser.dispose()

        logger.info(f"Unregistered language '{config.name}'")
        return True

    def is_supported(self, language: Optional[str]) -> bool:
        if not language:
            return False
        return language.casefold() in self._languages

    def get_extensions(self, language: str) -> List[str]:
        """Return the file extensions of a language, or an empty list."""
        config = self._languages.get(language.casefold()) if language else None
        return list(config.file_extensions) if config else []

    def supported_languages(self) -> List[str]:
        return [config.name for config in self._languages.values()]

    def get_language_for_file(self, file_path: str) -> Optional[str]:
        """
        Get the language registered for a file's extension.

        Args:
            file_path: Path to the file

        Returns:
            Language name if found, None otherwise
        """
        ext = Path(file_path).suffix.lower()
        key = self._extension_map.get(ext)
        if key is None:
            logger.debug(f"No language found for file extension '{ext}' (file: {file_path})")
            return None
        return self._languages[key].name

    def detect_language_from_extension(self, extension: str) -> Optional[str]:
        """Get the language for an extension given with or without the leading dot."""
        if not extension:
            return None
        ext = extension.lower()
        key = self._extension_map.get(ext if ext.startswith(".") else f".{ext}")
        return self._languages[key].name if key else None

    async def get_parser(self, language: str) -> Optional[LanguageParser]:
        """
        Get an initialized parser for a language, creating it on first use.

        Args:
            language: Language name

        Returns:
            Initialized LanguageParser, or None if the language is unknown
            or its parser could not be created
        """
        if not self.is_supported(language):
            logger.warning(f"No parser registered for language '{language}'")
            return None

        key = language.casefold()
        async with self._lock:
            parser = self._parsers.get(key)
            if parser is not None and not parser.is_disposed:
                return parser

            config = self._languages[key]
            parser = None
            try:
                factory = config.resolve_factory()
                parser = factory(settings=self._settings, metrics=self._metrics)
                await parser.initialize()
            except MemoryError:
                raise
            except Exception as e:
                log_error_with_context(
                    logger,
                    f"Failed to create parser for language '{config.name}'",
                    e,
                    language=config.name,
                )
                if parser is not None:
                    parser.dispose()
                return None

            self._parsers[key] = parser
            logger.info(f"Created parser for language '{config.name}'")
            initialization_ms = self._metrics.initialization_ms.get(parser.language)
            if initialization_ms is not None:
                emit_metric("parser_initialization_ms", initialization_ms, language=config.name)
            return parser

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get registry statistics.

        Returns:
            Dictionary with statistics
        """
        return {
            "total_languages": len(self._languages),
            "total_extensions": len(self._extension_map),
            "active_parsers": len(self._parsers),
            "languages": self.supported_languages(),
            "metrics": self._metrics.get_metrics_summary(),
        }

    def dispose(self) -> None:
        """Dispose every cached parser."""
        for parser in self._parsers.values():
            parser.dispose()
        self._parsers.clear()
