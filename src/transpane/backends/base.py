"""Abstract base classes and data types for OCR and translation backends."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class LatencyClass(Enum):
    """Expected response time of a backend."""

    FAST = "fast"  # < 500ms, hosted APIs
    MEDIUM = "medium"  # 500ms - 2s
    SLOW = "slow"  # > 2s, local large models


class UsageMode(Enum):
    """How the pipeline is being driven; selects the default priority list."""

    NORMAL = "normal"
    SUBTITLE = "subtitle"


@dataclass(frozen=True)
class ConfigField:
    """Declaration of one configuration field of an adapter."""

    required: bool = False
    default: Any = None
    label: str = ""
    secret: bool = False


@dataclass(frozen=True)
class AdapterDescriptor:
    """Static metadata about a backend adapter.

    Descriptors live in the registry next to the adapter class and never
    change after registration.
    """

    id: str
    name: str
    description: str = ""
    config_schema: Mapping[str, ConfigField] = field(default_factory=dict)
    requires_network: bool = True
    latency_class: LatencyClass = LatencyClass.MEDIUM
    supports_streaming: bool = False

    def defaults(self) -> dict[str, Any]:
        """Default values for every field that declares one."""
        return {
            name: schema_field.default
            for name, schema_field in self.config_schema.items()
            if schema_field.default is not None
        }

    def missing_fields(self, config: Mapping[str, Any]) -> list[str]:
        """Required fields that are absent or empty in ``config``."""
        return [
            name
            for name, schema_field in self.config_schema.items()
            if schema_field.required and not config.get(name)
        ]


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box, origin at the top-left corner."""

    x: float
    y: float
    width: float
    height: float

    @property
    def is_valid(self) -> bool:
        """Whether the box has a positive area."""
        return self.width > 0 and self.height > 0

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def scaled(self, scale_factor: float) -> "BoundingBox":
        """Convert device pixels to UI pixels by dividing by ``scale_factor``."""
        return BoundingBox(
            x=round(self.x / scale_factor),
            y=round(self.y / scale_factor),
            width=round(self.width / scale_factor),
            height=round(self.height / scale_factor),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BoundingBox":
        return cls(
            x=data.get("x", 0),
            y=data.get("y", 0),
            width=data.get("width", 0),
            height=data.get("height", 0),
        )


@dataclass(frozen=True)
class TextBlock:
    """A piece of recognized text with its position in device pixels."""

    text: str
    bbox: BoundingBox | None = None
    merged_count: int = 1

    @property
    def has_geometry(self) -> bool:
        return self.bbox is not None and self.bbox.is_valid


@dataclass
class OCRResult:
    """Outcome of a single OCR call.

    Attributes:
        success: Whether recognition completed.
        text: Full recognized text.
        blocks: Merged text blocks, if the engine reports geometry.
        raw_blocks: Un-merged line blocks, if the engine keeps them apart.
        error: Failure reason when ``success`` is False.
        no_text: Set by an engine that ran fine but found no text.
    """

    success: bool
    text: str = ""
    blocks: list[TextBlock] | None = None
    raw_blocks: list[TextBlock] | None = None
    error: str | None = None
    no_text: bool = False

    @property
    def layout_blocks(self) -> list[TextBlock] | None:
        """Blocks to judge layout on: un-merged lines win over merged ones."""
        if self.raw_blocks:
            return self.raw_blocks
        return self.blocks


@dataclass
class TranslationResult:
    """Outcome of a single translation call."""

    success: bool
    text: str = ""
    error: str | None = None


ChunkCallback = Callable[[str], None]


class Adapter(ABC):
    """Common state of every backend adapter: its configuration."""

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        descriptor: AdapterDescriptor | None = None,
    ):
        """Initialize the adapter.

        Args:
            config: Merged configuration (descriptor defaults plus user fields).
            descriptor: Registry metadata, used for the required-field check.
        """
        self._descriptor = descriptor
        self._config: dict[str, Any] = dict(config or {})
        self._last_error: str | None = None

    @property
    def config(self) -> dict[str, Any]:
        return dict(self._config)

    @property
    def descriptor(self) -> AdapterDescriptor | None:
        return self._descriptor

    @property
    def last_error(self) -> str | None:
        return self._last_error

    def update_config(self, config: Mapping[str, Any]) -> None:
        """Merge new configuration into the live adapter."""
        self._config = {**self._config, **config}
        self._on_config_changed()

    def _on_config_changed(self) -> None:
        """Hook for adapters holding state derived from configuration."""

    def missing_config(self) -> list[str]:
        if self._descriptor is None:
            return []
        return self._descriptor.missing_fields(self._config)

    def is_configured(self) -> bool:
        """Whether every required configuration field is set."""
        return not self.missing_config()

    def is_available(self) -> bool:
        """Whether the adapter can be called right now."""
        return self.is_configured()

    async def aclose(self) -> None:
        """Release network resources. Safe to call more than once."""


class TranslationProvider(Adapter):
    """Abstract base class for translation providers."""

    @abstractmethod
    async def translate(self, text: str, source_lang: str, target_lang: str) -> TranslationResult:
        """Translate text.

        Args:
            text: Source text.
            source_lang: Source language code, or "auto".
            target_lang: Target language code.

        Returns:
            TranslationResult. Providers may also raise; callers treat a
            raised error like ``success=False``.
        """

    async def translate_stream(
        self,
        text: str,
        source_lang: str,
        target_lang: str,
        on_chunk: ChunkCallback | None,
    ) -> TranslationResult:
        """Translate text, reporting partial output through ``on_chunk``.

        Providers without streaming support deliver the whole translation
        as a single chunk.
        """
        result = await self.translate(text, source_lang, target_lang)
        if result.success and on_chunk is not None:
            on_chunk(result.text)
        return result


class OCREngine(Adapter):
    """Abstract base class for OCR engines."""

    @abstractmethod
    async def recognize(self, image_data: str, options: Mapping[str, Any] | None = None) -> OCRResult:
        """Recognize text in an image.

        Args:
            image_data: Base64 image, optionally as a ``data:`` URL.
            options: Engine-specific options such as a language hint.

        Returns:
            OCRResult with text and, when available, block geometry.
        """
