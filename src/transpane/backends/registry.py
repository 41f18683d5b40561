"""Registries of available OCR engines and translation providers."""

from collections.abc import Mapping, Sequence
from typing import Generic, TypeVar

from ..log import get_logger
from .base import Adapter, AdapterDescriptor, UsageMode
from .ocr import llm_vision, ocrspace, tesseract
from .translation import deepl, deepseek, gemini, local_llm, openai, opus_mt

logger = get_logger("registry")

A = TypeVar("A", bound=Adapter)

# Built-in adapters: (class, descriptor) in registration order
TRANSLATION_ADAPTERS = [
    (local_llm.LocalLLMProvider, local_llm.DESCRIPTOR),
    (openai.OpenAIProvider, openai.DESCRIPTOR),
    (deepl.DeepLProvider, deepl.DESCRIPTOR),
    (gemini.GeminiProvider, gemini.DESCRIPTOR),
    (deepseek.DeepSeekProvider, deepseek.DESCRIPTOR),
    (opus_mt.OpusMTProvider, opus_mt.DESCRIPTOR),
]

OCR_ADAPTERS = [
    (tesseract.TesseractEngine, tesseract.DESCRIPTOR),
    (llm_vision.LLMVisionEngine, llm_vision.DESCRIPTOR),
    (ocrspace.OCRSpaceEngine, ocrspace.DESCRIPTOR),
]

# Default priority per usage mode. gemini, deepseek and opus-mt only run when
# a user override names them.
TRANSLATION_PRIORITY = {
    UsageMode.NORMAL: ["local-llm", "openai", "deepl"],
    UsageMode.SUBTITLE: ["openai", "deepl", "local-llm"],
}

OCR_PRIORITY = {
    UsageMode.NORMAL: ["tesseract", "llm-vision", "ocrspace"],
    UsageMode.SUBTITLE: ["tesseract", "llm-vision", "ocrspace"],
}


class CapabilityRegistry(Generic[A]):
    """Maps adapter ids to an adapter class and its static descriptor.

    One registry exists per adapter category. Registration order is kept
    for listing.
    """

    def __init__(
        self,
        category: str,
        default_priorities: Mapping[UsageMode, Sequence[str]] | None = None,
    ):
        """Create an empty registry.

        Args:
            category: Name used in log messages ("translation", "ocr").
            default_priorities: Default id order per usage mode.
        """
        self.category = category
        self._classes: dict[str, type[A]] = {}
        self._descriptors: dict[str, AdapterDescriptor] = {}
        self._priorities = {mode: list(ids) for mode, ids in (default_priorities or {}).items()}

    def register(self, adapter_id: str, adapter_class: type[A], descriptor: AdapterDescriptor) -> None:
        """Register an adapter class. An existing id is overwritten.

        Raises:
            ValueError: If the descriptor id does not match ``adapter_id``.
        """
        if descriptor.id != adapter_id:
            raise ValueError(f"descriptor id {descriptor.id!r} does not match {adapter_id!r}")
        if adapter_id in self._classes:
            logger.warning("adapter overwritten", category=self.category, id=adapter_id)
        self._classes[adapter_id] = adapter_class
        self._descriptors[adapter_id] = descriptor

    def get(self, adapter_id: str) -> type[A] | None:
        return self._classes.get(adapter_id)

    def has(self, adapter_id: str) -> bool:
        return adapter_id in self._classes

    def descriptor(self, adapter_id: str) -> AdapterDescriptor | None:
        return self._descriptors.get(adapter_id)

    def list_metadata(self) -> list[AdapterDescriptor]:
        """Descriptors of all registered adapters, in registration order."""
        return list(self._descriptors.values())

    def ids(self) -> list[str]:
        return list(self._classes)

    def default_priority(self, mode: UsageMode | str = UsageMode.NORMAL) -> list[str]:
        """Default id order for a usage mode, falling back to the normal list."""
        mode = UsageMode(mode)
        if mode in self._priorities:
            return list(self._priorities[mode])
        return list(self._priorities.get(UsageMode.NORMAL, []))

    def set_default_priority(self, mode: UsageMode | str, ids: Sequence[str]) -> None:
        self._priorities[UsageMode(mode)] = list(ids)


def create_translation_registry() -> CapabilityRegistry:
    """Registry holding the built-in translation providers."""
    registry = CapabilityRegistry("translation", TRANSLATION_PRIORITY)
    for adapter_class, descriptor in TRANSLATION_ADAPTERS:
        registry.register(descriptor.id, adapter_class, descriptor)
    return registry


def create_ocr_registry() -> CapabilityRegistry:
    """Registry holding the built-in OCR engines."""
    registry = CapabilityRegistry("ocr", OCR_PRIORITY)
    for adapter_class, descriptor in OCR_ADAPTERS:
        registry.register(descriptor.id, adapter_class, descriptor)
    return registry
