"""Per-category backend managers.

A manager ties together a registry, an instance cache, the user's
priority override, candidate selection and the fallback executor.
"""

from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from ..log import get_logger
from ..privacy import PrivacyMode, allows_network
from . import selector
from .base import (
    Adapter,
    AdapterDescriptor,
    ChunkCallback,
    OCREngine,
    OCRResult,
    TranslationProvider,
    TranslationResult,
    UsageMode,
)
from .fallback import FallbackExecutor, FallbackOutcome
from .instances import AdapterInstanceCache
from .registry import CapabilityRegistry, create_ocr_registry, create_translation_registry

logger = get_logger("manager")

R = TypeVar("R")


@dataclass
class AdapterStatus:
    """Runtime status of one registered adapter."""

    descriptor: AdapterDescriptor
    configured: bool
    missing: list[str]
    allowed: bool


class BackendManager:
    """Selection and fallback for one adapter category."""

    def __init__(
        self,
        registry: CapabilityRegistry,
        configs: Mapping[str, Mapping[str, Any]] | None = None,
        priority: Sequence[str] | None = None,
        label: str = "backend",
    ):
        """Create a manager.

        Args:
            registry: Registry of the category.
            configs: Stored configuration per adapter id.
            priority: User priority override; empty keeps the defaults.
            label: Noun used in failure messages.
        """
        self.registry = registry
        self.instances = AdapterInstanceCache(registry, configs)
        self.executor = FallbackExecutor(self.instances, label)
        self._priority = list(priority or [])

    @property
    def priority_override(self) -> list[str]:
        return list(self._priority)

    def set_priority(self, ids: Sequence[str] | None) -> None:
        """Set the user priority override. An empty list restores the defaults."""
        self._priority = list(ids or [])

    def get_priority(self, mode: UsageMode | str = UsageMode.NORMAL) -> list[str]:
        """Effective priority list, before privacy filtering."""
        return self._priority or self.registry.default_priority(mode)

    def candidates(self, privacy_mode: PrivacyMode, mode: UsageMode | str = UsageMode.NORMAL) -> list[str]:
        return selector.candidates(self.registry, self._priority, privacy_mode, mode)

    async def run(
        self,
        operation: Callable[[Adapter], Awaitable[R]],
        privacy_mode: PrivacyMode,
        mode: UsageMode | str = UsageMode.NORMAL,
    ) -> FallbackOutcome[R]:
        """Run an operation over the candidates for the given modes."""
        return await self.executor.run(self.candidates(privacy_mode, mode), operation)

    def update_config(self, adapter_id: str, partial: Mapping[str, Any]) -> None:
        self.instances.update_config(adapter_id, partial)

    def load_config(self, configs: Mapping[str, Mapping[str, Any]]) -> None:
        self.instances.load(configs)

    def status(self, privacy_mode: PrivacyMode = PrivacyMode.STANDARD) -> list[AdapterStatus]:
        """Configured and privacy-allowed state of every registered adapter."""
        statuses = []
        for descriptor in self.registry.list_metadata():
            missing = descriptor.missing_fields(self.instances.merged_config(descriptor.id))
            statuses.append(AdapterStatus(
                descriptor=descriptor,
                configured=not missing,
                missing=missing,
                allowed=allows_network(privacy_mode) or not descriptor.requires_network,
            ))
        return statuses

    async def aclose(self) -> None:
        await self.instances.aclose()


class TranslationManager(BackendManager):
    """Translation providers with fallback and optional streaming."""

    def __init__(self, registry=None, configs=None, priority=None):
        super().__init__(registry or create_translation_registry(), configs, priority, "translation provider")

    async def translate(
        self,
        text: str,
        source_lang: str,
        target_lang: str,
        privacy_mode: PrivacyMode = PrivacyMode.STANDARD,
        mode: UsageMode | str = UsageMode.NORMAL,
        on_chunk: ChunkCallback | None = None,
    ) -> FallbackOutcome[TranslationResult]:
        """Translate text with the first provider that succeeds.

        Args:
            text: Source text.
            source_lang: Source language code.
            target_lang: Target language code.
            privacy_mode: Current privacy mode.
            mode: Usage mode selecting the default priority.
            on_chunk: When given, streaming providers report partial output
                through it; other providers report the whole result once.

        Returns:
            FallbackOutcome wrapping the winning TranslationResult.
        """

        async def operation(provider: TranslationProvider) -> TranslationResult:
            if on_chunk is None:
                return await provider.translate(text, source_lang, target_lang)
            descriptor = provider.descriptor
            if descriptor is not None and descriptor.supports_streaming:
                return await provider.translate_stream(text, source_lang, target_lang, on_chunk)
            result = await provider.translate(text, source_lang, target_lang)
            if result.success:
                on_chunk(result.text)
            return result

        outcome = await self.run(operation, privacy_mode, mode)
        if outcome.success:
            logger.debug("translated", provider=outcome.adapter_id, chars=len(text))
        return outcome


class OCRManager(BackendManager):
    """OCR engines with fallback."""

    def __init__(self, registry=None, configs=None, priority=None):
        super().__init__(registry or create_ocr_registry(), configs, priority, "OCR engine")

    async def recognize(
        self,
        image_data: str,
        privacy_mode: PrivacyMode = PrivacyMode.STANDARD,
        mode: UsageMode | str = UsageMode.NORMAL,
        options: Mapping[str, Any] | None = None,
    ) -> FallbackOutcome[OCRResult]:
        """Recognize text with the first engine that succeeds."""

        async def operation(engine: OCREngine) -> OCRResult:
            return await engine.recognize(image_data, options)

        outcome = await self.run(operation, privacy_mode, mode)
        if outcome.success:
            logger.debug("recognized", engine=outcome.adapter_id, chars=len(outcome.result.text))
        return outcome
