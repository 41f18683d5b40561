"""Pluggable OCR engines and translation providers."""

from .base import (
    AdapterDescriptor,
    BoundingBox,
    ConfigField,
    LatencyClass,
    OCREngine,
    OCRResult,
    TextBlock,
    TranslationProvider,
    TranslationResult,
    UsageMode,
)
from .fallback import Attempt, FallbackExecutor, FallbackOutcome
from .instances import AdapterInstanceCache
from .manager import BackendManager, OCRManager, TranslationManager
from .registry import CapabilityRegistry, create_ocr_registry, create_translation_registry

__all__ = [
    "AdapterDescriptor",
    "AdapterInstanceCache",
    "Attempt",
    "BackendManager",
    "BoundingBox",
    "CapabilityRegistry",
    "ConfigField",
    "FallbackExecutor",
    "FallbackOutcome",
    "LatencyClass",
    "OCREngine",
    "OCRManager",
    "OCRResult",
    "TextBlock",
    "TranslationManager",
    "TranslationProvider",
    "TranslationResult",
    "UsageMode",
    "create_ocr_registry",
    "create_translation_registry",
]
