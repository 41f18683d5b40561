"""OCR engine implementations."""

from .llm_vision import LLMVisionEngine
from .ocrspace import OCRSpaceEngine
from .tesseract import TesseractEngine

__all__ = [
    "LLMVisionEngine",
    "OCRSpaceEngine",
    "TesseractEngine",
]
