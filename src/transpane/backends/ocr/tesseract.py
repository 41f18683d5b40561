"""Tesseract OCR engine."""

import asyncio
from collections.abc import Mapping
from typing import Any

import pytesseract
from PIL import Image

from ...errors import ProviderError
from ...imaging import decode_image
from ...log import get_logger
from ..base import AdapterDescriptor, BoundingBox, ConfigField, LatencyClass, OCREngine, OCRResult, TextBlock

logger = get_logger("tesseract")

# Default confidence threshold (Tesseract reports 0-100, normalized to 0-1)
DEFAULT_CONFIDENCE_THRESHOLD = 0.6

# Language codes to Tesseract traineddata names
LANGUAGE_TO_TESSERACT = {
    "en": "eng",
    "zh": "chi_sim",
    "zh-TW": "chi_tra",
    "ja": "jpn",
    "ko": "kor",
    "fr": "fra",
    "de": "deu",
    "es": "spa",
    "ru": "rus",
    "pt": "por",
    "it": "ita",
}

DESCRIPTOR = AdapterDescriptor(
    id="tesseract",
    name="Tesseract",
    description="Local general-purpose OCR through pytesseract",
    config_schema={
        "language": ConfigField(default="eng", label="Tesseract language(s), e.g. eng+chi_sim"),
        "confidence_threshold": ConfigField(default=DEFAULT_CONFIDENCE_THRESHOLD, label="Minimum word confidence"),
        "psm": ConfigField(default=3, label="Page segmentation mode"),
        "tesseract_cmd": ConfigField(label="Path to the tesseract binary"),
    },
    requires_network=False,
    latency_class=LatencyClass.FAST,
)


class TesseractEngine(OCREngine):
    """Extracts line blocks with geometry using Tesseract.

    Words are grouped into lines (``raw_blocks``) and lines into
    paragraphs (``blocks``), all in device pixels of the source image.
    """

    def __init__(self, config=None, descriptor=None):
        super().__init__(config, descriptor)
        self._version: str | None = None
        self._apply_command()

    def _on_config_changed(self) -> None:
        self._version = None
        self._apply_command()

    def _apply_command(self) -> None:
        if self._config.get("tesseract_cmd"):
            pytesseract.pytesseract.tesseract_cmd = self._config["tesseract_cmd"]

    def is_available(self) -> bool:
        """Check that the tesseract binary can be found."""
        if self._version is not None:
            return True
        try:
            self._version = str(pytesseract.get_tesseract_version())
        except (pytesseract.TesseractNotFoundError, OSError) as e:
            self._last_error = str(e)
            return False
        logger.debug("tesseract found", version=self._version)
        return True

    def _language(self, options: Mapping[str, Any]) -> str:
        hint = options.get("language")
        if hint and hint != "auto":
            return LANGUAGE_TO_TESSERACT.get(hint, hint)
        return str(self._config.get("language") or "eng")

    async def recognize(self, image_data: str, options: Mapping[str, Any] | None = None) -> OCRResult:
        try:
            image = decode_image(image_data)
        except ValueError as e:
            raise ProviderError(str(e)) from e

        language = self._language(options or {})
        try:
            data = await asyncio.to_thread(self._image_to_data, image, language)
        except pytesseract.TesseractError as e:
            raise ProviderError(f"tesseract failed: {e.message}") from e

        lines, paragraphs = self._group_words(data)
        if not lines:
            return OCRResult(success=True, no_text=True)

        logger.debug("ocr complete", lines=len(lines), paragraphs=len(paragraphs), language=language)
        return OCRResult(
            success=True,
            text="\n".join(line.text for line in lines),
            blocks=paragraphs,
            raw_blocks=lines,
        )

    def _image_to_data(self, image: Image.Image, language: str) -> dict[str, list]:
        return pytesseract.image_to_data(
            image,
            lang=language,
            config=f"--psm {int(self._config.get('psm', 3))}",
            output_type=pytesseract.Output.DICT,
        )

    def _group_words(self, data: dict[str, list]) -> tuple[list[TextBlock], list[TextBlock]]:
        """Group confident words into line blocks and paragraph blocks."""
        threshold = float(self._config.get("confidence_threshold", DEFAULT_CONFIDENCE_THRESHOLD))

        lines: dict[tuple[int, int, int], list[dict]] = {}
        for i in range(len(data["text"])):
            text = str(data["text"][i]).strip()
            conf = float(data["conf"][i])
            # Structural rows carry conf -1
            if not text or conf < 0 or conf / 100.0 < threshold:
                continue
            key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
            lines.setdefault(key, []).append({
                "text": text,
                "x": data["left"][i],
                "y": data["top"][i],
                "w": data["width"][i],
                "h": data["height"][i],
            })

        line_blocks = []
        paragraphs: dict[tuple[int, int], list[TextBlock]] = {}
        for (block_num, par_num, _), words in lines.items():
            line = self._words_to_block(words)
            line_blocks.append(line)
            paragraphs.setdefault((block_num, par_num), []).append(line)

        paragraph_blocks = [_merge_lines(members) for members in paragraphs.values()]
        return line_blocks, paragraph_blocks

    @staticmethod
    def _words_to_block(words: list[dict]) -> TextBlock:
        min_x = min(word["x"] for word in words)
        min_y = min(word["y"] for word in words)
        max_x = max(word["x"] + word["w"] for word in words)
        max_y = max(word["y"] + word["h"] for word in words)
        return TextBlock(
            text=" ".join(word["text"] for word in words),
            bbox=BoundingBox(x=min_x, y=min_y, width=max_x - min_x, height=max_y - min_y),
        )


def _merge_lines(lines: list[TextBlock]) -> TextBlock:
    """Merge line blocks into one block spanning all of them."""
    if len(lines) == 1:
        return lines[0]
    boxes = [line.bbox for line in lines if line.bbox is not None]
    min_x = min(box.x for box in boxes)
    min_y = min(box.y for box in boxes)
    max_x = max(box.x + box.width for box in boxes)
    max_y = max(box.bottom for box in boxes)
    return TextBlock(
        text="\n".join(line.text for line in lines),
        bbox=BoundingBox(x=min_x, y=min_y, width=max_x - min_x, height=max_y - min_y),
        merged_count=len(lines),
    )
