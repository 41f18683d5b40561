"""OCR.space cloud OCR engine."""

from collections.abc import Mapping
from typing import Any

from ...errors import ProviderError
from ...imaging import to_data_url
from ...text import clean_ocr_text
from ..base import AdapterDescriptor, ConfigField, LatencyClass, OCREngine, OCRResult
from ..http import HttpAdapter

API_URL = "https://api.ocr.space/parse/image"

# Language codes to OCR.space language names
LANGUAGE_TO_OCRSPACE = {
    "zh": "chs",
    "zh-TW": "cht",
    "en": "eng",
    "ja": "jpn",
    "ko": "kor",
    "fr": "fre",
    "de": "ger",
    "es": "spa",
    "ru": "rus",
    "pt": "por",
    "it": "ita",
}

DESCRIPTOR = AdapterDescriptor(
    id="ocrspace",
    name="OCR.space",
    description="Free online OCR API",
    config_schema={
        "api_key": ConfigField(required=True, label="API key", secret=True),
        "language": ConfigField(default="chs", label="Recognition language"),
        "timeout": ConfigField(default=30.0, label="Timeout (s)"),
    },
    requires_network=True,
    latency_class=LatencyClass.MEDIUM,
)


class OCRSpaceEngine(HttpAdapter, OCREngine):
    """Posts the image to the OCR.space parse endpoint."""

    def _language(self, options: Mapping[str, Any]) -> str:
        hint = options.get("language")
        if hint and hint != "auto":
            return LANGUAGE_TO_OCRSPACE.get(hint, hint)
        return str(self._config.get("language") or "chs")

    async def recognize(self, image_data: str, options: Mapping[str, Any] | None = None) -> OCRResult:
        form = {
            "apikey": self._config.get("api_key", ""),
            "language": self._language(options or {}),
            "base64Image": to_data_url(image_data),
            "isOverlayRequired": "false",
            "detectOrientation": "true",
            "scale": "true",
            "OCREngine": "2",
        }
        data = await self._post_form(API_URL, form)

        if data.get("IsErroredOnProcessing"):
            messages = data.get("ErrorMessage") or ["processing failed"]
            if isinstance(messages, str):
                messages = [messages]
            raise ProviderError(f"OCR.space error: {messages[0]}")

        parsed = data.get("ParsedResults") or []
        text = clean_ocr_text("\n".join(result.get("ParsedText", "") for result in parsed))
        if not text:
            return OCRResult(success=True, no_text=True)
        return OCRResult(success=True, text=text)
