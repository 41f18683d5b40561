"""OCR through a local vision model behind an OpenAI-compatible API."""

import re
from collections.abc import Mapping
from typing import Any

from ...errors import ProviderError
from ...imaging import to_data_url
from ...text import clean_ocr_text, language_name
from ..base import AdapterDescriptor, ConfigField, LatencyClass, OCREngine, OCRResult
from ..http import HttpAdapter

NO_TEXT_MARKER = "[NO TEXT DETECTED]"

SYSTEM_PROMPT = """You are an OCR engine. Extract ALL text from the image exactly as it appears.
Rules:
1. Output ONLY the extracted text, nothing else
2. Preserve the original layout and line breaks
3. Do not translate or interpret the text
4. If no text is found, output: [NO TEXT DETECTED]"""

DESCRIPTOR = AdapterDescriptor(
    id="llm-vision",
    name="LLM Vision",
    description="Vision model for complex layouts, handwriting or blurry text",
    config_schema={
        "endpoint": ConfigField(required=True, default="http://localhost:1234/v1", label="API endpoint"),
        "model": ConfigField(default="", label="Model (empty: server default)"),
        "timeout": ConfigField(default=30.0, label="Timeout (s)"),
    },
    requires_network=False,
    latency_class=LatencyClass.SLOW,
)

_PREFIX = re.compile(r"^(here is the extracted text:|the text in the image is:|ocr result:)", re.IGNORECASE)
_FENCE = re.compile(r"^```\w*\n?|\n?```$")
_NO_TEXT = re.compile(r"no text|cannot detect", re.IGNORECASE)


def clean_vision_output(text: str) -> str:
    """Strip chatty prefixes and code fences; empty when the model found nothing."""
    cleaned = _PREFIX.sub("", text.strip()).strip()
    cleaned = _FENCE.sub("", cleaned).strip()
    if NO_TEXT_MARKER in cleaned or _NO_TEXT.search(cleaned):
        return ""
    return clean_ocr_text(cleaned)


class LLMVisionEngine(HttpAdapter, OCREngine):
    """Sends the image to a chat-completions endpoint and reads back the text."""

    @property
    def base_url(self) -> str:
        return str(self._config.get("endpoint") or "").rstrip("/")

    def _system_prompt(self, language: str | None) -> str:
        if language and language != "auto":
            return f"{SYSTEM_PROMPT}\n5. The text is likely in {language_name(language)}"
        return SYSTEM_PROMPT

    async def recognize(self, image_data: str, options: Mapping[str, Any] | None = None) -> OCRResult:
        options = options or {}
        payload: dict[str, Any] = {
            "messages": [
                {"role": "system", "content": self._system_prompt(options.get("language"))},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": "Please extract and output all text from this image."},
                        {"type": "image_url", "image_url": {"url": to_data_url(image_data)}},
                    ],
                },
            ],
            "max_tokens": 4096,
            "temperature": 0.1,
        }
        if self._config.get("model"):
            payload["model"] = self._config["model"]

        data = await self._post_json(f"{self.base_url}/chat/completions", payload)
        try:
            content = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"unexpected response from {self.base_url}") from e

        text = clean_vision_output(content)
        if not text:
            return OCRResult(success=True, no_text=True)
        # Vision models return plain text without geometry
        return OCRResult(success=True, text=text)
