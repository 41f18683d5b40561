"""Google Gemini translation provider."""

from typing import Any

from ...errors import ProviderError
from ...text import language_name
from ..base import (
    AdapterDescriptor,
    ChunkCallback,
    ConfigField,
    LatencyClass,
    TranslationProvider,
    TranslationResult,
)
from ..http import HttpAdapter

API_URL = "https://generativelanguage.googleapis.com/v1beta"

DESCRIPTOR = AdapterDescriptor(
    id="gemini",
    name="Google Gemini",
    description="Gemini models through Google AI Studio, with a free tier",
    config_schema={
        "api_key": ConfigField(required=True, label="API key", secret=True),
        "model": ConfigField(default="gemini-2.0-flash", label="Model"),
        "temperature": ConfigField(default=0.2, label="Temperature"),
        "timeout": ConfigField(default=30.0, label="Timeout (s)"),
    },
    requires_network=True,
    latency_class=LatencyClass.MEDIUM,
    supports_streaming=True,
)

# Translations of quoted or sensitive text must not be dropped
_SAFETY_CATEGORIES = [
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
]


def build_prompt(text: str, source_lang: str, target_lang: str) -> str:
    target = language_name(target_lang)
    if source_lang == "auto":
        instruction = f"Translate the following text to {target}."
    else:
        instruction = f"Translate from {language_name(source_lang)} to {target}."
    return f"{instruction} Output only the translated text, no explanations.\n\n{text}"


def _candidate_text(data: dict[str, Any]) -> str | None:
    candidates = data.get("candidates") or [{}]
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts) or None


class GeminiProvider(HttpAdapter, TranslationProvider):
    """Translation through the Gemini ``generateContent`` API."""

    @property
    def model_url(self) -> str:
        return f"{API_URL}/models/{self._config.get('model') or DESCRIPTOR.defaults()['model']}"

    def _headers(self) -> dict[str, str]:
        return {"x-goog-api-key": str(self._config.get("api_key") or "")}

    def _payload(self, text: str, source_lang: str, target_lang: str) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": build_prompt(text, source_lang, target_lang)}]}],
            "safetySettings": [
                {"category": category, "threshold": "BLOCK_NONE"} for category in _SAFETY_CATEGORIES
            ],
            "generationConfig": {
                "temperature": float(self._config.get("temperature", 0.2)),
                "maxOutputTokens": 2048,
            },
        }

    async def translate(self, text: str, source_lang: str, target_lang: str) -> TranslationResult:
        if not text.strip():
            return TranslationResult(success=False, error="empty text")

        data = await self._post_json(
            f"{self.model_url}:generateContent",
            self._payload(text, source_lang, target_lang),
            headers=self._headers(),
        )
        if not isinstance(data, dict):
            raise ProviderError("unexpected response from gemini")

        translated = _candidate_text(data)
        if not translated:
            block_reason = (data.get("promptFeedback") or {}).get("blockReason")
            if block_reason:
                return TranslationResult(success=False, error=f"content blocked: {block_reason}")
            return TranslationResult(success=False, error="empty response")
        return TranslationResult(success=True, text=translated.strip())

    async def translate_stream(
        self,
        text: str,
        source_lang: str,
        target_lang: str,
        on_chunk: ChunkCallback | None,
    ) -> TranslationResult:
        if not text.strip():
            return TranslationResult(success=False, error="empty text")

        parts = []
        async for event in self._stream_sse(
            f"{self.model_url}:streamGenerateContent?alt=sse",
            self._payload(text, source_lang, target_lang),
            headers=self._headers(),
        ):
            chunk = _candidate_text(event)
            if not chunk:
                continue
            parts.append(chunk)
            if on_chunk is not None:
                on_chunk(chunk)

        full_text = "".join(parts).strip()
        if not full_text:
            return TranslationResult(success=False, error="empty response")
        return TranslationResult(success=True, text=full_text)
