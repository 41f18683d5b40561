"""OpenAI chat-completions translation provider."""

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

SYSTEM_PROMPT = (
    "You are a translator. Translate the following text to {name}. "
    "Output only the translation, no explanations."
)

DESCRIPTOR = AdapterDescriptor(
    id="openai",
    name="OpenAI",
    description="GPT models through the OpenAI API",
    config_schema={
        "api_key": ConfigField(required=True, label="API key", secret=True),
        "base_url": ConfigField(default="https://api.openai.com/v1", label="API base URL"),
        "model": ConfigField(default="gpt-4o-mini", label="Model"),
        "timeout": ConfigField(default=15.0, label="Timeout (s)"),
    },
    requires_network=True,
    latency_class=LatencyClass.FAST,
    supports_streaming=True,
)


class ChatCompletionsProvider(HttpAdapter, TranslationProvider):
    """Translation through any OpenAI-compatible ``/chat/completions`` API."""

    url_field = "base_url"

    @property
    def base_url(self) -> str:
        return str(self._config.get(self.url_field) or "").rstrip("/")

    def _headers(self) -> dict[str, str]:
        api_key = self._config.get("api_key")
        if api_key:
            return {"Authorization": f"Bearer {api_key}"}
        return {}

    def _payload(self, text: str, target_lang: str, stream: bool = False) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT.format(name=language_name(target_lang))},
                {"role": "user", "content": text},
            ],
            "temperature": 0.3,
        }
        # Local servers pick their loaded model when none is given
        if self._config.get("model"):
            payload["model"] = self._config["model"]
        if stream:
            payload["stream"] = True
        return payload

    async def translate(self, text: str, source_lang: str, target_lang: str) -> TranslationResult:
        if not text.strip():
            return TranslationResult(success=False, error="empty text")

        data = await self._post_json(
            f"{self.base_url}/chat/completions",
            self._payload(text, target_lang),
            headers=self._headers(),
        )
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"unexpected response from {self.base_url}") from e
        if not content:
            return TranslationResult(success=False, error="empty response")
        return TranslationResult(success=True, text=content.strip())

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
            f"{self.base_url}/chat/completions",
            self._payload(text, target_lang, stream=True),
            headers=self._headers(),
        ):
            choices = event.get("choices") or [{}]
            chunk = (choices[0].get("delta") or {}).get("content")
            if not chunk:
                continue
            parts.append(chunk)
            if on_chunk is not None:
                on_chunk(chunk)

        full_text = "".join(parts).strip()
        if not full_text:
            return TranslationResult(success=False, error="empty response")
        return TranslationResult(success=True, text=full_text)


class OpenAIProvider(ChatCompletionsProvider):
    """Hosted OpenAI models. Requires an API key."""
