"""Translation through a local OpenAI-compatible server (LM Studio, Ollama)."""

from ..base import AdapterDescriptor, ConfigField, LatencyClass
from .openai import ChatCompletionsProvider

DESCRIPTOR = AdapterDescriptor(
    id="local-llm",
    name="Local LLM",
    description="Local model served by LM Studio, Ollama or a compatible server",
    config_schema={
        "endpoint": ConfigField(required=True, default="http://localhost:1234/v1", label="API endpoint"),
        "model": ConfigField(default="", label="Model (empty: server default)"),
        "timeout": ConfigField(default=30.0, label="Timeout (s)"),
    },
    requires_network=False,
    latency_class=LatencyClass.SLOW,
    supports_streaming=True,
)


class LocalLLMProvider(ChatCompletionsProvider):
    """Chat-completions provider pointed at a server on this machine."""

    url_field = "endpoint"

    async def list_models(self) -> list[str]:
        """Model ids reported by the server's ``/models`` endpoint."""
        response = await self._request("GET", f"{self.base_url}/models")
        return [model["id"] for model in response.json().get("data", []) if "id" in model]
