"""DeepSeek translation provider (OpenAI-compatible API)."""

from ..base import AdapterDescriptor, ConfigField, LatencyClass
from .openai import ChatCompletionsProvider

DESCRIPTOR = AdapterDescriptor(
    id="deepseek",
    name="DeepSeek",
    description="DeepSeek chat models, strong on Chinese",
    config_schema={
        "api_key": ConfigField(required=True, label="API key", secret=True),
        "base_url": ConfigField(default="https://api.deepseek.com/v1", label="API base URL"),
        "model": ConfigField(default="deepseek-chat", label="Model"),
        "timeout": ConfigField(default=30.0, label="Timeout (s)"),
    },
    requires_network=True,
    latency_class=LatencyClass.MEDIUM,
    supports_streaming=True,
)


class DeepSeekProvider(ChatCompletionsProvider):
    """Hosted DeepSeek models. Requires an API key."""
