"""Translation provider implementations."""

from .deepl import DeepLProvider
from .deepseek import DeepSeekProvider
from .gemini import GeminiProvider
from .local_llm import LocalLLMProvider
from .openai import OpenAIProvider
from .opus_mt import OpusMTProvider

__all__ = [
    "DeepLProvider",
    "DeepSeekProvider",
    "GeminiProvider",
    "LocalLLMProvider",
    "OpenAIProvider",
    "OpusMTProvider",
]
