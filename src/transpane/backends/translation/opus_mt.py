"""OPUS-MT translation provider running Helsinki-NLP models on this machine."""

import asyncio
import importlib.util
import os
from pathlib import Path
from typing import Any

# Quiet HuggingFace Hub (must be set before import)
os.environ.setdefault("HF_HUB_DISABLE_IMPLICIT_TOKEN", "1")
os.environ.setdefault("HF_HUB_VERBOSITY", "error")

from huggingface_hub import snapshot_download
from huggingface_hub.utils import LocalEntryNotFoundError

from ...errors import ProviderError
from ...log import get_logger
from ..base import AdapterDescriptor, ConfigField, LatencyClass, TranslationProvider, TranslationResult

logger = get_logger("opus-mt")

# (source, target) -> HuggingFace repo id
OPUS_MT_MODELS = {
    ("zh", "en"): "Helsinki-NLP/opus-mt-zh-en",
    ("en", "zh"): "Helsinki-NLP/opus-mt-en-zh",
    ("ja", "en"): "Helsinki-NLP/opus-mt-ja-en",
    ("ko", "en"): "Helsinki-NLP/opus-mt-ko-en",
    ("en", "fr"): "Helsinki-NLP/opus-mt-en-fr",
    ("en", "de"): "Helsinki-NLP/opus-mt-en-de",
    ("en", "es"): "Helsinki-NLP/opus-mt-en-es",
    ("en", "it"): "Helsinki-NLP/opus-mt-en-it",
    ("en", "ru"): "Helsinki-NLP/opus-mt-en-ru",
    ("fr", "en"): "Helsinki-NLP/opus-mt-fr-en",
    ("de", "en"): "Helsinki-NLP/opus-mt-de-en",
    ("es", "en"): "Helsinki-NLP/opus-mt-es-en",
    ("it", "en"): "Helsinki-NLP/opus-mt-it-en",
    ("ru", "en"): "Helsinki-NLP/opus-mt-ru-en",
}

# Approximate download size per language pair
OPUS_MT_MODEL_SIZE_MB = 300

DESCRIPTOR = AdapterDescriptor(
    id="opus-mt",
    name="OPUS-MT",
    description="Helsinki-NLP machine translation models, run locally",
    config_schema={
        "allow_download": ConfigField(default=True, label="Download missing models"),
        "num_beams": ConfigField(default=5, label="Beam size"),
        "max_length": ConfigField(default=256, label="Max output tokens"),
    },
    requires_network=False,
    latency_class=LatencyClass.MEDIUM,
    supports_streaming=False,
)


class OpusMTProvider(TranslationProvider):
    """Translates text with MarianMT models through ``transformers``.

    One model is loaded per language pair, on first use.
    """

    def __init__(self, config=None, descriptor=None):
        super().__init__(config, descriptor)
        self._models: dict[tuple[str, str], tuple[Any, Any]] = {}

    @staticmethod
    def supported_pairs() -> list[tuple[str, str]]:
        return list(OPUS_MT_MODELS)

    def is_available(self) -> bool:
        return super().is_available() and importlib.util.find_spec("transformers") is not None

    def _get_model_path(self, repo_id: str) -> Path:
        """Get the local model directory, downloading it if allowed.

        Raises:
            ProviderError: If the model is not cached and downloads are off.
        """
        try:
            return Path(snapshot_download(repo_id=repo_id, local_files_only=True))
        except LocalEntryNotFoundError:
            if not self._config.get("allow_download", True):
                raise ProviderError(f"model {repo_id} is not downloaded") from None

        logger.info("downloading opus-mt model", repo=repo_id, size=f"~{OPUS_MT_MODEL_SIZE_MB}MB")
        return Path(snapshot_download(repo_id=repo_id))

    def _load(self, pair: tuple[str, str]) -> tuple[Any, Any]:
        if pair in self._models:
            return self._models[pair]

        from transformers import MarianMTModel, MarianTokenizer

        model_path = self._get_model_path(OPUS_MT_MODELS[pair])
        logger.info("loading opus-mt", pair=f"{pair[0]}->{pair[1]}")
        tokenizer = MarianTokenizer.from_pretrained(str(model_path))
        model = MarianMTModel.from_pretrained(str(model_path))
        self._models[pair] = (tokenizer, model)
        logger.info("opus-mt ready", pair=f"{pair[0]}->{pair[1]}")
        return tokenizer, model

    def _translate_sync(self, text: str, pair: tuple[str, str]) -> str:
        tokenizer, model = self._load(pair)
        inputs = tokenizer(text, return_tensors="pt", padding=True, truncation=True)
        outputs = model.generate(
            **inputs,
            max_length=int(self._config.get("max_length", 256)),
            num_beams=int(self._config.get("num_beams", 5)),
        )
        return tokenizer.decode(outputs[0], skip_special_tokens=True).strip()

    async def translate(self, text: str, source_lang: str, target_lang: str) -> TranslationResult:
        if not text.strip():
            return TranslationResult(success=False, error="empty text")

        # Traditional Chinese shares the zh models
        pair = (source_lang.split("-")[0], target_lang.split("-")[0])
        if pair not in OPUS_MT_MODELS:
            return TranslationResult(
                success=False,
                error=f"language pair {source_lang} -> {target_lang} is not supported",
            )

        translated = await asyncio.to_thread(self._translate_sync, text, pair)
        if not translated:
            return TranslationResult(success=False, error="empty response")
        return TranslationResult(success=True, text=translated)

    def is_loaded(self, source_lang: str, target_lang: str) -> bool:
        """Check if the model for a language pair is loaded."""
        return (source_lang, target_lang) in self._models
