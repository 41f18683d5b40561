"""DeepL translation provider."""

from ...errors import ProviderError
from ..base import AdapterDescriptor, ConfigField, LatencyClass, TranslationProvider, TranslationResult
from ..http import HttpAdapter

FREE_API_URL = "https://api-free.deepl.com/v2"
PRO_API_URL = "https://api.deepl.com/v2"

DESCRIPTOR = AdapterDescriptor(
    id="deepl",
    name="DeepL",
    description="DeepL translation API",
    config_schema={
        "api_key": ConfigField(required=True, label="API key", secret=True),
        "use_free_api": ConfigField(default=True, label="Use the free API (keys ending in :fx)"),
        "formality": ConfigField(default="default", label="Formality"),
        "timeout": ConfigField(default=15.0, label="Timeout (s)"),
    },
    requires_network=True,
    latency_class=LatencyClass.FAST,
    supports_streaming=False,
)

# DeepL does not distinguish simplified and traditional Chinese, and
# wants a regional variant for some target languages.
_SOURCE_CODES = {"zh-TW": "ZH"}
_TARGET_CODES = {"zh-TW": "ZH", "en": "EN-US", "pt": "PT-BR"}


def deepl_language_code(code: str, is_target: bool = False) -> str | None:
    """Convert a language code to DeepL's format; None for auto-detect."""
    if code == "auto":
        return None
    mapping = _TARGET_CODES if is_target else _SOURCE_CODES
    return mapping.get(code, code.upper())


class DeepLProvider(HttpAdapter, TranslationProvider):
    """Translation through the DeepL REST API."""

    @property
    def base_url(self) -> str:
        api_key = str(self._config.get("api_key") or "")
        if self._config.get("use_free_api") or api_key.endswith(":fx"):
            return FREE_API_URL
        return PRO_API_URL

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"DeepL-Auth-Key {self._config.get('api_key', '')}"}

    async def translate(self, text: str, source_lang: str, target_lang: str) -> TranslationResult:
        if not text.strip():
            return TranslationResult(success=False, error="empty text")

        form = {"text": text, "target_lang": deepl_language_code(target_lang, is_target=True)}
        source = deepl_language_code(source_lang)
        if source:
            form["source_lang"] = source
        formality = self._config.get("formality")
        if formality and formality != "default":
            form["formality"] = formality

        try:
            data = await self._post_form(f"{self.base_url}/translate", form, headers=self._headers())
        except ProviderError as e:
            # 456 is DeepL's quota-exceeded status
            if str(e).startswith("HTTP 456"):
                raise ProviderError(f"quota exceeded: {e}") from e
            raise

        translations = data.get("translations") or []
        translated = translations[0].get("text") if translations else None
        if not translated:
            return TranslationResult(success=False, error="empty response")
        return TranslationResult(success=True, text=translated)

    async def get_usage(self) -> dict[str, int]:
        """Characters used and the account limit."""
        response = await self._request("GET", f"{self.base_url}/usage", headers=self._headers())
        data = response.json()
        used = int(data.get("character_count", 0))
        limit = int(data.get("character_limit", 0))
        return {"used": used, "limit": limit, "remaining": limit - used}
