"""Translation cache with optional fuzzy key matching."""

import re
from collections import OrderedDict
from difflib import SequenceMatcher

# Translation cache defaults
DEFAULT_CACHE_SIZE = 200            # Max cached translations
DEFAULT_SIMILARITY_THRESHOLD = 0.9  # Fuzzy match threshold for cache lookup

_DIGITS = re.compile(r"\d+")


def text_similarity(a: str, b: str) -> float:
    """Calculate similarity ratio between two strings (0.0 to 1.0)."""
    if not a or not b:
        return 0.0
    return SequenceMatcher(None, a, b).ratio()


def same_numbers(a: str, b: str) -> bool:
    """Whether both strings contain the same sequence of numbers."""
    return _DIGITS.findall(a) == _DIGITS.findall(b)


class TranslationCache:
    """LRU cache for translations, keyed by language pair and source text.

    Exact lookups only match the same text. Fuzzy lookups, meant for OCR
    output, fall back to the most similar cached text of the same language
    pair so noise of a character or two still hits. Texts whose numbers
    differ never match fuzzily.
    """

    def __init__(
        self,
        max_size: int = DEFAULT_CACHE_SIZE,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    ):
        """Initialize the cache.

        Args:
            max_size: Maximum number of entries to store.
            similarity_threshold: Minimum similarity ratio for fuzzy match (0.0-1.0).
        """
        self._cache: OrderedDict[tuple[str, str, str], str] = OrderedDict()
        self._max_size = max_size
        self._similarity_threshold = similarity_threshold

    def __len__(self) -> int:
        return len(self._cache)

    def get(self, text: str, source_lang: str, target_lang: str, fuzzy: bool = False) -> str | None:
        """Get a cached translation.

        Args:
            text: Source text to look up.
            source_lang: Source language code.
            target_lang: Target language code.
            fuzzy: Also accept a similar cached text when there is no exact match.

        Returns:
            Cached translation if found, None otherwise.
        """
        key = (source_lang, target_lang, text)
        if key in self._cache:
            self._cache.move_to_end(key)
            return self._cache[key]
        if not fuzzy:
            return None

        best_key = None
        best_ratio = self._similarity_threshold
        for cached_key in self._cache:
            if cached_key[:2] != key[:2] or not same_numbers(text, cached_key[2]):
                continue
            ratio = text_similarity(text, cached_key[2])
            if ratio >= best_ratio:
                best_key, best_ratio = cached_key, ratio

        if best_key is None:
            return None
        self._cache.move_to_end(best_key)
        return self._cache[best_key]

    def put(self, text: str, source_lang: str, target_lang: str, translation: str) -> None:
        """Store a translation, evicting the least recently used entry when full."""
        if self._max_size <= 0:
            return
        key = (source_lang, target_lang, text)
        if key in self._cache:
            self._cache.move_to_end(key)
        elif len(self._cache) >= self._max_size:
            self._cache.popitem(last=False)
        self._cache[key] = translation

    def clear(self) -> None:
        self._cache.clear()
