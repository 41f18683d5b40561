"""Text helpers: language detection and output cleanup."""

import re
import unicodedata
from enum import Enum


class Language(Enum):
    """Languages known to the translation providers."""

    AUTO = "auto"
    CHINESE = "zh"
    CHINESE_TRADITIONAL = "zh-TW"
    ENGLISH = "en"
    JAPANESE = "ja"
    KOREAN = "ko"
    FRENCH = "fr"
    GERMAN = "de"
    SPANISH = "es"
    RUSSIAN = "ru"
    PORTUGUESE = "pt"
    ITALIAN = "it"

    @property
    def display_name(self) -> str:
        """Human-readable name for the language."""
        names = {
            Language.AUTO: "Auto-detect",
            Language.CHINESE: "Simplified Chinese",
            Language.CHINESE_TRADITIONAL: "Traditional Chinese",
            Language.ENGLISH: "English",
            Language.JAPANESE: "Japanese",
            Language.KOREAN: "Korean",
            Language.FRENCH: "French",
            Language.GERMAN: "German",
            Language.SPANISH: "Spanish",
            Language.RUSSIAN: "Russian",
            Language.PORTUGUESE: "Portuguese",
            Language.ITALIAN: "Italian",
        }
        return names.get(self, self.value)


def language_name(code: str) -> str:
    """Display name for a language code, or the code itself if unknown."""
    try:
        return Language(code).display_name
    except ValueError:
        return code


_HAN = re.compile(r"[一-龥]")
_KANA = re.compile(r"[぀-ヿ]")
_HANGUL = re.compile(r"[가-힯]")


def detect_language(text: str) -> str:
    """Cheap script-based language detection.

    Returns:
        'zh', 'ja', 'ko' or 'en'; 'auto' for empty text.
    """
    if not text:
        return Language.AUTO.value
    # Kana takes precedence: Japanese text routinely contains kanji
    if _KANA.search(text):
        return Language.JAPANESE.value
    if _HAN.search(text):
        return Language.CHINESE.value
    if _HANGUL.search(text):
        return Language.KOREAN.value
    return Language.ENGLISH.value


def clean_ocr_text(text: str) -> str:
    """Normalize line endings and runs of whitespace in OCR output."""
    if not text:
        return ""
    text = text.replace("\r\n", "\n")
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


_PREFIX = re.compile(r"^(翻译[：:]\s*|译文[：:]\s*|translation[：:]\s*|translated text[：:]\s*)", re.IGNORECASE)
_QUOTES = "\"'「」『』“”‘’【】"
_PAREN_NOTES = (re.compile(r"\s*（[^）]*）"), re.compile(r"\s*\([^)]*\)"))


def clean_translation_output(text: str, source: str = "") -> str:
    """Strip translator boilerplate from raw model output.

    Removes "Translation:" style prefixes, wrapping quotes and parenthetical
    notes. Returns an empty string when the cleaned output just echoes the
    source.
    """
    if not text:
        return ""

    cleaned = _PREFIX.sub("", text.strip())
    if len(cleaned) >= 2 and cleaned[0] in _QUOTES and cleaned[-1] in _QUOTES:
        cleaned = cleaned[1:-1]
    for pattern in _PAREN_NOTES:
        cleaned = pattern.sub("", cleaned)
    cleaned = cleaned.strip()

    if cleaned == source.strip():
        return ""
    return cleaned


def _is_symbolic(text: str) -> bool:
    """True when text only holds digits, whitespace, punctuation or symbols."""
    for char in text:
        if char.isdigit() or char.isspace():
            continue
        if unicodedata.category(char)[0] in ("P", "S"):
            continue
        return False
    return True


def should_translate_text(text: str) -> bool:
    """Decide whether recognized text is worth a translation call."""
    if not text or len(text) < 2:
        return False

    clean = text.strip()
    if _is_symbolic(clean):
        return False
    # Very short latin fragments are usually OCR noise
    if len(clean) < 3 and re.fullmatch(r"[a-zA-Z]+", clean):
        return False
    if re.match(r"^译[：:]", clean):
        return False
    return True
