"""Error types and user-facing error messages."""

import re
from collections import Counter
from collections.abc import Sequence
from enum import Enum


class TranspaneError(Exception):
    """Base class for all errors raised by transpane."""


class CaptureFailure(TranspaneError):
    """The capture layer could not produce an image."""


class RecognitionFailure(TranspaneError):
    """Every eligible OCR engine failed, or none was eligible."""


class TranslationFailure(TranspaneError):
    """Every eligible translation provider failed, or none was eligible."""


class ConfigurationError(TranspaneError):
    """An adapter lacks required configuration fields."""

    def __init__(self, adapter_id: str, missing: list[str]):
        self.adapter_id = adapter_id
        self.missing = missing
        super().__init__(f"{adapter_id} is missing configuration: {', '.join(missing)}")


class ProviderError(TranspaneError):
    """A single backend call failed."""


class NetworkTimeout(ProviderError):
    """A single backend call exceeded its own timeout."""


class ErrorKind(Enum):
    """Coarse classification of a raw error message."""

    NETWORK = "network"
    API_KEY = "api_key"
    API_QUOTA = "api_quota"
    TIMEOUT = "timeout"
    CONFIG = "config"
    OCR = "ocr"
    UNKNOWN = "unknown"


# Checked in order; first match wins
_ERROR_PATTERNS: list[tuple[ErrorKind, list[str]]] = [
    (ErrorKind.TIMEOUT, [r"timeout", r"timed?\s*out"]),
    (ErrorKind.NETWORK, [
        r"failed to fetch", r"network\s*error", r"connect(ion)?\s*(error|refused)",
        r"econnrefused", r"enotfound", r"econnreset", r"unable to connect",
        r"name or service not known",
    ]),
    (ErrorKind.API_KEY, [
        r"invalid.*api.*key", r"api.*key.*invalid", r"unauthorized",
        r"authentication", r"\b401\b", r"\b403\b",
    ]),
    (ErrorKind.API_QUOTA, [r"quota", r"rate.*limit", r"too many requests", r"\b429\b", r"\b456\b"]),
    (ErrorKind.CONFIG, [r"missing configuration", r"endpoint", r"url.*invalid", r"not configured"]),
]

_MESSAGES = {
    ErrorKind.NETWORK: ("Connection failed", "could not reach the service"),
    ErrorKind.API_KEY: ("Invalid API key", "the API key is missing or rejected"),
    ErrorKind.API_QUOTA: ("Rate limited", "the service quota is exhausted"),
    ErrorKind.TIMEOUT: ("Request timed out", "the service took too long to respond"),
    ErrorKind.CONFIG: ("Configuration error", "check the backend settings"),
    ErrorKind.OCR: ("Recognition failed", "no text could be recognized"),
    ErrorKind.UNKNOWN: ("Operation failed", "an unexpected error occurred"),
}

# Title prefix for errors raised in a given pipeline step
_CONTEXT_PREFIX = {
    "ocr": "OCR",
    "capture": "Capture",
}


def classify_error(error: BaseException | str) -> ErrorKind:
    """Classify an error by matching its message against known patterns."""
    if isinstance(error, NetworkTimeout):
        return ErrorKind.TIMEOUT
    if isinstance(error, ConfigurationError):
        return ErrorKind.CONFIG
    message = str(error)
    for kind, patterns in _ERROR_PATTERNS:
        for pattern in patterns:
            if re.search(pattern, message, re.IGNORECASE):
                return kind
    if isinstance(error, RecognitionFailure):
        return ErrorKind.OCR
    return ErrorKind.UNKNOWN


def short_error_message(error: BaseException | str, context: str | None = None) -> str:
    """Build a short message suitable for an overlay or notification.

    Args:
        error: The raw error or error message.
        context: Optional pipeline step ("capture", "ocr", "translation").

    Returns:
        A one-line message such as ``"Request timed out: the service took
        too long to respond"``.
    """
    kind = classify_error(error)
    title, detail = _MESSAGES[kind]
    prefix = _CONTEXT_PREFIX.get(context or "")
    if prefix and kind is not ErrorKind.OCR:
        title = f"{prefix} {title[0].lower()}{title[1:]}"
    return f"{title}: {detail}"


def dominant_error(messages: Sequence[str]) -> str | None:
    """Pick the message that best explains a series of backend failures.

    The most frequent error kind wins, with ties going to the kind seen
    last. Unclassified messages are only picked when nothing else matched.
    """
    counts: Counter[ErrorKind] = Counter()
    latest: dict[ErrorKind, tuple[int, str]] = {}
    for index, message in enumerate(messages):
        kind = classify_error(message)
        counts[kind] += 1
        latest[kind] = (index, message)
    if not counts:
        return None

    kinds = [kind for kind in counts if kind is not ErrorKind.UNKNOWN] or list(counts)
    best = max(kinds, key=lambda kind: (counts[kind], latest[kind][0]))
    return latest[best][1]


MAX_MESSAGE_LENGTH = 120


def sanitize_message(message: str, limit: int = MAX_MESSAGE_LENGTH) -> str:
    """Keep the first line of a message and cap its length."""
    first_line = (message or "").strip().splitlines()[0] if (message or "").strip() else ""
    if len(first_line) > limit:
        return first_line[: limit - 3].rstrip() + "..."
    return first_line
