"""Privacy modes and the features each one permits."""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .log import get_logger

logger = get_logger("privacy")


class PrivacyMode(Enum):
    """Privacy mode, queried once at the start of every pipeline run."""

    STANDARD = "standard"  # everything enabled
    SECURE = "secure"  # nothing recorded
    OFFLINE = "offline"  # no network requests
    STRICT = "strict"  # offline and nothing recorded

    @classmethod
    def parse(cls, value: "str | PrivacyMode | None") -> "PrivacyMode":
        """Parse a mode name; unknown names fall back to standard."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            logger.warning("unknown privacy mode, using standard", mode=value)
            return cls.STANDARD


@dataclass(frozen=True)
class PrivacyFeatures:
    """What a privacy mode allows."""

    network: bool
    history: bool
    cache: bool


_FEATURES = {
    PrivacyMode.STANDARD: PrivacyFeatures(network=True, history=True, cache=True),
    PrivacyMode.SECURE: PrivacyFeatures(network=True, history=False, cache=False),
    PrivacyMode.OFFLINE: PrivacyFeatures(network=False, history=True, cache=True),
    PrivacyMode.STRICT: PrivacyFeatures(network=False, history=False, cache=False),
}


def allows_network(mode: PrivacyMode) -> bool:
    return _FEATURES[mode].network


def allows_history(mode: PrivacyMode) -> bool:
    return _FEATURES[mode].history


def allows_cache(mode: PrivacyMode) -> bool:
    return _FEATURES[mode].cache


class PrivacyProvider(Protocol):
    """Source of the current privacy mode."""

    def get_mode(self) -> PrivacyMode: ...


class StaticPrivacy:
    """Privacy provider holding a mode that can be switched at runtime."""

    def __init__(self, mode: PrivacyMode | str = PrivacyMode.STANDARD):
        self._mode = PrivacyMode.parse(mode)

    def get_mode(self) -> PrivacyMode:
        return self._mode

    def set_mode(self, mode: PrivacyMode | str) -> None:
        self._mode = PrivacyMode.parse(mode)
        logger.info("privacy mode changed", mode=self._mode.value)
