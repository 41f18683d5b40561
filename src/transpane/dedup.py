"""Single-slot duplicate detection for captured images and recognized text."""

import hashlib


def fingerprint(image_data: str | bytes) -> str:
    """Hash an opaque image payload for duplicate detection.

    Args:
        image_data: Base64 string or raw bytes of the captured image.

    Returns:
        MD5 hex digest of the payload.
    """
    if isinstance(image_data, str):
        image_data = image_data.encode("utf-8")
    return hashlib.md5(image_data).hexdigest()


class DedupCache:
    """Remembers the last image fingerprint and the last recognized text.

    Each check compares against the single stored value and then overwrites
    it unconditionally, so a check with the same value twice in a row
    reports a duplicate the second time.
    """

    def __init__(self):
        self._last_fingerprint: str | None = None
        self._last_text: str | None = None

    def check_and_update_image(self, image_fingerprint: str) -> bool:
        """Store a fingerprint and report whether it equals the previous one."""
        unchanged = image_fingerprint == self._last_fingerprint
        self._last_fingerprint = image_fingerprint
        return unchanged

    def check_and_update_text(self, text: str) -> bool:
        """Store recognized text and report whether it equals the previous text."""
        unchanged = text == self._last_text
        self._last_text = text
        return unchanged

    def reset(self) -> None:
        """Forget both stored values."""
        self._last_fingerprint = None
        self._last_text = None
