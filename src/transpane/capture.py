"""Capture collaborators producing base64 images for the pipeline."""

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import numpy as np
from PIL import Image

from .imaging import encode_frame, encode_image
from .log import get_logger

logger = get_logger("capture")


@dataclass
class CaptureResult:
    """Outcome of one capture."""

    success: bool
    image_data: str | None = None
    error: str | None = None


class CaptureSource(Protocol):
    """Anything that can capture an image asynchronously."""

    async def capture(self, options: Mapping[str, Any] | None = None) -> CaptureResult: ...


class ImageFileCapture:
    """Captures by reading an image file from disk.

    Options may override the path with ``path`` and crop with ``region``
    as ``(x, y, width, height)`` in image pixels.
    """

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path is not None else None

    async def capture(self, options: Mapping[str, Any] | None = None) -> CaptureResult:
        options = options or {}
        path = options.get("path") or self.path
        if path is None:
            return CaptureResult(success=False, error="no image path given")

        try:
            data = await asyncio.to_thread(self._read, path, options.get("region"))
        except FileNotFoundError:
            return CaptureResult(success=False, error=f"image not found: {path}")
        except OSError as e:
            return CaptureResult(success=False, error=f"cannot read image {path}: {e}")

        logger.debug("image captured", path=str(path), size=len(data))
        return CaptureResult(success=True, image_data=data)

    @staticmethod
    def _read(path: str | Path, region: tuple[int, int, int, int] | None) -> str:
        with Image.open(path) as image:
            image = image.convert("RGB")
            if region:
                x, y, width, height = region
                image = image.crop((x, y, x + width, y + height))
            return encode_image(image)


CaptureFunction = Callable[[Mapping[str, Any]], Awaitable[Any]]


class CallableCapture:
    """Wraps an async function returning base64 data, a BGRA frame or a PIL image."""

    def __init__(self, function: CaptureFunction):
        self._function = function

    async def capture(self, options: Mapping[str, Any] | None = None) -> CaptureResult:
        value = await self._function(options or {})
        if isinstance(value, CaptureResult):
            return value
        if value is None:
            return CaptureResult(success=False, error="capture cancelled")
        if isinstance(value, str):
            return CaptureResult(success=True, image_data=value)
        if isinstance(value, np.ndarray):
            return CaptureResult(success=True, image_data=await asyncio.to_thread(encode_frame, value))
        if isinstance(value, Image.Image):
            data = await asyncio.to_thread(lambda: encode_image(value.convert("RGB")))
            return CaptureResult(success=True, image_data=data)
        return CaptureResult(success=False, error=f"unsupported capture value: {type(value).__name__}")
