"""Shared fixtures."""

import base64
import io

import pytest
from PIL import Image
from structlog.testing import capture_logs


@pytest.fixture(autouse=True)
def captured_logs():
    """Keep log output out of the test report and expose it to assertions."""
    with capture_logs() as logs:
        yield logs


@pytest.fixture
def png_image():
    """A small white PNG as a bare base64 string."""
    buffer = io.BytesIO()
    Image.new("RGB", (40, 20), "white").save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


@pytest.fixture
def png_file(tmp_path):
    """A 100x50 PNG on disk with a red left half."""
    image = Image.new("RGB", (100, 50), "white")
    image.paste((255, 0, 0), (0, 0, 50, 50))
    path = tmp_path / "frame.png"
    image.save(path)
    return path
