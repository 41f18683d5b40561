"""transpane - screen and text translation core.

Chains capture, OCR and machine translation. Each stage is served by one
of several interchangeable backends, chosen by priority and privacy mode
with automatic fallback.
"""

__version__ = "0.1.0"

from .config import Config
from .pipeline import Pipeline, PipelineResult
from .privacy import PrivacyMode
from .session import Session

__all__ = ["Config", "Pipeline", "PipelineResult", "PrivacyMode", "Session", "__version__"]
