"""
D&D Beyond character normalizer - turns raw D&D Beyond character records into
validated, normalized character data, exposed as a FastMCP server.
"""

from .config import FeatureOptions, NormalizerSettings, PipelineOptions, load_settings
from .models import *
from .pipeline import CharacterNormalizer

try:
    from importlib.metadata import version as _get_version
    __version__ = _get_version("ddb-normalizer")
except Exception:
    __version__ = "0.1.0"  # Fallback if metadata unavailable
__all__ = [
    "CharacterNormalizer",
    "FeatureOptions",
    "NormalizerSettings",
    "PipelineOptions",
    "load_settings",
]
