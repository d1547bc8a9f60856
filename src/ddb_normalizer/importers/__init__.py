"""
Raw character loading and conversion results.

Currently supports:
- D&D Beyond (public characters via URL, or local JSON file)
"""

from .base import ConversionResult, ImportError, ImportReport
from .dndbeyond.fetcher import fetch_character, read_character_file

__all__ = [
    "fetch_character",
    "read_character_file",
    "ConversionResult",
    "ImportReport",
    "ImportError",
]
