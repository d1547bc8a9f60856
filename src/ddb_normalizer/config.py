"""
Configuration for the normalizer.

Two layers:

- ``NormalizerSettings``: process-wide settings read from the environment
  (a ``.env`` file is honored through python-dotenv).
- Options models (``FeatureOptions``, ``PipelineOptions``): passed explicitly
  to each calculator at call time. There are no global toggles.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .importers.dndbeyond.schema import DDB_API_BASE_URL

logger = logging.getLogger("ddb-normalizer")

_TRUE_VALUES = {"1", "true", "yes", "on"}


class FeatureOptions(BaseModel):
    """Options for FeatureProcessor."""
    include_subclass_features: bool = True
    include_racial_traits: bool = True
    include_descriptions: bool = True
    filter_by_level: bool = True
    max_level: int = Field(default=20, ge=1, le=20)
    debug: bool = False


class PipelineOptions(BaseModel):
    """Options for a full conversion run."""
    features: FeatureOptions = Field(default_factory=FeatureOptions)
    include_dnd5e_rules: bool = Field(
        default=True,
        description="Register the D&D 5e rule pack on top of the core validation rules",
    )
    debug: bool = Field(
        default=False,
        description="Collect intermediate values from every calculator; never changes results",
    )


class NormalizerSettings(BaseModel):
    """Environment-driven settings."""
    api_base_url: str = DDB_API_BASE_URL
    timeout: float = Field(default=10.0, gt=0, description="HTTP timeout in seconds")
    log_level: str = "INFO"
    debug: bool = False
    include_dnd5e_rules: bool = True

    def pipeline_options(self) -> PipelineOptions:
        """Default pipeline options derived from these settings."""
        return PipelineOptions(
            include_dnd5e_rules=self.include_dnd5e_rules,
            debug=self.debug,
            features=FeatureOptions(debug=self.debug),
        )


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def load_settings() -> NormalizerSettings:
    """Load settings from the environment, reading ``.env`` if present.

    Recognized variables: ``DDB_API_BASE_URL``, ``DDB_TIMEOUT``,
    ``DDB_NORMALIZER_LOG_LEVEL``, ``DDB_NORMALIZER_DEBUG``,
    ``DDB_NORMALIZER_DND5E_RULES``.
    """
    if not load_dotenv():
        logger.debug(".env file not found, using process environment only")

    timeout_raw = os.getenv("DDB_TIMEOUT")
    try:
        timeout = float(timeout_raw) if timeout_raw else 10.0
    except ValueError:
        timeout = 0.0
    if timeout <= 0:
        logger.warning(f"Invalid DDB_TIMEOUT '{timeout_raw}', using 10 seconds")
        timeout = 10.0

    return NormalizerSettings(
        api_base_url=os.getenv("DDB_API_BASE_URL", DDB_API_BASE_URL),
        timeout=timeout,
        log_level=os.getenv("DDB_NORMALIZER_LOG_LEVEL", "INFO").upper(),
        debug=_env_flag("DDB_NORMALIZER_DEBUG", False),
        include_dnd5e_rules=_env_flag("DDB_NORMALIZER_DND5E_RULES", True),
    )
