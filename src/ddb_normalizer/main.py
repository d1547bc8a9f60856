"""
D&D Beyond Normalizer MCP Server
Converts D&D Beyond characters into validated, normalized character data.
"""

import json
import logging
from typing import Annotated, Literal

from fastmcp import FastMCP
from pydantic import Field

from .config import load_settings
from .importers import ConversionResult, ImportError, fetch_character, read_character_file
from .pipeline import CharacterNormalizer

logger = logging.getLogger("ddb-normalizer")

settings = load_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
)

logger.debug(f"🔧 Settings: API {settings.api_base_url}, timeout {settings.timeout}s")

mcp = FastMCP(
    name="ddb-normalizer"
)

OutputFormat = Literal["report", "json"]


def _normalizer(include_dnd5e_rules: bool | None) -> CharacterNormalizer:
    options = settings.pipeline_options()
    if include_dnd5e_rules is not None:
        options = options.model_copy(update={"include_dnd5e_rules": include_dnd5e_rules})
    return CharacterNormalizer(options)


def _render(result: ConversionResult, output_format: OutputFormat) -> str:
    if output_format == "json":
        return json.dumps(result.model_dump(mode="json"), indent=2)
    return result.build_report().format()


@mcp.tool
def convert_character_file(
    file_path: Annotated[str, Field(description="Path to a D&D Beyond character JSON export")],
    include_dnd5e_rules: Annotated[bool | None, Field(
        description="Apply the D&D 5e rule pack during validation (defaults to the server setting)"
    )] = None,
    output_format: Annotated[OutputFormat, Field(
        description='"report" for a readable summary, "json" for the full normalized data'
    )] = "report",
) -> str:
    """Normalize and validate a character from a local D&D Beyond JSON file.

    Returns the conversion report with weighted accuracy, per-section
    validation status, warnings and improvement suggestions.
    """
    try:
        raw = read_character_file(file_path)
    except ImportError as e:
        return f"❌ {e}"
    result = _normalizer(include_dnd5e_rules).convert(raw, source="file")
    return _render(result, output_format)


@mcp.tool
async def convert_character_url(
    url_or_id: Annotated[str, Field(
        description="D&D Beyond character URL (e.g. https://www.dndbeyond.com/characters/12345678) or numeric ID"
    )],
    include_dnd5e_rules: Annotated[bool | None, Field(
        description="Apply the D&D 5e rule pack during validation (defaults to the server setting)"
    )] = None,
    output_format: Annotated[OutputFormat, Field(
        description='"report" for a readable summary, "json" for the full normalized data'
    )] = "report",
) -> str:
    """Fetch a public D&D Beyond character, then normalize and validate it.

    The character must be set to Public on D&D Beyond.
    """
    try:
        raw = await fetch_character(url_or_id, base_url=settings.api_base_url, timeout=settings.timeout)
    except ImportError as e:
        return f"❌ {e}"
    result = _normalizer(include_dnd5e_rules).convert(raw, source="url")
    return _render(result, output_format)


def main() -> None:
    """Main entry point for the D&D Beyond Normalizer MCP Server."""
    mcp.run()

if __name__ == "__main__":
    main()
