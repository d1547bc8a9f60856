"""
Fetch and read D&D Beyond character data.

This module handles both online fetching (via the character service API)
and local file reading of D&D Beyond character JSON exports. Both paths
return the bare character record, with any ``{"data": {...}}`` envelope
removed.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import httpx

from ..base import ImportError
from .schema import DDB_API_BASE_URL, DDB_CHARACTER_URL_PATTERN

logger = logging.getLogger("ddb-normalizer")

# At least one of these must be present for a record to be recognised
RECOGNISED_FIELDS = ("name", "stats", "classes")

DEFAULT_TIMEOUT = 10.0


def extract_character_id(url_or_id: str) -> int:
    """
    Extract character ID from a D&D Beyond URL or bare numeric ID.

    Accepts:
    - Full URL: https://www.dndbeyond.com/characters/12345678
    - Builder URL: https://www.dndbeyond.com/characters/12345678/builder
    - Bare ID: "12345678"

    Args:
        url_or_id: D&D Beyond character URL or numeric ID string

    Returns:
        Character ID as integer

    Raises:
        ImportError: If the input doesn't match expected format
    """
    match = DDB_CHARACTER_URL_PATTERN.search(url_or_id)
    if match:
        return int(match.group(1))

    try:
        return int(url_or_id.strip())
    except ValueError:
        raise ImportError(
            f"Invalid D&D Beyond character URL or ID: '{url_or_id}'. "
            "Expected format: https://www.dndbeyond.com/characters/12345678 or just the numeric ID."
        ) from None


def unwrap_character(data: Any, origin: str) -> dict:
    """Strip the API envelope and check the record looks like a character.

    Args:
        data: Decoded JSON.
        origin: Where the data came from, for error messages.

    Returns:
        The character record.

    Raises:
        ImportError: If the data is not a JSON object or has none of the
            fields every D&D Beyond character carries.
    """
    if isinstance(data, dict) and isinstance(data.get("data"), dict):
        data = data["data"]

    if not isinstance(data, dict):
        raise ImportError(
            f"Invalid {origin}: expected JSON object, got {type(data).__name__}"
        )

    present = [key for key in RECOGNISED_FIELDS if key in data]
    if not present:
        raise ImportError(
            f"Unrecognized {origin}: none of the fields {', '.join(RECOGNISED_FIELDS)} found. "
            "Ensure this is a valid D&D Beyond character export."
        )
    if len(present) < len(RECOGNISED_FIELDS):
        missing = [key for key in RECOGNISED_FIELDS if key not in present]
        logger.warning(f"{origin.capitalize()} is missing {', '.join(missing)}; continuing with defaults")

    return data


async def fetch_character(
    url_or_id: str,
    base_url: str = DDB_API_BASE_URL,
    timeout: float = DEFAULT_TIMEOUT,
) -> dict:
    """
    Fetch character JSON from the D&D Beyond character service.

    Args:
        url_or_id: D&D Beyond character URL or numeric ID
        base_url: Character service endpoint
        timeout: Request timeout in seconds

    Returns:
        Raw character data as dictionary

    Raises:
        ImportError: If fetch fails, character not found, or character is private
    """
    character_id = extract_character_id(url_or_id)
    api_url = f"{base_url.rstrip('/')}/{character_id}"
    logger.debug(f"Fetching D&D Beyond character {character_id} from {api_url}")

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(api_url, timeout=timeout)

            if response.status_code == 404:
                raise ImportError(
                    f"Character not found. Check the ID or URL: {character_id}"
                )
            elif response.status_code == 403:
                raise ImportError(
                    "Character is private. Set it to Public on D&D Beyond, or use file import."
                )

            response.raise_for_status()

            data = response.json()

    except httpx.TimeoutException:
        raise ImportError(
            "D&D Beyond is not responding. Try again later or use file import."
        ) from None
    except httpx.HTTPStatusError as e:
        raise ImportError(
            f"D&D Beyond returned HTTP {e.response.status_code}: {e.response.reason_phrase}"
        ) from None
    except httpx.RequestError as e:
        raise ImportError(
            f"Failed to connect to D&D Beyond: {e}"
        ) from None
    except ValueError:
        raise ImportError("Invalid response from D&D Beyond: body is not JSON") from None

    return unwrap_character(data, "response from D&D Beyond")


def read_character_file(file_path: str) -> dict:
    """
    Read and validate a local D&D Beyond character JSON file.

    Args:
        file_path: Path to the JSON file

    Returns:
        Raw character data as dictionary

    Raises:
        ImportError: If file not found, invalid JSON, or unrecognized format
    """
    path = Path(file_path)

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ImportError(
            f"Character file not found: {file_path}"
        ) from None
    except json.JSONDecodeError as e:
        raise ImportError(
            f"Invalid JSON in character file: {e}"
        ) from None
    except OSError as e:
        raise ImportError(
            f"Failed to read character file: {e}"
        ) from None

    logger.debug(f"Read character file {path}")
    return unwrap_character(data, "character file")
