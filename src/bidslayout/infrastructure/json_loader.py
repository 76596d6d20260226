"""
JSON file decoding.
"""

import json
from pathlib import Path
from typing import Any

from ..core.exceptions import MetadataDecodeError
from .logging_config import get_logger

logger = get_logger(__name__)


def load_json_file(file_path: Path) -> Any:
    """
    Load a UTF-8 JSON file.

    Args:
        file_path: Path to the JSON file.

    Returns:
        The decoded value (usually a dict for BIDS sidecars).

    Raises:
        MetadataDecodeError: If the file cannot be read or is not valid JSON.
    """
    try:
        with open(file_path, 'r', encoding='utf-8-sig') as f:
            content = json.load(f)
    except json.JSONDecodeError as e:
        raise MetadataDecodeError(file_path, f"invalid JSON ({e})") from e
    except (OSError, UnicodeDecodeError) as e:
        raise MetadataDecodeError(file_path, str(e)) from e

    logger.debug(f"Loaded JSON from {Path(file_path).name}")
    return content
