"""
JSON helpers used for configuration and stat sheet files.
"""

import json
import enum
from typing import Any, Optional

from game_stat.utils.logging_config import get_logger

logger = get_logger(__name__)


class EnhancedJSONEncoder(json.JSONEncoder):
    """JSON encoder that also understands enums and objects with ``to_dict``."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, enum.Enum):
            return obj.name

        to_dict = getattr(obj, "to_dict", None)
        if callable(to_dict):
            return to_dict()

        return super().default(obj)


def to_json(obj: Any, pretty: bool = False) -> str:
    """Convert an object to a JSON string."""
    indent = 4 if pretty else None
    try:
        return json.dumps(obj, cls=EnhancedJSONEncoder, indent=indent)
    except Exception as e:
        logger.error(f"Error serializing to JSON: {e}")
        raise


def from_json(json_str: str) -> Any:
    """Convert a JSON string back to Python objects."""
    try:
        return json.loads(json_str)
    except Exception as e:
        logger.error(f"Error deserializing from JSON: {e}")
        raise


def save_json(obj: Any, file_path: str, pretty: bool = True) -> None:
    """Save an object to a JSON file."""
    try:
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(obj, f, cls=EnhancedJSONEncoder, indent=4 if pretty else None)
    except Exception as e:
        logger.error(f"Error saving JSON to {file_path}: {e}")
        raise


def load_json(file_path: str) -> Optional[Any]:
    """Load an object from a JSON file."""
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except Exception as e:
        logger.error(f"Error loading JSON from {file_path}: {e}")
        raise
