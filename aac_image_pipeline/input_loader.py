"""
Input loader - reads and validates the batch prompt file

Expected format::

    {
      "batch_1": [
        {
          "keyword": "happy",
          "prompt": "Create a warm, child-friendly image...",
          "category_id": "uuid-from-aac_master_categories",
          "image_path": "./images/base.png",
          "order_index": 0,
          "tags": ["emotion", "positive"]
        }
      ]
    }

Validation collects every problem before reporting, so a file with several
mistakes can be fixed in one pass.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import InputSyntaxError, InputValidationError, PathNotFoundError
from .models import Batch, WorkItem

logger = logging.getLogger(__name__)

BATCH_KEY_PATTERN = re.compile(r"^batch_(\d+)$")
REQUIRED_FIELDS = ("keyword", "prompt", "category_id")


def resolve_path(path_str: str, base_dir: Optional[Path] = None) -> Path:
    """Resolve a path, relative paths against base_dir (default: cwd)"""
    p = Path(path_str)
    if p.is_absolute():
        return p
    return (base_dir or Path.cwd()) / p


def batch_keys(data: Dict[str, Any]) -> List[str]:
    """Return the batch keys sorted by their numeric suffix"""
    keys = [k for k in data if BATCH_KEY_PATTERN.match(k)]
    return sorted(keys, key=lambda k: int(BATCH_KEY_PATTERN.match(k).group(1)))


def _validate_item(
    item: Any,
    label: str,
    base_dir: Optional[Path],
) -> List[str]:
    if not isinstance(item, dict):
        return [f"{label} must be an object"]

    errors = []
    for name in REQUIRED_FIELDS:
        value = item.get(name)
        if value is None or value == "":
            errors.append(f"{label} is missing '{name}' field")
        elif not isinstance(value, str):
            suffix = " (UUID)" if name == "category_id" else ""
            errors.append(f"{label}.{name} must be a string{suffix}")
        elif not value.strip():
            errors.append(f"{label} is missing '{name}' field")

    image_path = item.get("image_path")
    if image_path:
        if not isinstance(image_path, str):
            errors.append(f"{label}.image_path must be a string")
        elif not resolve_path(image_path, base_dir).is_file():
            errors.append(f"{label}.image_path file not found: {image_path}")

    if "tags" in item and item["tags"] is not None:
        tags = item["tags"]
        if not isinstance(tags, list):
            errors.append(f"{label}.tags must be an array")
        elif not all(isinstance(t, str) for t in tags):
            errors.append(f"{label}.tags must only contain strings")

    if "order_index" in item and item["order_index"] is not None:
        order_index = item["order_index"]
        if isinstance(order_index, bool) or not isinstance(order_index, int):
            errors.append(f"{label}.order_index must be an integer")

    return errors


def validate_input(data: Any, base_dir: Optional[Path] = None) -> List[str]:
    """
    Validate the parsed input structure

    Args:
        data: parsed JSON value
        base_dir: directory relative image paths are resolved against

    Returns:
        list of error messages, empty when valid
    """
    if not isinstance(data, dict):
        return ["JSON must be an object"]

    keys = batch_keys(data)
    if not keys:
        return ["No batches found. Batches should be named batch_1, batch_2, etc."]

    for key in data:
        if key not in keys:
            logger.warning(f"⚠️ Ignoring key that is not a batch: {key}")

    errors = []
    for name in keys:
        batch = data[name]
        if not isinstance(batch, list):
            errors.append(f"{name} must be an array")
            continue
        if not batch:
            errors.append(f"{name} is empty")
            continue
        for index, item in enumerate(batch):
            errors.extend(_validate_item(item, f"{name}[{index}]", base_dir))

    return errors


def parse_batches(data: Dict[str, Any]) -> List[Batch]:
    """Build batches from already validated data, in numeric order"""
    return [
        Batch(
            name=name,
            number=int(BATCH_KEY_PATTERN.match(name).group(1)),
            items=[WorkItem.from_dict(item) for item in data[name]],
        )
        for name in batch_keys(data)
    ]


def load_input(path: Path, base_dir: Optional[Path] = None) -> List[Batch]:
    """
    Load and validate the batch prompt file

    Args:
        path: JSON file path
        base_dir: directory relative image paths are resolved against (default: cwd)

    Returns:
        batches sorted by numeric suffix

    Raises:
        PathNotFoundError: the file does not exist
        InputSyntaxError: the file is not valid JSON
        InputValidationError: the structure is invalid
    """
    path = resolve_path(str(path), base_dir)
    if not path.is_file():
        raise PathNotFoundError(str(path), f"File not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InputSyntaxError(f"Invalid JSON syntax: {e}", path=str(path))

    errors = validate_input(data, base_dir)
    if errors:
        raise InputValidationError(errors)

    return parse_batches(data)
