"""
AAC master categories - seeds the category table and exports the
name -> id mapping used to fill category_id in prompt files

Usage:
    python -m aac_image_pipeline.categories insert
    python -m aac_image_pipeline.categories fetch -o scripts/category-uuids.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .card_repository import CardRepository
from .cli import setup_logging
from .config import ConfigManager
from .exceptions import DatabaseError, GeneratorError

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "category-uuids.json"

DEFAULT_CATEGORIES: List[Dict[str, Any]] = [
    {"name": "food", "display_name": "Food", "icon": "🍽️", "order_index": 0},
    {"name": "activities", "display_name": "Activities", "icon": "⚽", "order_index": 1},
    {"name": "emotions", "display_name": "Emotions", "icon": "😊", "order_index": 2},
    {"name": "people", "display_name": "People", "icon": "👥", "order_index": 3},
    {"name": "objects", "display_name": "Objects", "icon": "📦", "order_index": 4},
]


def insert_categories(
    repository: CardRepository,
    categories: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, str]:
    """
    Upsert categories by name

    Returns:
        category name -> id
    """
    results = {}
    for category in DEFAULT_CATEGORIES if categories is None else categories:
        logger.info(f"📦 Inserting category: {category['display_name']}...")
        results[category["name"]] = repository.upsert_category(category)
        logger.info(f"   ✅ {category['display_name']}: {results[category['name']]}")
    return results


def fetch_category_ids(repository: CardRepository) -> Dict[str, str]:
    """
    Read the existing categories

    Raises:
        DatabaseError: the table holds no categories
    """
    rows = repository.list_categories()
    if not rows:
        raise DatabaseError("No categories found. Please insert them first.")

    mapping = {}
    for row in rows:
        mapping[row["name"]] = str(row["id"])
        logger.info(f"✅ {row.get('display_name', row['name'])} ({row.get('icon', '')}): {row['id']}")
    return mapping


def save_category_ids(mapping: Dict[str, str], path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(mapping, f, ensure_ascii=False, indent=2)
    logger.info(f"💾 Category UUIDs saved to: {path}")
    return path


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="aac-categories",
        description="Seed AAC master categories and export their ids",
    )
    parser.add_argument("command", choices=["insert", "fetch"], help="insert: upsert defaults; fetch: read existing")
    parser.add_argument("-o", "--output", default=DEFAULT_OUTPUT, help=f"mapping file (default: {DEFAULT_OUTPUT})")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="log level (default: INFO)",
    )
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level)

    try:
        config = ConfigManager().load_config()
        repository = CardRepository(
            supabase_url=config.supabase_url,
            api_key=config.supabase_key,
            cards_table=config.cards_table,
            categories_table=config.categories_table,
            timeout=config.request_timeout,
        )

        if args.command == "insert":
            mapping = insert_categories(repository)
        else:
            mapping = fetch_category_ids(repository)

        save_category_ids(mapping, Path(args.output))
        print(json.dumps(mapping, ensure_ascii=False, indent=2))
        return 0

    except GeneratorError as e:
        logger.error(f"❌ Error: {e}")
        return 1

    except Exception as e:
        logger.exception(f"Unhandled error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
