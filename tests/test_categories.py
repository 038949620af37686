import json

import pytest

from aac_image_pipeline import categories
from aac_image_pipeline.categories import (
    DEFAULT_CATEGORIES,
    fetch_category_ids,
    insert_categories,
    save_category_ids,
)
from aac_image_pipeline.exceptions import DatabaseError


class FakeCategoryRepository:
    def __init__(self, rows=None):
        self.rows = list(rows or [])
        self.upserts = []

    def upsert_category(self, category):
        self.upserts.append(category["name"])
        return f"id-{category['name']}"

    def list_categories(self):
        return self.rows


def test_insert_defaults():
    repository = FakeCategoryRepository()

    mapping = insert_categories(repository)

    assert repository.upserts == ["food", "activities", "emotions", "people", "objects"]
    assert mapping["emotions"] == "id-emotions"
    assert [c["order_index"] for c in DEFAULT_CATEGORIES] == [0, 1, 2, 3, 4]


def test_fetch_existing_ids():
    repository = FakeCategoryRepository(rows=[
        {"name": "food", "id": "a", "display_name": "Food", "icon": "🍽️"},
        {"name": "people", "id": "b"},
    ])

    assert fetch_category_ids(repository) == {"food": "a", "people": "b"}


def test_fetch_with_no_categories_fails():
    with pytest.raises(DatabaseError, match="No categories found"):
        fetch_category_ids(FakeCategoryRepository())


def test_save_mapping(tmp_path):
    path = save_category_ids({"food": "a"}, tmp_path / "scripts" / "category-uuids.json")

    assert json.loads(path.read_text(encoding="utf-8")) == {"food": "a"}


def test_main_reports_configuration_errors(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("GOOGLE_GENAI_API_KEY", "NEXT_PUBLIC_SUPABASE_URL", "SUPABASE_URL"):
        monkeypatch.delenv(name, raising=False)

    assert categories.main(["fetch", "-o", str(tmp_path / "out.json")]) == 1
    assert not (tmp_path / "out.json").exists()


def test_insert_explicit_empty_list_seeds_nothing():
    repository = FakeCategoryRepository()

    assert insert_categories(repository, []) == {}
    assert repository.upserts == []
