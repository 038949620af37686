"""Shared fakes and fixtures"""

import io
import json
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from PIL import Image

from aac_image_pipeline.engine import PipelineEngine
from aac_image_pipeline.exceptions import APIError, DatabaseError
from aac_image_pipeline.models import PENDING_IMAGE_URL, GeneratedImage, PipelineConfig, WorkItem
from aac_image_pipeline.output_manager import OutputManager

CATEGORY_ID = "11111111-1111-1111-1111-111111111111"


def make_image_bytes(fmt: str = "PNG", size=(4, 4)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, (255, 200, 0)).save(buf, format=fmt)
    return buf.getvalue()


class FakeImageClient:
    """Returns queued outcomes; an Exception instance is raised instead of returned"""

    def __init__(self, outcomes: Optional[List] = None, default=None):
        self.outcomes = list(outcomes or [])
        self.default = default if default is not None else GeneratedImage(data=make_image_bytes())
        self.calls = []

    def generate_image(self, prompt, image_path=None, log_prefix=""):
        self.calls.append({"prompt": prompt, "image_path": image_path})
        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeCardRepository:
    def __init__(self, fail_inserts: int = 0, fail_updates: int = 0):
        self.cards: Dict[str, dict] = {}
        self.insert_calls = 0
        self.update_calls = []
        self.fail_inserts = fail_inserts
        self.fail_updates = fail_updates

    def insert_card(self, item: WorkItem) -> str:
        self.insert_calls += 1
        if self.fail_inserts:
            self.fail_inserts -= 1
            raise DatabaseError("insert failed")
        card_id = f"card-{len(self.cards) + 1}"
        self.cards[card_id] = {
            "id": card_id,
            "category_id": item.category_id,
            "text": item.keyword,
            "image_url": PENDING_IMAGE_URL,
            "tags": list(item.tags),
            "order_index": item.order_index,
            "is_active": False,
        }
        return card_id

    def activate_card(self, card_id: str, image_url: str):
        self.update_calls.append(card_id)
        if self.fail_updates:
            self.fail_updates -= 1
            raise DatabaseError("update failed")
        self.cards[card_id]["image_url"] = image_url
        self.cards[card_id]["is_active"] = True


class FakeUploader:
    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.uploads = []

    def upload_image(self, card_id: str, data: bytes, content_type: str = "image/png") -> str:
        key = f"{card_id}.png"
        self.uploads.append(key)
        self.objects[key] = data
        return f"https://example.supabase.co/storage/v1/object/public/emotion-emojis/{key}"


class RecordingSleep:
    def __init__(self):
        self.calls: List[float] = []

    def __call__(self, seconds: float):
        self.calls.append(seconds)


@pytest.fixture
def config(tmp_path) -> PipelineConfig:
    return PipelineConfig(
        genai_api_key="test-genai-key",
        supabase_url="https://example.supabase.co",
        supabase_key="test-service-key",
        output_dir=tmp_path / "generated-images",
    )


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_engine(config, sleep):
    def _make(image_client=None, repository=None, uploader=None):
        return PipelineEngine(
            config=config,
            image_client=image_client or FakeImageClient(),
            card_repository=repository or FakeCardRepository(),
            uploader=uploader or FakeUploader(),
            output_manager=OutputManager(config.output_dir),
            sleep=sleep,
        )
    return _make


@pytest.fixture
def write_input(tmp_path):
    def _write(data, name="prompts.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data) if not isinstance(data, str) else data, encoding="utf-8")
        return path
    return _write


def no_image_error() -> APIError:
    return APIError("No image generated in response")
