"""
Data models
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

# Placeholder written to image_url until the real image is attached
PENDING_IMAGE_URL = "PENDING"


class RunPhase(Enum):
    """Driver phases, in order"""
    NOT_STARTED = "not_started"
    LOADING = "loading"
    VALIDATED = "validated"
    PROCESSING = "processing"
    SUMMARIZING = "summarizing"
    DONE = "done"


@dataclass(frozen=True)
class PipelineConfig:
    """Process-wide settings, built once at startup"""
    genai_api_key: str
    supabase_url: str
    supabase_key: str
    using_service_role: bool = True
    gemini_model: str = "gemini-2.5-flash-image"
    bucket_name: str = "emotion-emojis"
    cards_table: str = "aac_master_cards"
    categories_table: str = "aac_master_categories"
    output_dir: Path = Path("./generated-images")
    max_retries: int = 3
    retry_delay: float = 2.0
    item_delay: float = 2.0
    request_timeout: float = 120.0


@dataclass
class WorkItem:
    """One prompt to turn into one card"""
    keyword: str
    prompt: str
    category_id: str
    image_path: Optional[str] = None
    order_index: int = 0
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkItem":
        return cls(
            keyword=data["keyword"],
            prompt=data["prompt"],
            category_id=data["category_id"],
            image_path=data.get("image_path") or None,
            order_index=data.get("order_index", 0),
            tags=list(data.get("tags") or []),
        )


@dataclass
class Batch:
    """Named group of work items"""
    name: str
    number: int
    items: List[WorkItem]


@dataclass
class GeneratedImage:
    """Image payload returned by the generation API"""
    data: bytes
    mime_type: str = "image/png"


@dataclass
class ItemResult:
    """Outcome of one work item"""
    success: bool
    keyword: str
    prompt: str
    batch_name: str
    attempts: int
    card_id: Optional[str] = None
    local_path: Optional[Path] = None
    public_url: Optional[str] = None
    error: Optional[str] = None
    duration_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "keyword": self.keyword,
            "prompt": self.prompt,
            "batch_name": self.batch_name,
            "attempts": self.attempts,
            "card_id": self.card_id,
            "local_path": str(self.local_path) if self.local_path else None,
            "public_url": self.public_url,
            "error": self.error,
            "duration_seconds": round(self.duration_seconds, 2),
        }


@dataclass
class BatchStats:
    """Per-batch statistics"""
    name: str
    total: int = 0
    successful: int = 0
    failed: int = 0
    duration_seconds: float = 0.0

    @property
    def success_rate(self) -> float:
        if not self.total:
            return 0.0
        return self.successful / self.total * 100

    def record(self, result: ItemResult):
        self.total += 1
        if result.success:
            self.successful += 1
        else:
            self.failed += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "duration_seconds": round(self.duration_seconds, 2),
        }


@dataclass
class RunResult:
    """Result of a whole run"""
    batches: List[BatchStats] = field(default_factory=list)
    items: List[ItemResult] = field(default_factory=list)
    duration_seconds: float = 0.0
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def successful(self) -> int:
        return sum(1 for r in self.items if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.items if not r.success)

    @property
    def success_rate(self) -> float:
        if not self.items:
            return 0.0
        return self.successful / self.total * 100

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form, used for the run log"""
        return {
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": round(self.duration_seconds, 2),
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "batches": [b.to_dict() for b in self.batches],
            "items": [r.to_dict() for r in self.items],
        }
