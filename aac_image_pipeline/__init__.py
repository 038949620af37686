"""
AAC Image Pipeline - batch generation of AAC card images

Reads a JSON file of prompt batches, generates one image per prompt with
Gemini, uploads it to Supabase Storage and registers it as an AAC card.
"""

__version__ = "1.0.0"

from .models import (
    PENDING_IMAGE_URL,
    RunPhase,
    PipelineConfig,
    WorkItem,
    Batch,
    GeneratedImage,
    ItemResult,
    BatchStats,
    RunResult,
)
from .exceptions import (
    GeneratorError,
    ConfigurationError,
    PathNotFoundError,
    InputSyntaxError,
    InputValidationError,
    APIError,
    StorageError,
    DatabaseError,
    OutputError,
)
from .config import ConfigManager
from .input_loader import load_input, validate_input
from .template_engine import TemplateEngine
from .gemini_client import GeminiImageClient
from .card_repository import CardRepository
from .supabase_uploader import SupabaseUploader
from .output_manager import OutputManager
from .engine import PipelineEngine
from .reporter import format_summary

__all__ = [
    # Constants / Enums
    "PENDING_IMAGE_URL",
    "RunPhase",
    # Data Models
    "PipelineConfig",
    "WorkItem",
    "Batch",
    "GeneratedImage",
    "ItemResult",
    "BatchStats",
    "RunResult",
    # Exceptions
    "GeneratorError",
    "ConfigurationError",
    "PathNotFoundError",
    "InputSyntaxError",
    "InputValidationError",
    "APIError",
    "StorageError",
    "DatabaseError",
    "OutputError",
    # Components
    "ConfigManager",
    "load_input",
    "validate_input",
    "TemplateEngine",
    "GeminiImageClient",
    "CardRepository",
    "SupabaseUploader",
    "OutputManager",
    "PipelineEngine",
    "format_summary",
]
