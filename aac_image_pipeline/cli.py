"""
Command line interface
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .card_repository import CardRepository
from .config import ConfigManager
from .engine import PipelineEngine
from .exceptions import ConfigurationError, GeneratorError, InputValidationError
from .gemini_client import GeminiImageClient
from .models import PipelineConfig
from .output_manager import OutputManager
from .reporter import RULE, format_summary
from .supabase_uploader import SupabaseUploader
from .template_engine import TemplateEngine

INPUT_FORMAT_EXAMPLE = """
JSON format:
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
"""


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None):
    """Configure logging"""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(message)s",
        datefmt="%H:%M:%S",
        handlers=handlers,
    )

    # Quieter third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("google_genai").setLevel(logging.WARNING)


def create_engine(config: PipelineConfig) -> PipelineEngine:
    """Create the pipeline engine from configuration"""
    image_client = GeminiImageClient(
        api_key=config.genai_api_key,
        model=config.gemini_model,
    )

    card_repository = CardRepository(
        supabase_url=config.supabase_url,
        api_key=config.supabase_key,
        cards_table=config.cards_table,
        categories_table=config.categories_table,
        timeout=config.request_timeout,
    )

    uploader = SupabaseUploader(
        supabase_url=config.supabase_url,
        api_key=config.supabase_key,
        bucket_name=config.bucket_name,
        timeout=config.request_timeout,
    )

    return PipelineEngine(
        config=config,
        image_client=image_client,
        card_repository=card_repository,
        uploader=uploader,
        output_manager=OutputManager(base_dir=config.output_dir),
        template_engine=TemplateEngine(),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aac-generate-images",
        description="Generate AAC card images with Gemini and store them in Supabase",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m aac_image_pipeline scripts/aac-prompts.json
  python generate_aac_images.py scripts/aac-prompts.json --log-level DEBUG
""" + INPUT_FORMAT_EXAMPLE,
    )

    parser.add_argument(
        "input",
        nargs="?",
        help="path to the batch prompts JSON file",
    )

    parser.add_argument(
        "--output-dir",
        help="local directory for generated images (default: ./generated-images)",
    )

    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="log level (default: INFO)",
    )

    return parser


def main(argv: Optional[List[str]] = None, config_manager: Optional[ConfigManager] = None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.input:
        parser.print_help()
        return 0

    setup_logging(level=args.log_level)
    logger = logging.getLogger(__name__)

    print(f"\n{RULE}\n🚀 Gemini to Supabase AAC Image Generation Pipeline\n{RULE}\n")

    try:
        config_manager = config_manager or ConfigManager()
        output_dir = Path(args.output_dir) if args.output_dir else None
        config = config_manager.load_config(output_dir=output_dir)

        engine = create_engine(config)
        result = engine.run(Path(args.input))

        print(format_summary(result))
        print("\n✨ Pipeline completed!\n")
        return 0

    except ConfigurationError as e:
        logger.error(f"❌ Configuration error: {e}")
        return 1

    except InputValidationError as e:
        logger.error(f"❌ Error: Invalid JSON structure ({len(e.errors)} problem(s))")
        for err in e.errors:
            print(f"  - {err}")
        return 1

    except GeneratorError as e:
        logger.error(f"❌ Error: {e}")
        return 1

    except Exception as e:
        logger.exception(f"Unhandled error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
