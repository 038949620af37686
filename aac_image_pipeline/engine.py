"""
Pipeline engine - drives batches, retries and per-item work

Items run strictly one at a time. The fixed delays between items and before
retries keep the request rate under the generation API's limits.
"""

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .card_repository import CardRepository
from .gemini_client import GeminiImageClient
from .input_loader import load_input, resolve_path
from .models import (
    Batch,
    BatchStats,
    ItemResult,
    PipelineConfig,
    RunPhase,
    RunResult,
    WorkItem,
)
from .output_manager import OutputManager
from .supabase_uploader import SupabaseUploader
from .template_engine import TemplateEngine

logger = logging.getLogger(__name__)


class PipelineEngine:
    """Pipeline engine - core coordinator"""

    def __init__(
        self,
        config: PipelineConfig,
        image_client: GeminiImageClient,
        card_repository: CardRepository,
        uploader: SupabaseUploader,
        output_manager: OutputManager,
        template_engine: Optional[TemplateEngine] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.image_client = image_client
        self.card_repository = card_repository
        self.uploader = uploader
        self.output_manager = output_manager
        self.template_engine = template_engine or TemplateEngine()
        self._sleep = sleep
        self.phase = RunPhase.NOT_STARTED

    def _set_phase(self, phase: RunPhase):
        logger.debug(f"Phase: {self.phase.value} -> {phase.value}")
        self.phase = phase

    def process_item(
        self,
        item: WorkItem,
        card_id: str,
        batch_name: str,
        log_prefix: str = "",
    ) -> Tuple[Path, str]:
        """
        Generate, store and attach the image for an existing card record

        Args:
            item: work item
            card_id: id of the card record created for this item
            batch_name: owning batch (available to prompt templates)
            log_prefix: log prefix

        Returns:
            (local path, public URL)
        """
        prompt = self.template_engine.render_item(item, batch_name)
        image_path = resolve_path(item.image_path) if item.image_path else None

        preview = prompt[:80] + ("..." if len(prompt) > 80 else "")
        logger.info(f"{log_prefix} 🎨 Generating image for \"{item.keyword}\"")
        logger.info(f"{log_prefix}    Prompt: \"{preview}\"")
        if image_path:
            logger.info(f"{log_prefix}    Base image: {item.image_path}")

        image = self.image_client.generate_image(prompt, image_path=image_path, log_prefix=log_prefix)
        logger.info(f"{log_prefix} ✅ Image generated successfully")

        png_bytes = self.output_manager.to_png(image)
        local_path = self.output_manager.save_image(card_id, png_bytes)
        public_url = self.uploader.upload_image(card_id, png_bytes)
        self.card_repository.activate_card(card_id, public_url)

        return local_path, public_url

    def process_item_with_retry(
        self,
        item: WorkItem,
        batch_name: str,
        log_prefix: str = "",
    ) -> ItemResult:
        """
        Run one item with bounded retries

        The card record is inserted once and its id reused on every retry.
        When all attempts fail the record is left inactive so the failure
        stays visible in the database.
        """
        max_retries = self.config.max_retries
        start_time = time.time()
        card_id: Optional[str] = None
        last_error: Optional[Exception] = None

        for attempt in range(1, max_retries + 1):
            try:
                if attempt > 1:
                    logger.info(f"{log_prefix} 🔄 Retry attempt {attempt} of {max_retries}...")
                    self._sleep(self.config.retry_delay)

                if card_id is None:
                    card_id = self.card_repository.insert_card(item)

                local_path, public_url = self.process_item(item, card_id, batch_name, log_prefix)

                logger.info(f"{log_prefix} 🎉 Success! Card created with ID: {card_id}")
                return ItemResult(
                    success=True,
                    keyword=item.keyword,
                    prompt=item.prompt,
                    batch_name=batch_name,
                    attempts=attempt,
                    card_id=card_id,
                    local_path=local_path,
                    public_url=public_url,
                    duration_seconds=time.time() - start_time,
                )

            except Exception as e:
                last_error = e
                logger.error(f"{log_prefix} 💥 Attempt {attempt} failed: {e}")

        logger.error(f"{log_prefix} ❌ All {max_retries} attempts failed for keyword: {item.keyword}")
        if card_id:
            logger.warning(f"{log_prefix} ⚠️ Card record {card_id} remains in database as inactive")

        return ItemResult(
            success=False,
            keyword=item.keyword,
            prompt=item.prompt,
            batch_name=batch_name,
            attempts=max_retries,
            card_id=card_id,
            error=str(last_error) if last_error else "unknown error",
            duration_seconds=time.time() - start_time,
        )

    def process_batches(self, batches: List[Batch]) -> RunResult:
        """
        Process batches in numeric order, one item at a time

        Args:
            batches: validated batches

        Returns:
            run result with per-batch statistics
        """
        self._set_phase(RunPhase.PROCESSING)
        ordered = sorted(batches, key=lambda b: b.number)
        total_items = sum(len(b.items) for b in ordered)

        logger.info(f"📦 Found {len(ordered)} batch(es): {', '.join(b.name for b in ordered)}")
        logger.info(f"📝 Total items to process: {total_items}")

        result = RunResult(started_at=datetime.now())
        start_time = time.time()
        overall_index = 0

        for batch_idx, batch in enumerate(ordered):
            is_last_batch = batch_idx == len(ordered) - 1
            logger.info(f"📦 Processing {batch.name} ({batch_idx + 1}/{len(ordered)}), items: {len(batch.items)}")

            stats = BatchStats(name=batch.name)
            batch_start = time.time()

            for i, item in enumerate(batch.items):
                overall_index += 1
                log_prefix = f"[{batch.name} #{i + 1}/{len(batch.items)} | {overall_index}/{total_items}]"
                logger.info(f"{log_prefix} Keyword: {item.keyword}, category: {item.category_id}")

                item_result = self.process_item_with_retry(item, batch.name, log_prefix)
                stats.record(item_result)
                result.items.append(item_result)

                if not (is_last_batch and i == len(batch.items) - 1):
                    logger.info(f"⏳ Waiting {self.config.item_delay:g} seconds before next generation...")
                    self._sleep(self.config.item_delay)

            stats.duration_seconds = time.time() - batch_start
            result.batches.append(stats)
            logger.info(
                f"✅ {batch.name} completed in {stats.duration_seconds:.1f}s "
                f"({stats.successful}/{stats.total} successful)"
            )

        result.duration_seconds = time.time() - start_time
        result.completed_at = datetime.now()
        return result

    def run(self, input_path: Path) -> RunResult:
        """
        Run the whole pipeline for one input file

        Raises:
            PathNotFoundError, InputSyntaxError, InputValidationError:
                the input is unusable; nothing has been written anywhere
        """
        self._set_phase(RunPhase.LOADING)
        logger.info(f"📂 Loading JSON file: {input_path}")
        batches = load_input(Path(input_path))
        self._set_phase(RunPhase.VALIDATED)
        logger.info("✅ JSON file loaded and validated successfully")

        result = self.process_batches(batches)

        self._set_phase(RunPhase.SUMMARIZING)
        self.output_manager.save_run_log(result)

        self._set_phase(RunPhase.DONE)
        logger.info(f"🎉 Run complete: {result.successful}/{result.total} successful, {result.duration_seconds:.1f}s")
        return result
