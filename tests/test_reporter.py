from pathlib import Path

from aac_image_pipeline.models import BatchStats, ItemResult, RunResult
from aac_image_pipeline.reporter import PROMPT_PREVIEW_LENGTH, format_summary


def _result() -> RunResult:
    ok = ItemResult(
        success=True, keyword="happy", prompt="p", batch_name="batch_1", attempts=2,
        card_id="card-1", local_path=Path("generated-images/card-1.png"),
        public_url="https://example.supabase.co/storage/v1/object/public/emotion-emojis/card-1.png",
    )
    failed = ItemResult(
        success=False, keyword="sad", prompt="x" * 100, batch_name="batch_1", attempts=3,
        card_id="card-2", error="No image generated in response",
    )
    stats = BatchStats(name="batch_1", total=2, successful=1, failed=1, duration_seconds=12.34)
    return RunResult(batches=[stats], items=[ok, failed], duration_seconds=12.5)


def test_summary_totals_and_rates():
    text = format_summary(_result())

    assert "batch_1:" in text
    assert "✅ Successful: 1/2 (50.0%)" in text
    assert "⏱️  Time: 12.3s" in text
    assert "❌ Failed: 1" in text
    assert "📝 Total: 2" in text
    assert "📊 Success Rate: 50.0%" in text


def test_successful_items_list_ids_and_urls():
    text = format_summary(_result())

    assert "1. [batch_1] happy (after 2 attempts)" in text
    assert "ID: card-1" in text
    assert "Remote: https://example.supabase.co/storage/v1/object/public/emotion-emojis/card-1.png" in text


def test_failed_items_show_truncated_prompt_and_error():
    text = format_summary(_result())

    assert "1. [batch_1] sad (3 attempts)" in text
    assert f"Prompt: {'x' * PROMPT_PREVIEW_LENGTH}..." in text
    assert "x" * (PROMPT_PREVIEW_LENGTH + 1) not in text
    assert "Inactive card: card-2" in text
    assert "Error: No image generated in response" in text


def test_empty_run():
    text = format_summary(RunResult())

    assert "📊 Success Rate: 0.0%" in text
    assert "Failed Generations" not in text
