"""
Summary reporter - renders a finished run as text
"""

from typing import List

from .models import RunResult

RULE = "═" * 60
PROMPT_PREVIEW_LENGTH = 60


def format_summary(result: RunResult) -> str:
    """
    Render the final summary

    Args:
        result: finished run

    Returns:
        multi-line report
    """
    lines: List[str] = ["", RULE, "📊 FINAL SUMMARY", RULE, "", "📦 Batch Results:", ""]

    for stats in result.batches:
        lines.append(f"   {stats.name}:")
        lines.append(f"     ✅ Successful: {stats.successful}/{stats.total} ({stats.success_rate:.1f}%)")
        lines.append(f"     ⏱️  Time: {stats.duration_seconds:.1f}s")
        lines.append("")

    lines += [
        "📈 Overall Results:",
        "",
        f"   ✅ Successful: {result.successful}",
        f"   ❌ Failed: {result.failed}",
        f"   📝 Total: {result.total}",
        f"   📊 Success Rate: {result.success_rate:.1f}%",
        "",
    ]

    successful = [r for r in result.items if r.success]
    if successful:
        lines += ["✅ Successful Generations:", ""]
        for i, r in enumerate(successful, 1):
            retry_info = f" (after {r.attempts} attempts)" if r.attempts > 1 else ""
            lines.append(f"   {i}. [{r.batch_name}] {r.keyword}{retry_info}")
            lines.append(f"      ID: {r.card_id}")
            lines.append(f"      Local: {r.local_path}")
            lines.append(f"      Remote: {r.public_url}")
            lines.append("")

    failed = [r for r in result.items if not r.success]
    if failed:
        lines += ["❌ Failed Generations:", ""]
        for i, r in enumerate(failed, 1):
            lines.append(f"   {i}. [{r.batch_name}] {r.keyword} ({r.attempts} attempts)")
            lines.append(f"      Prompt: {r.prompt[:PROMPT_PREVIEW_LENGTH]}...")
            if r.card_id:
                lines.append(f"      Inactive card: {r.card_id}")
            lines.append(f"      Error: {r.error}")
            lines.append("")

    return "\n".join(lines)
