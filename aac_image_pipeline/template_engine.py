"""
Jinja2 template engine - renders prompt text with the work item's fields
"""

import logging
from typing import Any, Dict

from jinja2 import Environment, StrictUndefined, TemplateError

from .models import WorkItem

logger = logging.getLogger(__name__)


class TemplateEngine:
    """Jinja2 prompt renderer"""

    def __init__(self):
        # Plain text prompts, no HTML escaping; unknown names fail the render
        self.env = Environment(autoescape=False, keep_trailing_newline=True, undefined=StrictUndefined)

    def build_context(self, item: WorkItem, batch_name: str) -> Dict[str, Any]:
        return {
            "keyword": item.keyword,
            "category_id": item.category_id,
            "tags": list(item.tags),
            "order_index": item.order_index,
            "batch_name": batch_name,
        }

    def render(self, template_str: str, context: Dict[str, Any]) -> str:
        """
        Render a prompt template

        Args:
            template_str: prompt text, may contain {{ keyword }} and friends
            context: template variables

        Returns:
            rendered prompt; the raw text when rendering fails
        """
        if "{{" not in template_str and "{%" not in template_str:
            return template_str

        try:
            return self.env.from_string(template_str).render(**context)
        except TemplateError as e:
            logger.warning(f"Prompt template render failed: {e}, using raw prompt")
            return template_str

    def render_item(self, item: WorkItem, batch_name: str) -> str:
        return self.render(item.prompt, self.build_context(item, batch_name))
