"""
Output manager - local image files and the run log
"""

import io
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from .exceptions import OutputError
from .models import GeneratedImage, RunResult

logger = logging.getLogger(__name__)


class OutputManager:
    """Output manager"""

    RUN_LOG_PREFIX = "run_log"

    def __init__(self, base_dir: Path):
        """
        Args:
            base_dir: local directory for generated images, created on first use
        """
        self.base_dir = Path(base_dir)
        self.timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    def ensure_directory(self) -> Path:
        if not self.base_dir.exists():
            self.base_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"📁 Created directory: {self.base_dir}")
        return self.base_dir

    def get_image_path(self, card_id: str) -> Path:
        return self.base_dir / f"{card_id}.png"

    @staticmethod
    def to_png(image: GeneratedImage) -> bytes:
        """
        Return PNG bytes for the payload, re-encoding other formats

        Raises:
            OutputError: the payload is not a readable image
        """
        if image.mime_type == "image/png":
            return image.data

        try:
            with Image.open(io.BytesIO(image.data)) as img:
                if img.mode not in ("RGB", "RGBA", "L", "LA", "P"):
                    img = img.convert("RGBA")
                buf = io.BytesIO()
                img.save(buf, format="PNG")
        except (UnidentifiedImageError, OSError) as e:
            raise OutputError(f"Cannot convert {image.mime_type} payload to PNG: {e}")

        logger.debug(f"Converted {image.mime_type} payload to PNG")
        return buf.getvalue()

    def save_image(self, card_id: str, data: bytes) -> Path:
        """
        Write image bytes to <base_dir>/<card_id>.png

        Returns:
            local file path
        """
        path = self.get_image_path(card_id)
        try:
            self.ensure_directory()
            path.write_bytes(data)
        except OSError as e:
            raise OutputError(f"Cannot save image locally: {e}", path=str(path))

        logger.info(f"💾 Image saved locally: {path}")
        return path

    def save_run_log(self, result: RunResult) -> Optional[Path]:
        """
        Write the run result as JSON next to the images

        Returns:
            log path, or None when nothing was processed or the write failed
        """
        if not result.items:
            return None

        log_path = self.base_dir / f"{self.RUN_LOG_PREFIX}_{self.timestamp}.json"
        try:
            self.ensure_directory()
            with open(log_path, "w", encoding="utf-8") as f:
                json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.warning(f"⚠️ Could not save run log {log_path}: {e}")
            return None

        logger.info(f"Saved run log: {log_path}")
        return log_path
