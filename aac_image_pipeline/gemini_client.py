"""
Gemini image generation client - wraps the google-genai SDK
"""

import base64
import logging
import time
from pathlib import Path
from typing import List, Optional

from google import genai
from google.genai import types

from .exceptions import APIError
from .models import GeneratedImage

logger = logging.getLogger(__name__)

MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
}


def guess_mime_type(path: Path) -> str:
    """MIME type from the file extension, image/png when unknown"""
    return MIME_TYPES.get(path.suffix.lower(), "image/png")


class GeminiImageClient:
    """Gemini image generation client"""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash-image",
        client: Optional[genai.Client] = None,
    ):
        """
        Args:
            api_key: Google GenAI API key
            model: image capable model name
            client: preconfigured SDK client (created lazily when omitted)
        """
        self.api_key = api_key
        self.model = model
        self._client = client

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def build_contents(self, prompt: str, image_path: Optional[Path] = None) -> List[types.Part]:
        """
        Build the request parts: the prompt text, then the base image if given

        Args:
            prompt: rendered prompt text
            image_path: local base image to derive the result from

        Returns:
            list of request parts
        """
        contents = [types.Part.from_text(text=prompt)]

        if image_path is not None:
            try:
                data = Path(image_path).read_bytes()
            except OSError as e:
                raise APIError(f"Cannot read base image {image_path}: {e}")
            contents.append(types.Part.from_bytes(data=data, mime_type=guess_mime_type(Path(image_path))))

        return contents

    def generate_image(
        self,
        prompt: str,
        image_path: Optional[Path] = None,
        log_prefix: str = "",
    ) -> GeneratedImage:
        """
        Generate one image

        Args:
            prompt: rendered prompt text
            image_path: optional base image
            log_prefix: log prefix

        Returns:
            GeneratedImage with the first inline image of the response

        Raises:
            APIError: the call failed or the response held no image
        """
        contents = self.build_contents(prompt, image_path)
        start_time = time.time()

        logger.debug(f"{log_prefix} Sending request to Gemini, model={self.model}, parts={len(contents)}")

        try:
            response = self._get_client().models.generate_content(
                model=self.model,
                contents=contents,
            )
        except Exception as e:
            status_code = getattr(e, "code", None)
            raise APIError(
                f"Gemini request failed: {e}",
                status_code=status_code if isinstance(status_code, int) else None,
            ) from e

        elapsed = time.time() - start_time
        logger.debug(f"{log_prefix} Gemini responded in {elapsed:.1f}s")

        image = self.extract_image(response)
        if image is None:
            raise APIError("No image generated in response")

        return image

    @staticmethod
    def extract_image(response) -> Optional[GeneratedImage]:
        """
        Return the first inline image of the first candidate, or None

        Response shape::

            candidates[0].content.parts[*].inline_data.{data, mime_type}
        """
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            return None

        content = getattr(candidates[0], "content", None)
        parts = getattr(content, "parts", None) or []
        for part in parts:
            inline_data = getattr(part, "inline_data", None)
            data = getattr(inline_data, "data", None) if inline_data else None
            if data:
                if isinstance(data, str):
                    data = base64.b64decode(data)
                mime_type = getattr(inline_data, "mime_type", None) or "image/png"
                return GeneratedImage(data=data, mime_type=mime_type)

        return None
