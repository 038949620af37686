"""
Supabase Storage uploader - uploads generated images and builds public URLs
"""

import logging
from typing import Optional
from urllib.parse import quote

import httpx

from .exceptions import StorageError

logger = logging.getLogger(__name__)


class SupabaseUploader:
    """Supabase Storage uploader"""

    def __init__(
        self,
        supabase_url: str,
        api_key: str,
        bucket_name: str = "emotion-emojis",
        cache_control: str = "3600",
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Args:
            supabase_url: project URL
            api_key: service role key or anon key
            bucket_name: public bucket holding card images
            cache_control: max-age in seconds sent with every object
            timeout: request timeout in seconds
            transport: custom httpx transport
        """
        self.supabase_url = supabase_url.rstrip("/")
        self.api_key = api_key
        self.bucket_name = bucket_name
        self.cache_control = cache_control
        self.timeout = timeout
        self.transport = transport

    @staticmethod
    def object_key(card_id: str) -> str:
        """Objects are named after the card they belong to"""
        return f"{card_id}.png"

    def get_public_url(self, key: str) -> str:
        return f"{self.supabase_url}/storage/v1/object/public/{self.bucket_name}/{quote(key)}"

    def upload_image(
        self,
        card_id: str,
        data: bytes,
        content_type: str = "image/png",
    ) -> str:
        """
        Upload an image, overwriting any object already stored for the card

        Args:
            card_id: owning card id
            data: image bytes
            content_type: object content type

        Returns:
            public URL of the object
        """
        key = self.object_key(card_id)
        url = f"{self.supabase_url}/storage/v1/object/{self.bucket_name}/{quote(key)}"
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": content_type,
            "cache-control": f"max-age={self.cache_control}",
            "x-upsert": "true",
        }

        logger.info(f"📤 Uploading to Supabase Storage as {key}...")
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(url, content=data, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise StorageError(
                f"Upload of {key} failed ({e.response.status_code}): {e.response.text[:200]}",
                key=key,
            ) from e
        except httpx.HTTPError as e:
            raise StorageError(f"Upload of {key} failed: {e}", key=key) from e

        logger.info("✅ Image uploaded to Supabase Storage")
        return self.get_public_url(key)
