"""
Card repository - reads and writes AAC cards and categories through the
Supabase REST (PostgREST) endpoint
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from .exceptions import DatabaseError
from .models import PENDING_IMAGE_URL, WorkItem

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


class CardRepository:
    """Supabase table access for cards and categories"""

    def __init__(
        self,
        supabase_url: str,
        api_key: str,
        cards_table: str = "aac_master_cards",
        categories_table: str = "aac_master_categories",
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Args:
            supabase_url: project URL (https://<ref>.supabase.co)
            api_key: service role key (bypasses RLS) or anon key
            cards_table: cards table name
            categories_table: categories table name
            timeout: request timeout in seconds
            transport: custom httpx transport
        """
        self.base_url = f"{supabase_url.rstrip('/')}/rest/v1"
        self.api_key = api_key
        self.cards_table = cards_table
        self.categories_table = categories_table
        self.timeout = timeout
        self.transport = transport

    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> Any:
        """Send one request and return the decoded body (None when empty)"""
        url = f"{self.base_url}/{table}"
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    headers=self._headers(prefer),
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            code, message = None, e.response.text[:200]
            try:
                body = e.response.json()
                code = body.get("code")
                message = body.get("message") or message
            except ValueError:
                pass
            raise DatabaseError(
                f"{method} {table} failed ({e.response.status_code}): {message}",
                code=code,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise DatabaseError(f"{method} {table} failed: {e}") from e

        if not response.content:
            return None
        return response.json()

    # ---------- cards ----------

    def insert_card(self, item: WorkItem) -> str:
        """
        Insert an inactive card with the sentinel image URL

        Returns:
            the new card id
        """
        logger.info(f"💾 Inserting card record for \"{item.keyword}\"...")
        rows = self._request(
            "POST",
            self.cards_table,
            json=[{
                "category_id": item.category_id,
                "text": item.keyword,
                "image_url": PENDING_IMAGE_URL,
                "tags": item.tags,
                "order_index": item.order_index,
                "is_active": False,
            }],
            prefer="return=representation",
        )
        if not rows or "id" not in rows[0]:
            raise DatabaseError(f"Insert into {self.cards_table} returned no id")

        card_id = str(rows[0]["id"])
        logger.info(f"✅ Card record created with ID: {card_id}")
        return card_id

    def activate_card(self, card_id: str, image_url: str):
        """Attach the final image URL and activate the card in one update"""
        logger.info(f"💾 Updating card {card_id} with image URL...")
        self._request(
            "PATCH",
            self.cards_table,
            params={"id": f"eq.{card_id}"},
            json={"image_url": image_url, "is_active": True},
            prefer="return=minimal",
        )
        logger.info("✅ Card record updated and activated")

    # ---------- categories ----------

    def upsert_category(self, category: Dict[str, Any]) -> str:
        """
        Insert a category or update the existing row with the same name

        Returns:
            the category id
        """
        try:
            rows = self._request(
                "POST",
                self.categories_table,
                params={"on_conflict": "name"},
                json=[{**category, "is_active": True}],
                prefer="resolution=merge-duplicates,return=representation",
            )
        except DatabaseError as e:
            if e.code != UNIQUE_VIOLATION:
                raise
            logger.warning(f"⚠️ Category {category['name']} already exists, fetching...")
            existing = self.get_category_by_name(category["name"])
            if not existing:
                raise
            return str(existing["id"])

        if not rows:
            raise DatabaseError(f"Upsert into {self.categories_table} returned no rows")
        return str(rows[0]["id"])

    def get_category_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        rows = self._request(
            "GET",
            self.categories_table,
            params={"select": "*", "name": f"eq.{name}", "limit": "1"},
        )
        return rows[0] if rows else None

    def list_categories(self) -> List[Dict[str, Any]]:
        """Categories ordered by order_index"""
        rows = self._request(
            "GET",
            self.categories_table,
            params={"select": "name,id,display_name,icon", "order": "order_index.asc"},
        )
        return rows or []
