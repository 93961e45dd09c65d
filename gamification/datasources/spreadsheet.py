"""Spreadsheet-backed API data source implementation."""

import logging
import asyncio
from typing import Any, Optional

import httpx

from .base import DataSource, DataSourceError

logger = logging.getLogger(__name__)

# API constants
REQUEST_TIMEOUT = 30.0
MAX_RETRIES = 3
RETRY_DELAY = 2.0
RATE_LIMIT_DELAY = 0.5


class SpreadsheetDataSource(DataSource):
    """
    Data source backed by a spreadsheet web app (e.g. Google Apps Script).

    Every call is a form-encoded POST carrying an ``action`` field. The app
    answers with JSON of the form ``{"success": bool, ...}``; rows are under
    ``data`` (gamification) or ``students`` (roster).

    Limitations:
    - The whole sheet is returned on every read, there is no paging
    - Writes are not transactional; a level update can fail after an award
    """

    def __init__(
        self,
        api_url: str,
        request_timeout: float = REQUEST_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        retry_delay: float = RETRY_DELAY,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize spreadsheet data source.

        Args:
            api_url: Web app URL
            request_timeout: Per-request timeout in seconds
            max_retries: Retries for timeouts and rate limiting
            retry_delay: Seconds to wait before retrying a timeout
            transport: Optional httpx transport (used by tests)
        """
        self.api_url = api_url
        self.request_timeout = request_timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.request_timeout,
                # Apps Script answers through a redirect
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def _make_request(self, action: str, params: dict, retry_count: int = 0) -> dict:
        """
        Post an action with retries on timeouts and rate limiting.

        Args:
            action: Web app action name
            params: Extra form fields
            retry_count: Current retry attempt

        Returns:
            Response JSON data

        Raises:
            DataSourceError: the app answered success=false or non-JSON
        """
        client = await self._get_client()
        form = {"action": action}
        form.update({k: str(v) for k, v in params.items() if v is not None})

        try:
            response = await client.post(self.api_url, data=form)
            response.raise_for_status()

        except httpx.TimeoutException as e:
            if retry_count < self.max_retries:
                logger.warning(
                    f"Action {action} timed out (attempt {retry_count + 1}/{self.max_retries}). "
                    f"Retrying in {self.retry_delay}s..."
                )
                await asyncio.sleep(self.retry_delay)
                return await self._make_request(action, params, retry_count + 1)
            logger.error(f"Action {action} failed after {self.max_retries} retries: {e}")
            raise

        except httpx.HTTPStatusError as e:
            if e.response.status_code == 429 and retry_count < self.max_retries:
                logger.warning(
                    f"Rate limited (429) on {action} (attempt {retry_count + 1}/{self.max_retries}). "
                    f"Retrying in {RATE_LIMIT_DELAY}s..."
                )
                await asyncio.sleep(RATE_LIMIT_DELAY)
                return await self._make_request(action, params, retry_count + 1)

            logger.error(f"HTTP error {e.response.status_code} for {action}: {e}")
            raise

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Action {action} returned non-JSON response")
            raise DataSourceError(f"{action}: response is not JSON") from e

        if not isinstance(data, dict) or not data.get("success"):
            error = data.get("error") if isinstance(data, dict) else None
            raise DataSourceError(f"{action}: {error or 'request failed'}")

        return data

    async def get_gamification(self) -> list[dict]:
        """Retrieve all gamification records."""
        data = await self._make_request("getGamification", {})
        return data.get("data") or []

    async def get_students(self) -> list[dict]:
        """Retrieve the roster sheet."""
        data = await self._make_request("getStudentsFromSheet", {})
        return data.get("students") or []

    async def award_points(
        self,
        class_id: Optional[str],
        username: Optional[str],
        points: int,
        reason: str = "",
    ) -> Optional[int]:
        """
        Add points via the awardPoints action.

        The new total comes back as ``newTotal`` when the app reports it.
        """
        data = await self._make_request("awardPoints", {
            "classId": class_id,
            "studentUsername": username,
            "points": points,
            "reason": reason,
        })
        return _as_int(data.get("newTotal"))

    async def award_badge(
        self,
        class_id: Optional[str],
        username: Optional[str],
        badge_id: str,
        badge_name: str,
    ) -> Optional[int]:
        """Append a badge via the awardBadge action."""
        data = await self._make_request("awardBadge", {
            "classId": class_id,
            "studentUsername": username,
            "badgeId": badge_id,
            "badgeName": badge_name,
        })
        return _as_int(data.get("newTotal"))

    async def update_level(
        self,
        class_id: Optional[str],
        username: Optional[str],
        level: int,
    ) -> None:
        """Overwrite the stored level via the updateLevel action."""
        await self._make_request("updateLevel", {
            "classId": class_id,
            "studentUsername": username,
            "level": level,
        })

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def _as_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None
