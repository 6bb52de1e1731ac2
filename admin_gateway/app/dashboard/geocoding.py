"""
Location autocomplete for the vendor form (LocationIQ).

Lookups start at three characters and are debounced: a new query within
500 ms supersedes the pending one, so typing "Bangalore" costs one request
instead of seven.
"""

import asyncio
import logging
from typing import List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ..config import Settings
from ..models import Coordinates

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 3
DEBOUNCE_SECONDS = 0.5
RESULT_LIMIT = 5


class Suggestion(BaseModel):
    """One autocomplete hit as returned by LocationIQ."""

    model_config = ConfigDict(extra="ignore")

    display_name: str
    lat: float
    lon: float
    place_id: str

    @field_validator("place_id", mode="before")
    @classmethod
    def place_id_to_str(cls, v):
        return str(v)

    @property
    def coordinates(self) -> Coordinates:
        """Coordinates in the shape the vendor form submits."""
        return Coordinates(lat=self.lat, lng=self.lon)


class LocationAutocomplete:
    """
    Debounced LocationIQ autocomplete client.

    Args:
        api_key: LocationIQ key; without one every lookup returns no results
        client: HTTP client used for lookups
        url: Autocomplete endpoint
        debounce_seconds: Quiet period before a debounced lookup fires
        min_query_length: Shorter queries never reach the network
    """

    def __init__(
        self,
        api_key: Optional[str],
        client: httpx.AsyncClient,
        url: str = "https://api.locationiq.com/v1/autocomplete",
        debounce_seconds: float = DEBOUNCE_SECONDS,
        min_query_length: int = MIN_QUERY_LENGTH,
    ):
        self.api_key = api_key
        self.client = client
        self.url = url
        self.debounce_seconds = debounce_seconds
        self.min_query_length = min_query_length
        self._pending: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(cls, settings: Settings, client: httpx.AsyncClient) -> "LocationAutocomplete":
        return cls(settings.LOCATIONIQ_KEY, client, url=settings.LOCATIONIQ_URL)

    async def suggest(self, query: str) -> List[Suggestion]:
        """
        Look up suggestions for a query right away.

        Lookup failures are logged and yield an empty list; the vendor form
        keeps working with a typed-in location.
        """
        query = query.strip()
        if len(query) < self.min_query_length:
            return []

        if not self.api_key:
            logger.warning("LOCATIONIQ_KEY not configured, skipping location lookup")
            return []

        try:
            response = await self.client.get(
                self.url,
                params={"key": self.api_key, "q": query, "limit": RESULT_LIMIT},
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error fetching location suggestions: {e}")
            return []

        if not isinstance(data, list):
            logger.warning("Unexpected autocomplete response", extra={"type": type(data).__name__})
            return []

        suggestions = []
        for item in data:
            try:
                suggestions.append(Suggestion.model_validate(item))
            except ValidationError:
                logger.debug("Skipping malformed autocomplete item")
        return suggestions

    async def _delayed(self, query: str) -> List[Suggestion]:
        await asyncio.sleep(self.debounce_seconds)
        return await self.suggest(query)

    async def suggest_debounced(self, query: str) -> Optional[List[Suggestion]]:
        """
        Look up suggestions after the debounce delay.

        Returns:
            The suggestions, or None when a newer query superseded this one
        """
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()

        task = asyncio.ensure_future(self._delayed(query))
        self._pending = task

        try:
            return await task
        except asyncio.CancelledError:
            if self._pending is not task:
                return None
            raise
