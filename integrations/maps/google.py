"""
Google Maps Integration

Connects to the Google Distance Matrix API for trip durations and distances.
"""

import logging

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from engines.schemas.draft_pay import TravelMode
from integrations.base import DistanceMatrixProvider, DistanceResult

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://maps.googleapis.com/maps/api"


class GoogleDistanceMatrixClient(DistanceMatrixProvider):
    """Google Distance Matrix provider."""

    provider_name = "google"

    def __init__(
        self,
        api_key: str,
        config: dict | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(api_key, config)
        self.base_url = self.config.get("base_url", DEFAULT_BASE_URL)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Accept": "application/json"},
                timeout=10.0,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        reraise=True,
    )
    async def _fetch(self, params: dict) -> dict:
        response = await self.client.get("/distancematrix/json", params=params)
        response.raise_for_status()
        return response.json()

    async def get_distance_matrix(
        self,
        origins: str,
        destinations: str,
        mode: TravelMode,
    ) -> DistanceResult | None:
        params = {
            "origins": origins,
            "destinations": destinations,
            "mode": mode.value,
            "key": self.api_key,
        }
        try:
            data = await self._fetch(params)
        except httpx.HTTPError as e:
            logger.warning(f"Google distance matrix request failed: {e}")
            return None

        if data.get("status") != "OK":
            logger.warning(f"Google distance matrix error: {data.get('status')} {data.get('error_message', '')}")
            return None

        rows = data.get("rows") or []
        elements = rows[0].get("elements") if rows else None
        element = elements[0] if elements else None
        if not element or element.get("status") != "OK":
            logger.debug(f"No {mode.value} route from {origins!r} to {destinations!r}")
            return None

        return DistanceResult(
            origins=origins,
            destinations=destinations,
            mode=mode,
            duration=element["duration"]["value"],
            distance=element["distance"]["value"],
            raw_data=element,
        )
