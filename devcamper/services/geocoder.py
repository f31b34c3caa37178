"""
DevCamper API — Geocoding Service
==================================

What:  Forward geocoding (address or postal code → coordinates + address parts).
How:   Async httpx client against an OpenStreetMap Nominatim-compatible
       `/search` endpoint. One request per lookup, no retries, no caching.
Who:   BootcampService on create / address change and on radius search.

Failure mapping:
    transport error, timeout, non-200  → GeocodingError (503)
    200 with an empty result list      → []  (callers decide: 400)
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from devcamper.config import Settings
from devcamper.exceptions import GeocodingError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeocodeResult:
    latitude: float
    longitude: float
    formatted_address: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    country: Optional[str] = None


def _parse_result(item: Dict[str, Any]) -> GeocodeResult:
    address = item.get("address") or {}
    road = address.get("road")
    house = address.get("house_number")
    street = f"{house} {road}" if house and road else road
    country = address.get("country_code")
    return GeocodeResult(
        latitude=float(item["lat"]),
        longitude=float(item["lon"]),
        formatted_address=item.get("display_name"),
        street=street,
        city=address.get("city") or address.get("town") or address.get("village"),
        state=address.get("state"),
        zipcode=address.get("postcode"),
        country=country.upper() if country else None,
    )


class Geocoder:
    """
    Thin async wrapper over the provider's search API.

    The httpx client is created lazily and closed by the application context
    on shutdown.
    """

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        self.base_url = settings.geocoder_base_url.rstrip("/")
        self.user_agent = settings.geocoder_user_agent
        self.timeout = settings.geocoder_timeout
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
            )
        return self._client

    async def geocode(self, query: str) -> List[GeocodeResult]:
        params = {"q": query, "format": "jsonv2", "addressdetails": 1, "limit": 1}
        try:
            response = await self.client.get("/search", params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.error("Geocoding request failed for %r: %s", query, e)
            raise GeocodingError(context={"query": query, "error": str(e)})
        except ValueError as e:
            logger.error("Geocoding provider returned invalid JSON for %r", query)
            raise GeocodingError(context={"query": query, "error": str(e)})

        results = [_parse_result(item) for item in payload or []]
        logger.info("Geocoded %r → %d result(s)", query, len(results))
        return results

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
