"""Address geocoding against a Nominatim-compatible HTTP API."""

import logging
from typing import Optional, Tuple

import httpx
from django.conf import settings

from .exceptions import GeocodingError

logger = logging.getLogger(__name__)


class GeocodingClient:
    """Client for the OpenStreetMap Nominatim search endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        kredika = settings.KREDIKA
        self.base_url = base_url or kredika['GEOCODER_URL']
        self.user_agent = user_agent or kredika['GEOCODER_USER_AGENT']
        self.timeout = timeout or kredika['GEOCODER_TIMEOUT']
        self.transport = transport

    def geocode(self, query: str) -> Optional[Tuple[float, float]]:
        """
        Resolve a free-form address to coordinates.

        Returns:
            (latitude, longitude) of the best match, or None if nothing matched

        Raises:
            GeocodingError: On timeout, HTTP errors, or invalid response
        """
        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = client.get(
                    self.base_url,
                    params={'format': 'json', 'q': query},
                    headers={'User-Agent': self.user_agent},
                )
                response.raise_for_status()
                results = response.json()

                if not results:
                    logger.info("No geocoding match", extra={'query': query})
                    return None

                best = results[0]
                return float(best['lat']), float(best['lon'])

            except httpx.TimeoutException as e:
                raise GeocodingError(f"Geocoder timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise GeocodingError(f"Geocoder error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise GeocodingError(f"Geocoder unreachable: {e}") from e
            except (KeyError, IndexError, ValueError, TypeError) as e:
                raise GeocodingError(f"Invalid geocoder response: {e}") from e
