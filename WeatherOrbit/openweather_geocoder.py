"""OpenWeather Geocoding API place lookup implementation."""
import logging
import requests
from typing import List
from place_provider import PlaceLookupBase, PlaceLookupError, PlaceCandidate


class OpenWeatherGeocoder(PlaceLookupBase):
    """
    Place lookup using the OpenWeather direct geocoding API.

    API docs: https://openweathermap.org/api/geocoding-api
    Candidates that render to the same "Name, CC" label are collapsed, so
    the list never shows the same entry twice.
    """

    BASE_URL = "https://api.openweathermap.org/geo/1.0/direct"

    def __init__(self, api_key: str, limit: int = 5, timeout: int = 10):
        self.api_key = api_key
        self.limit = limit
        self.timeout = timeout

    def lookup(self, text: str) -> List[PlaceCandidate]:
        query = text.strip()
        if not query:
            return []

        params = {
            "q": query,
            "limit": self.limit,
            "appid": self.api_key,
        }

        try:
            logging.debug(f"Making geocoding request: {self.BASE_URL} q={query!r}")
            response = requests.get(self.BASE_URL, params=params, timeout=self.timeout)
            if not response.ok:
                raise PlaceLookupError(f"HTTP {response.status_code}")

            data = response.json()
            if not data:
                logging.info(f"No matching cities found for {query!r}")
                return []
            if not isinstance(data, list):
                raise PlaceLookupError("Unexpected geocoding payload")

            seen = set()
            candidates = []
            for item in data:
                candidate = PlaceCandidate(
                    name=item["name"],
                    country=item.get("country", ""),
                    state=item.get("state"),
                )
                if candidate.label in seen:
                    continue
                seen.add(candidate.label)
                candidates.append(candidate)
            return candidates[:self.limit]

        except (KeyError, ValueError, TypeError) as e:
            raise PlaceLookupError(f"Failed to parse geocoding response: {e}")
        except requests.exceptions.RequestException as e:
            raise PlaceLookupError(f"Network error: {e}")
