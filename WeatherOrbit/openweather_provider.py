"""OpenWeather Current Weather API provider implementation."""
import logging
import requests
from typing import Optional
from weather_provider import (
    WeatherProviderBase,
    WeatherProviderError,
    PlaceNotFoundError,
    InvalidPayloadError,
)
from weather_data import WeatherSnapshot


class OpenWeatherProvider(WeatherProviderBase):
    """
    Weather provider using OpenWeather Current Weather API.

    Uses the free Current Weather API: https://openweathermap.org/current
    Places are resolved by name (``q=``) so any text the user typed can be
    sent as-is.
    """

    BASE_URL = "https://api.openweathermap.org/data/2.5/weather"

    def __init__(
        self,
        api_key: str,
        units: str = "metric",
        lang: str = "en",
        timeout: int = 10
    ):
        """
        Initialize OpenWeather provider.

        Args:
            api_key: OpenWeather API key
            units: Temperature units ("metric", "imperial", or "standard")
            lang: Language code for descriptions (e.g., "en", "de")
            timeout: HTTP request timeout in seconds
        """
        self.api_key = api_key
        self.units = units
        self.lang = lang
        self.timeout = timeout

    def get_weather(self, place: str) -> WeatherSnapshot:
        """
        Fetch current weather for a place from OpenWeather.

        Returns:
            WeatherSnapshot: Current weather information

        Raises:
            PlaceNotFoundError: If OpenWeather does not know the place (404)
            InvalidPayloadError: If the API answered with an error or an unusable payload
            WeatherProviderError: On network errors
        """
        params = {
            "q": place.strip(),
            "appid": self.api_key,
            "units": self.units,
            "lang": self.lang,
        }

        try:
            logging.info(f"Making OpenWeather API request: {self.BASE_URL} q={params['q']!r}")

            response = requests.get(self.BASE_URL, params=params, timeout=self.timeout)

            logging.info(f"API response status: {response.status_code}")

            if not response.ok:
                logging.error(f"API request failed with status {response.status_code}")
                self._handle_error_response(response)

            data = response.json()
            logging.debug(f"API response (truncated): {str(data)[:500]}...")

            if not isinstance(data, dict):
                raise InvalidPayloadError("Invalid data")

            # cod is an int on success and a string on errors
            if str(data.get("cod", 200)) != "200":
                raise InvalidPayloadError(data.get("message") or "Invalid data")

            snapshot = self._parse(data)
            logging.info(f"Successfully parsed weather data: {snapshot.label} {snapshot.temp}°C, {snapshot.condition_main}")
            return snapshot

        except (KeyError, ValueError, TypeError) as e:
            logging.error(f"Failed to parse API response: {e}", exc_info=True)
            raise InvalidPayloadError(f"Failed to parse response: {str(e)}")
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during API request: {e}")
            raise WeatherProviderError(f"Network error: {str(e)}")

    def _parse(self, data: dict) -> WeatherSnapshot:
        weather_array = data.get("weather", [])
        if not weather_array:
            logging.error("Response missing 'weather' array")
            raise InvalidPayloadError("Response missing 'weather' array")
        if not isinstance(weather_array, list) or not isinstance(weather_array[0], dict):
            raise InvalidPayloadError("Malformed 'weather' array")
        weather = weather_array[0]
        logging.debug(f"Weather condition: {weather.get('main')} - {weather.get('description')}")

        main_data = data.get("main", {})
        if not main_data:
            raise InvalidPayloadError("Response missing 'main' block")
        if not isinstance(main_data, dict):
            raise InvalidPayloadError("Malformed 'main' block")

        if not data.get("name"):
            raise InvalidPayloadError("Response missing place name")

        sys_data = _optional_block(data, "sys")
        wind_data = _optional_block(data, "wind")

        return WeatherSnapshot(
            name=data["name"],
            country=sys_data.get("country", ""),
            temp=float(main_data["temp"]),
            feels_like=float(main_data.get("feels_like", main_data["temp"])),
            humidity=float(main_data.get("humidity", 0.0)),
            wind_speed=float(wind_data.get("speed", 0.0)),
            condition_id=int(weather.get("id", 0)),
            condition_main=weather.get("main", "Unknown"),
            condition_description=weather.get("description", ""),
            icon=weather.get("icon", ""),
            timestamp=int(data.get("dt", 0)),
            timezone_offset=int(data.get("timezone", 0)),
            sunrise=_optional_int(sys_data.get("sunrise")),
            sunset=_optional_int(sys_data.get("sunset")),
            temp_min=main_data.get("temp_min"),
            temp_max=main_data.get("temp_max"),
            pressure=main_data.get("pressure"),
            visibility=data.get("visibility"),
            wind_deg=wind_data.get("deg"),
            wind_gust=wind_data.get("gust"),
        )

    def _handle_error_response(self, response: requests.Response) -> None:
        """Parse and raise error from OpenWeather error response."""
        if response.status_code == 404:
            raise PlaceNotFoundError("City not found")
        try:
            error_data = response.json()
        except ValueError:
            # Not JSON, use HTTP status
            logging.error(f"Non-JSON error response: HTTP {response.status_code}, body: {response.text[:500]}")
            raise InvalidPayloadError(
                f"HTTP {response.status_code}: {response.text[:200]}"
            )

        logging.error(f"OpenWeather API error response: {error_data}")
        if not isinstance(error_data, dict):
            error_data = {}
        cod = error_data.get("cod", response.status_code)
        if str(cod) == "404":
            raise PlaceNotFoundError("City not found")
        message = error_data.get("message", "Unknown error")
        raise InvalidPayloadError(f"OpenWeather API error {cod}: {message}")


def _optional_block(data: dict, key: str) -> dict:
    """Nested object that may be absent or null, but never another type."""
    block = data.get(key) or {}
    if not isinstance(block, dict):
        raise InvalidPayloadError(f"Malformed '{key}' block")
    return block


def _optional_int(value) -> Optional[int]:
    if value is None:
        return None
    return int(value)
