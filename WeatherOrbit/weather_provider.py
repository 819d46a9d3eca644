"""Weather provider abstraction - allows swapping different weather APIs."""
from abc import ABC, abstractmethod
from weather_data import WeatherSnapshot


class WeatherProviderBase(ABC):
    """Abstract base class for weather data providers."""

    @abstractmethod
    def get_weather(self, place: str) -> WeatherSnapshot:
        """
        Fetch current weather for a place.

        Args:
            place: Free-text place, e.g. "London" or "London, GB"

        Returns:
            WeatherSnapshot: Current weather information

        Raises:
            PlaceNotFoundError: If the provider does not know the place
            InvalidPayloadError: If the provider answered with an error or malformed data
            WeatherProviderError: If the provider could not be reached
        """
        pass


class WeatherProviderError(Exception):
    """Exception raised when a weather provider fails."""
    pass


class PlaceNotFoundError(WeatherProviderError):
    """The provider found nothing for the requested place."""
    pass


class InvalidPayloadError(WeatherProviderError):
    """Unexpected response shape or unsuccessful error code."""
    pass
