"""Weather domain model - pure data structures independent of any API."""
from dataclasses import dataclass
from typing import Optional
from datetime import datetime, timezone


@dataclass(frozen=True)
class WeatherSnapshot:
    """Last successfully fetched weather for one place, independent of any specific API."""
    name: str
    country: str
    temp: float
    feels_like: float
    humidity: float
    wind_speed: float
    condition_id: int  # e.g., 800, 803, 501
    condition_main: str  # e.g., "Clouds", "Rain", "Clear"
    condition_description: str  # e.g., "broken clouds", "light rain"
    icon: str  # e.g., "04d"
    timestamp: int  # UNIX timestamp (UTC)
    timezone_offset: int  # Offset from UTC in seconds

    # Sun times are missing for some polar locations
    sunrise: Optional[int] = None
    sunset: Optional[int] = None

    temp_min: Optional[float] = None
    temp_max: Optional[float] = None
    pressure: Optional[float] = None
    visibility: Optional[int] = None  # metres
    wind_deg: Optional[int] = None
    wind_gust: Optional[float] = None

    @property
    def label(self) -> str:
        """Place label used as the history key, e.g. "London, GB"."""
        if not self.country:
            return self.name
        return f"{self.name}, {self.country}"

    @property
    def has_sun_times(self) -> bool:
        return self.sunrise is not None and self.sunset is not None

    def is_stale(self, max_age_seconds: int = 900) -> bool:
        """Check if this data is stale (older than max_age_seconds)."""
        current_time = int(datetime.now(timezone.utc).timestamp())
        age = current_time - self.timestamp
        return age > max_age_seconds
