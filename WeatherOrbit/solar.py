"""Solar period classification - pure functions for picking day/night visuals."""
from enum import Enum
from typing import Optional
from weather_data import WeatherSnapshot

DAWN_BEFORE_SUNRISE = 1800  # seconds
DAWN_AFTER_SUNRISE = 900
DUSK_BEFORE_SUNSET = 900
DUSK_AFTER_SUNSET = 1800


class SolarPeriod(str, Enum):
    DAWN = "dawn"
    DAY = "day"
    DUSK = "dusk"
    NIGHT = "night"


def classify_solar_period(
    reference_time: int,
    timezone_offset: int,
    sunrise: Optional[int],
    sunset: Optional[int],
) -> SolarPeriod:
    """
    Classify a moment into dawn, day, dusk or night.

    All epochs are UTC seconds; they are shifted by the place's timezone
    offset before comparison. Windows:
        dawn = [sunrise - 30min, sunrise + 15min]
        dusk = [sunset - 15min, sunset + 30min]

    Missing sun times classify as night.
    """
    if sunrise is None or sunset is None:
        return SolarPeriod.NIGHT

    now = reference_time + timezone_offset
    local_sunrise = sunrise + timezone_offset
    local_sunset = sunset + timezone_offset

    dawn_start = local_sunrise - DAWN_BEFORE_SUNRISE
    dawn_end = local_sunrise + DAWN_AFTER_SUNRISE
    dusk_start = local_sunset - DUSK_BEFORE_SUNSET
    dusk_end = local_sunset + DUSK_AFTER_SUNSET

    if dawn_start <= now <= dawn_end:
        return SolarPeriod.DAWN
    if dawn_end < now < dusk_start:
        return SolarPeriod.DAY
    if dusk_start <= now <= dusk_end:
        return SolarPeriod.DUSK
    return SolarPeriod.NIGHT


def solar_period(snapshot: Optional[WeatherSnapshot]) -> SolarPeriod:
    """Four-bucket period of a snapshot, used for background theming."""
    if snapshot is None or not snapshot.has_sun_times:
        return SolarPeriod.NIGHT
    return classify_solar_period(
        snapshot.timestamp,
        snapshot.timezone_offset,
        snapshot.sunrise,
        snapshot.sunset,
    )


def image_period(snapshot: Optional[WeatherSnapshot]) -> SolarPeriod:
    """
    Two-bucket reduction used only for weather image lookup.

    Dawn counts as day and dusk as night here, unlike the background theme
    which keeps all four periods.
    """
    period = solar_period(snapshot)
    if period in (SolarPeriod.DAWN, SolarPeriod.DAY):
        return SolarPeriod.DAY
    return SolarPeriod.NIGHT
