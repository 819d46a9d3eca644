"""Display helpers for a weather snapshot - pure functions for testability."""
import math
from datetime import datetime, timezone
from typing import Optional
from solar import SolarPeriod, image_period, solar_period
from weather_data import WeatherSnapshot

COMPASS_POINTS = [
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
]

# OpenWeather condition ids -> condition key, checked in order
CONDITION_RULES = [
    ("clear", {800}),
    ("mostly_clear", {801}),
    ("clouds", set(range(802, 804))),
    ("overcast", {804}),
    ("drizzle", set(range(300, 322))),
    ("rain", {500, 501, 511, 520, 521, 522, 531}),
    ("heavy_rain", {502, 503, 504}),
    ("thunderstorm", set(range(200, 233))),
    ("snow", set(range(600, 603))),
    ("sleet", set(range(611, 623))),
    ("fog", {701, 711, 721, 741}),
    ("wind", {731, 751, 761, 762, 771, 781}),
]

# Keys the presentation layer has artwork for
IMAGE_KEYS = {
    "clouds", "day_clear", "day_mostly_clear", "drizzle", "fog", "heavy_rain",
    "night_clear", "night_mostly_clear", "overcast", "rain", "sleet", "snow",
    "thunderstorm", "wind",
}

ICON_URL = "https://openweathermap.org/img/wn/{icon}@2x.png"

# Readings older than this are flagged in the summary
STALE_AFTER_SECONDS = 3600


def condition_key(condition_id: int) -> Optional[str]:
    """Map an OpenWeather condition id to a condition key, or None if unmapped."""
    for key, ids in CONDITION_RULES:
        if condition_id in ids:
            return key
    return None


def image_key(snapshot: Optional[WeatherSnapshot]) -> Optional[str]:
    """
    Artwork key for a snapshot, e.g. "day_clear" or "rain".

    A day/night specific key wins over the plain condition key. Dawn counts
    as day and dusk as night.
    """
    if snapshot is None:
        return None
    key = condition_key(snapshot.condition_id)
    if key is None:
        return None
    timed_key = f"{image_period(snapshot).value}_{key}"
    if timed_key in IMAGE_KEYS:
        return timed_key
    if key in IMAGE_KEYS:
        return key
    return None


def theme_name(snapshot: Optional[WeatherSnapshot]) -> str:
    """Background theme: one of dawn, day, dusk, night."""
    return solar_period(snapshot).value


def text_tone(snapshot: Optional[WeatherSnapshot]) -> str:
    """Dark text on the dawn/day/dusk themes, light text at night."""
    if solar_period(snapshot) == SolarPeriod.NIGHT:
        return "light"
    return "dark"


def wind_direction(deg: Optional[float]) -> str:
    """16-point compass direction for a wind bearing in degrees."""
    if deg is None:
        return ""
    # half-way bearings round up, e.g. 11.25 -> NNE
    index = int(math.floor(deg / 22.5 + 0.5)) % 16
    return COMPASS_POINTS[index]


def timezone_label(offset_seconds: int) -> str:
    """Format a UTC offset, e.g. 3600 -> "GMT+1", -16200 -> "GMT-4.5"."""
    hours = offset_seconds / 3600
    text = f"{hours:g}"
    if hours > 0:
        text = "+" + text
    return f"GMT{text}"


def _local(epoch: int, offset_seconds: int) -> datetime:
    return datetime.fromtimestamp(epoch + offset_seconds, tz=timezone.utc)


def local_clock(epoch: Optional[int], offset_seconds: int) -> str:
    """Place-local HH:MM for a UTC epoch, "" when unknown."""
    if epoch is None:
        return ""
    return _local(epoch, offset_seconds).strftime("%H:%M")


def last_updated(snapshot: WeatherSnapshot) -> str:
    """Place-local observation time, e.g. "Mon 5 Jun 23, 14:05"."""
    moment = _local(snapshot.timestamp, snapshot.timezone_offset)
    return f"{moment:%a} {moment.day} {moment:%b %y, %H:%M}"


def capitalize_words(text: str) -> str:
    """Capitalize the first letter of every word, leaving the rest alone."""
    return " ".join(word[:1].upper() + word[1:] for word in text.split(" "))


def format_temperature(temp_c: Optional[float]) -> str:
    if temp_c is None:
        return "N/A"
    return f"{temp_c:.1f} °C"


def icon_url(icon: Optional[str]) -> str:
    if not icon:
        return ""
    return ICON_URL.format(icon=icon)


def summary_lines(snapshot: WeatherSnapshot) -> list:
    """Plain-text lines describing a snapshot, for console output."""
    lines = [
        f"{snapshot.name}" + (f" · {snapshot.country}" if snapshot.country else ""),
        f"{capitalize_words(snapshot.condition_description)}  {format_temperature(snapshot.temp)}",
        f"Feels like {format_temperature(snapshot.feels_like)}  Humidity {snapshot.humidity:g} %",
        f"Wind {snapshot.wind_speed:g} m/s {wind_direction(snapshot.wind_deg)}".rstrip(),
        f"Timezone {timezone_label(snapshot.timezone_offset)}",
    ]
    if snapshot.has_sun_times:
        lines.append(
            f"Sunrise {local_clock(snapshot.sunrise, snapshot.timezone_offset)}"
            f"  Sunset {local_clock(snapshot.sunset, snapshot.timezone_offset)}"
        )
    updated = f"Last updated · {last_updated(snapshot)}"
    if snapshot.is_stale(STALE_AFTER_SECONDS):
        updated += " (outdated)"
    lines.append(updated)
    return lines
