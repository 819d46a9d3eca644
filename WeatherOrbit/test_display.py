"""Tests for display helpers."""
import pytest
from datetime import datetime, timezone
from display import (
    capitalize_words,
    condition_key,
    format_temperature,
    icon_url,
    image_key,
    last_updated,
    local_clock,
    summary_lines,
    text_tone,
    theme_name,
    timezone_label,
    wind_direction,
)

SUNRISE = 21600
SUNSET = 64800


@pytest.mark.parametrize("condition_id, expected", [
    (800, "clear"),
    (801, "mostly_clear"),
    (802, "clouds"),
    (803, "clouds"),
    (804, "overcast"),
    (300, "drizzle"),
    (321, "drizzle"),
    (500, "rain"),
    (502, "heavy_rain"),
    (211, "thunderstorm"),
    (601, "snow"),
    (616, "sleet"),
    (741, "fog"),
    (781, "wind"),
    (999, None),
])
def test_condition_key(condition_id, expected):
    assert condition_key(condition_id) == expected


def test_image_key_prefers_timed_artwork(make_snapshot):
    dawn = make_snapshot(condition_id=800, timestamp=SUNRISE, timezone_offset=0, sunrise=SUNRISE, sunset=SUNSET)
    dusk = make_snapshot(condition_id=801, timestamp=SUNSET, timezone_offset=0, sunrise=SUNRISE, sunset=SUNSET)

    assert image_key(dawn) == "day_clear"
    assert image_key(dusk) == "night_mostly_clear"


def test_image_key_falls_back_to_condition(make_snapshot):
    rainy = make_snapshot(condition_id=501, timestamp=SUNRISE + 7200, timezone_offset=0, sunrise=SUNRISE, sunset=SUNSET)
    assert image_key(rainy) == "rain"


def test_image_key_unknown(make_snapshot):
    assert image_key(make_snapshot(condition_id=999)) is None
    assert image_key(None) is None


def test_theme_and_tone(make_snapshot):
    dawn = make_snapshot(timestamp=SUNRISE, timezone_offset=0, sunrise=SUNRISE, sunset=SUNSET)
    night = make_snapshot(timestamp=SUNSET + 7200, timezone_offset=0, sunrise=SUNRISE, sunset=SUNSET)

    assert theme_name(dawn) == "dawn"
    assert text_tone(dawn) == "dark"
    assert theme_name(night) == "night"
    assert text_tone(night) == "light"
    assert theme_name(None) == "night"


@pytest.mark.parametrize("deg, expected", [
    (0, "N"),
    (11.25, "NNE"),
    (93, "E"),
    (180, "S"),
    (350, "N"),
    (None, ""),
])
def test_wind_direction(deg, expected):
    assert wind_direction(deg) == expected


@pytest.mark.parametrize("offset, expected", [
    (3600, "GMT+1"),
    (0, "GMT0"),
    (-18000, "GMT-5"),
    (19800, "GMT+5.5"),
])
def test_timezone_label(offset, expected):
    assert timezone_label(offset) == expected


def test_local_clock():
    assert local_clock(SUNRISE, 0) == "06:00"
    assert local_clock(SUNRISE, 3600) == "07:00"
    assert local_clock(None, 0) == ""


def test_last_updated(make_snapshot):
    # 2023-05-24 11:58:10 UTC, shown at UTC+1
    snapshot = make_snapshot(timestamp=1684929490, timezone_offset=3600)
    assert last_updated(snapshot) == "Wed 24 May 23, 12:58"


def test_capitalize_words():
    assert capitalize_words("broken clouds") == "Broken Clouds"
    assert capitalize_words("") == ""


def test_format_temperature():
    assert format_temperature(14.0) == "14.0 °C"
    assert format_temperature(12.34) == "12.3 °C"
    assert format_temperature(-3) == "-3.0 °C"
    assert format_temperature(None) == "N/A"


def test_icon_url():
    assert icon_url("04d") == "https://openweathermap.org/img/wn/04d@2x.png"
    assert icon_url("") == ""


def test_summary_lines(make_snapshot):
    snapshot = make_snapshot(wind_deg=93, sunrise=1684900000, sunset=1684958000)

    lines = summary_lines(snapshot)

    assert lines[0] == "London · GB"
    assert lines[1] == "Broken Clouds  12.5 °C"
    assert "E" in lines[3]
    assert any(line.startswith("Sunrise") for line in lines)
    assert lines[-1].startswith("Last updated")


def test_summary_flags_outdated_reading(make_snapshot):
    # fixture timestamp is from 2023
    assert summary_lines(make_snapshot())[-1].endswith("(outdated)")


def test_summary_fresh_reading(make_snapshot):
    now = int(datetime.now(timezone.utc).timestamp())
    snapshot = make_snapshot(timestamp=now - 600)

    assert not summary_lines(snapshot)[-1].endswith("(outdated)")
