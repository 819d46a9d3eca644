"""Shared fixtures."""
import pytest
from weather_data import WeatherSnapshot


def build_snapshot(**overrides) -> WeatherSnapshot:
    fields = dict(
        name="London",
        country="GB",
        temp=12.5,
        feels_like=11.0,
        humidity=70.0,
        wind_speed=4.1,
        condition_id=803,
        condition_main="Clouds",
        condition_description="broken clouds",
        icon="04d",
        timestamp=1684929490,
        timezone_offset=3600,
    )
    fields.update(overrides)
    return WeatherSnapshot(**fields)


@pytest.fixture
def make_snapshot():
    """Factory for snapshots with sensible defaults; pass fields to override."""
    return build_snapshot
