"""Tests for OpenWeather provider."""
import pytest
import requests
from unittest.mock import Mock, patch
from openweather_provider import OpenWeatherProvider
from weather_provider import WeatherProviderError, PlaceNotFoundError, InvalidPayloadError
from weather_data import WeatherSnapshot


@pytest.fixture
def sample_openweather_response():
    """Sample OpenWeather API response."""
    return {
        "coord": {"lon": -0.1257, "lat": 51.5085},
        "weather": [
            {
                "id": 803,
                "main": "Clouds",
                "description": "broken clouds",
                "icon": "04d"
            }
        ],
        "base": "stations",
        "main": {
            "temp": 14.2,
            "feels_like": 13.6,
            "temp_min": 12.9,
            "temp_max": 15.3,
            "pressure": 1014,
            "humidity": 72
        },
        "visibility": 10000,
        "wind": {"speed": 3.13, "deg": 93, "gust": 6.2},
        "clouds": {"all": 75},
        "dt": 1684929490,
        "sys": {"country": "GB", "sunrise": 1684900000, "sunset": 1684958000},
        "timezone": 3600,
        "name": "London",
        "id": 2643743,
        "cod": 200
    }


@pytest.fixture
def provider():
    """Create OpenWeather provider instance."""
    return OpenWeatherProvider(api_key="test_key", units="metric")


def mock_response(ok=True, status_code=200, payload=None, json_error=False, text=""):
    response = Mock()
    response.ok = ok
    response.status_code = status_code
    response.text = text
    if json_error:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = payload
    return response


def test_openweather_provider_success(provider, sample_openweather_response):
    """Test successful API call and parsing."""
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = mock_response(payload=sample_openweather_response)

        weather = provider.get_weather("London")

        assert isinstance(weather, WeatherSnapshot)
        assert weather.name == "London"
        assert weather.country == "GB"
        assert weather.label == "London, GB"
        assert weather.temp == 14.2
        assert weather.feels_like == 13.6
        assert weather.humidity == 72.0
        assert weather.wind_speed == 3.13
        assert weather.wind_deg == 93
        assert weather.wind_gust == 6.2
        assert weather.condition_id == 803
        assert weather.condition_main == "Clouds"
        assert weather.icon == "04d"
        assert weather.timestamp == 1684929490
        assert weather.timezone_offset == 3600
        assert weather.sunrise == 1684900000
        assert weather.sunset == 1684958000
        assert weather.visibility == 10000


def test_openweather_provider_sends_query(provider, sample_openweather_response):
    """The typed place is trimmed and sent as q= with metric units."""
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = mock_response(payload=sample_openweather_response)

        provider.get_weather("  London  ")

        params = mock_get.call_args.kwargs["params"]
        assert params["q"] == "London"
        assert params["units"] == "metric"
        assert params["appid"] == "test_key"
        assert mock_get.call_args.kwargs["timeout"] == 10


def test_openweather_provider_without_sun_times(provider, sample_openweather_response):
    """Missing sys sunrise/sunset parse as None."""
    sample_openweather_response["sys"] = {"country": "NO"}
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = mock_response(payload=sample_openweather_response)

        weather = provider.get_weather("Longyearbyen")

        assert weather.sunrise is None
        assert weather.sunset is None
        assert weather.has_sun_times is False


def test_openweather_provider_not_found(provider):
    """404 is reported as a not-found failure."""
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = mock_response(
            ok=False, status_code=404, payload={"cod": "404", "message": "city not found"}
        )

        with pytest.raises(PlaceNotFoundError):
            provider.get_weather("Nowhereville")


def test_openweather_provider_http_error(provider):
    """Other HTTP errors are invalid payload failures carrying the API message."""
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = mock_response(
            ok=False, status_code=401, payload={"cod": 401, "message": "Invalid API key"}
        )

        with pytest.raises(InvalidPayloadError) as exc_info:
            provider.get_weather("London")

        assert "401" in str(exc_info.value)
        assert "Invalid API key" in str(exc_info.value)


def test_openweather_provider_non_json_error(provider):
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = mock_response(
            ok=False, status_code=502, json_error=True, text="Bad Gateway"
        )

        with pytest.raises(InvalidPayloadError) as exc_info:
            provider.get_weather("London")

        assert "HTTP 502" in str(exc_info.value)


def test_openweather_provider_unsuccessful_cod(provider, sample_openweather_response):
    """A 2xx response whose cod is not 200 is invalid."""
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = mock_response(payload={"cod": "500", "message": "Internal error"})

        with pytest.raises(InvalidPayloadError) as exc_info:
            provider.get_weather("London")

        assert "Internal error" in str(exc_info.value)


def test_openweather_provider_network_error(provider):
    """Test handling of network errors."""
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.side_effect = requests.exceptions.ConnectionError("Connection timeout")

        with pytest.raises(WeatherProviderError) as exc_info:
            provider.get_weather("London")

        assert "Network error" in str(exc_info.value)
        assert not isinstance(exc_info.value, PlaceNotFoundError)


def test_openweather_provider_missing_main(provider):
    """Test handling of missing main block."""
    response = {
        "weather": [{"id": 800, "main": "Clear", "description": "clear sky"}],
        "name": "London",
        "cod": 200
    }

    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = mock_response(payload=response)

        with pytest.raises(InvalidPayloadError) as exc_info:
            provider.get_weather("London")

        assert "missing 'main' block" in str(exc_info.value)


def test_openweather_provider_missing_weather(provider):
    """Test handling of missing 'weather' array."""
    response = {
        "main": {"temp": 20.0},
        "dt": 1684929490,
        "timezone": -18000,
        "weather": [],
        "name": "London",
        "cod": 200
    }

    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = mock_response(payload=response)

        with pytest.raises(InvalidPayloadError) as exc_info:
            provider.get_weather("London")

        assert "missing 'weather' array" in str(exc_info.value)


def test_openweather_provider_bad_temperature(provider, sample_openweather_response):
    """Unparseable values are invalid payloads, not crashes."""
    sample_openweather_response["main"]["temp"] = "warm"
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = mock_response(payload=sample_openweather_response)

        with pytest.raises(InvalidPayloadError) as exc_info:
            provider.get_weather("London")

        assert "Failed to parse response" in str(exc_info.value)


@pytest.mark.parametrize("key, value, message", [
    ("weather", ["rain"], "Malformed 'weather' array"),
    ("weather", "rain", "Malformed 'weather' array"),
    ("main", [14.2], "Malformed 'main' block"),
    ("sys", ["GB"], "Malformed 'sys' block"),
    ("wind", [3], "Malformed 'wind' block"),
])
def test_openweather_provider_wrongly_typed_blocks(provider, sample_openweather_response, key, value, message):
    """Blocks of the wrong JSON type are invalid payloads with a readable message."""
    sample_openweather_response[key] = value
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = mock_response(payload=sample_openweather_response)

        with pytest.raises(InvalidPayloadError) as exc_info:
            provider.get_weather("London")

        assert str(exc_info.value) == message


def test_openweather_provider_null_optional_blocks(provider, sample_openweather_response):
    sample_openweather_response["sys"] = None
    sample_openweather_response["wind"] = None
    with patch('openweather_provider.requests.get') as mock_get:
        mock_get.return_value = mock_response(payload=sample_openweather_response)

        weather = provider.get_weather("London")

    assert weather.country == ""
    assert weather.wind_speed == 0.0
    assert weather.has_sun_times is False
