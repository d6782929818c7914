"""Tests for weather collection: provider mapping, dew point and /api/weather."""

import httpx
import pytest

from app.config import Settings
from core.exceptions import ServiceUnavailableError, UpstreamError
from services.weather_service import WeatherService, calc_dew_point

PROVIDER_PAYLOAD = {
    "location": {
        "name": "Villarrica",
        "region": "Araucania",
        "country": "Chile",
        "lat": -39.28,
        "lon": -72.23,
    },
    "current": {
        "temp_c": 18.5,
        "humidity": 65,
        "feelslike_c": 18.1,
        "pressure_mb": 1016.0,
        "wind_kph": 11.2,
        "wind_dir": "SW",
        "condition": {"text": "Partly cloudy"},
    },
}


def provider(status_code=200, payload=None, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=payload if payload is not None else PROVIDER_PAYLOAD)

    return httpx.MockTransport(handler)


def configured_settings(**overrides):
    values = {"WEATHER_API_KEY": "test-key", "WEATHER_API_URL": "http://weather.test/v1"}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def use_weather(app):
    """Route the API's WeatherService through a mock provider."""
    from api.routes.weather import get_weather_service
    from app.dependencies import get_db
    from fastapi import Depends

    def _install(transport, settings=None):
        def override(db=Depends(get_db)):
            return WeatherService(db, settings=settings or configured_settings(), transport=transport)

        app.dependency_overrides[get_weather_service] = override

    return _install


@pytest.mark.unit
class TestDewPoint:

    def test_known_value(self):
        # 20 °C at 50 % RH is about 9.25 °C
        assert calc_dew_point(20, 50) == pytest.approx(9.25, abs=0.01)

    def test_saturated_air_equals_temperature(self):
        assert calc_dew_point(15, 100) == pytest.approx(15, abs=0.01)

    @pytest.mark.parametrize("temperature,humidity", [(None, 50), (20, None), (20, 0)])
    def test_missing_inputs(self, temperature, humidity):
        assert calc_dew_point(temperature, humidity) is None


@pytest.mark.unit
class TestWeatherService:

    async def test_collect_maps_and_stores(self, db_session):
        seen = []
        svc = WeatherService(db_session, settings=configured_settings(), transport=provider(seen=seen))
        reading = await svc.collect()

        assert reading.location_name == "Villarrica"
        assert reading.country == "Chile"
        assert reading.temperature == 18.5
        assert reading.humidity == 65
        assert reading.feels_like == 18.1
        assert reading.wind_direction == "SW"
        assert reading.condition == "Partly cloudy"
        assert reading.dew_point == calc_dew_point(18.5, 65)

        request = seen[0]
        assert request.url.path == "/v1/current.json"
        assert request.url.params["key"] == "test-key"
        assert request.url.params["q"] == "Villarrica,Chile"

        latest = await svc.latest()
        assert latest.id == reading.id

    async def test_location_override(self, db_session):
        seen = []
        svc = WeatherService(db_session, settings=configured_settings(), transport=provider(seen=seen))
        await svc.collect("Pucon,Chile")
        assert seen[0].url.params["q"] == "Pucon,Chile"

    async def test_not_configured(self, db_session):
        svc = WeatherService(db_session, settings=Settings(WEATHER_API_KEY=""), transport=provider())
        with pytest.raises(ServiceUnavailableError):
            await svc.collect()

    async def test_provider_error_status(self, db_session):
        svc = WeatherService(
            db_session,
            settings=configured_settings(),
            transport=provider(status_code=401, payload={"error": {"message": "bad key"}}),
        )
        with pytest.raises(UpstreamError, match="HTTP 401"):
            await svc.collect()

    async def test_provider_unreachable(self, db_session):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        svc = WeatherService(db_session, settings=configured_settings(), transport=httpx.MockTransport(handler))
        with pytest.raises(UpstreamError):
            await svc.collect()

    async def test_payload_without_location(self, db_session):
        svc = WeatherService(db_session, settings=configured_settings(), transport=provider(payload={"current": {}}))
        with pytest.raises(UpstreamError):
            await svc.collect()

    async def test_latest_empty(self, db_session):
        assert await WeatherService(db_session, settings=configured_settings()).latest() is None


@pytest.mark.integration
class TestWeatherApi:

    async def test_collect_as_editor(self, client, editor, use_weather):
        use_weather(provider())
        _, headers = editor
        resp = await client.post("/api/weather/collect", headers=headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["data"]["location_name"] == "Villarrica"
        assert body["data"]["dew_point"] is not None

        resp = await client.get("/api/weather/latest")
        assert resp.status_code == 200
        assert resp.json()["temperature"] == 18.5

    async def test_collect_forbidden_for_viewer(self, client, viewer, use_weather):
        use_weather(provider())
        _, headers = viewer
        resp = await client.post("/api/weather/collect", headers=headers)
        assert resp.status_code == 403

    async def test_collect_requires_token(self, client, use_weather):
        use_weather(provider())
        resp = await client.post("/api/weather/collect")
        assert resp.status_code == 401

    async def test_collect_not_configured_503(self, client, admin, use_weather):
        use_weather(provider(), settings=Settings(WEATHER_API_KEY=""))
        _, headers = admin
        resp = await client.post("/api/weather/collect", headers=headers)
        assert resp.status_code == 503
        assert resp.json()["error_code"] == "service_unavailable"

    async def test_collect_upstream_failure_502(self, client, admin, use_weather):
        use_weather(provider(status_code=500, payload={}))
        _, headers = admin
        resp = await client.post("/api/weather/collect", headers=headers)
        assert resp.status_code == 502

    async def test_latest_empty_404(self, client):
        resp = await client.get("/api/weather/latest")
        assert resp.status_code == 404

    async def test_config_hides_key(self, client, viewer):
        _, headers = viewer
        resp = await client.get("/api/weather/config", headers=headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["configured"] is False
        assert body["location"] == "Villarrica,Chile"
        assert "key" not in body
