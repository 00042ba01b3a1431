import pytest
import requests

from app.src import exceptions, geocoder, openobserve, router
from app.src.schemas import Coordinate


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


START = Coordinate(latitude=8.5241, longitude=76.9366)
END = Coordinate(latitude=8.4875, longitude=76.9525)


## Geocoder
def test_geocode_returns_best_match(monkeypatch):
    calls = []

    def fakeGet(url, params, headers, timeout):
        calls.append(params)
        return FakeResponse([{"lat": "8.5241", "lon": "76.9366"}])

    monkeypatch.setattr(requests, "get", fakeGet)

    coordinate = geocoder.geocode("Kowdiar, Thiruvananthapuram")

    assert coordinate == START
    assert calls == [{"q": "Kowdiar, Thiruvananthapuram", "format": "json", "limit": 1}]


def test_geocode_unknown_address(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *args, **kwargs: FakeResponse([]))

    assert geocoder.geocode("Nowhere Lane") is None


def test_geocode_service_down(monkeypatch):
    def fakeGet(*args, **kwargs):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(requests, "get", fakeGet)

    with pytest.raises(exceptions.LocationServiceUnavailable):
        geocoder.geocode("Kowdiar, Thiruvananthapuram")


def test_geocode_bad_reply(monkeypatch):
    monkeypatch.setattr(
        requests, "get", lambda *args, **kwargs: FakeResponse([{"name": "Kowdiar"}])
    )

    with pytest.raises(exceptions.LocationServiceUnavailable):
        geocoder.geocode("Kowdiar, Thiruvananthapuram")


## Router
def test_road_distance_in_km(monkeypatch):
    urls = []

    def fakeGet(url, params, timeout):
        urls.append(url)
        return FakeResponse({"code": "Ok", "routes": [{"distance": 5230.0}]})

    monkeypatch.setattr(requests, "get", fakeGet)

    assert router.roadDistanceKm(START, END) == 5.23
    assert urls[0].endswith("/76.9366,8.5241;76.9525,8.4875")


def test_road_distance_without_route(monkeypatch):
    monkeypatch.setattr(
        requests, "get", lambda *args, **kwargs: FakeResponse({"code": "NoRoute"})
    )

    with pytest.raises(exceptions.LocationNotFound):
        router.roadDistanceKm(START, END)


@pytest.mark.parametrize(
    "payload",
    [
        {"code": "InvalidQuery", "message": "Query string malformed"},
        {"code": "Ok", "routes": []},
        ["unexpected"],
        ValueError("not json"),
    ],
)
def test_road_distance_service_errors(monkeypatch, payload):
    monkeypatch.setattr(requests, "get", lambda *args, **kwargs: FakeResponse(payload))

    with pytest.raises(exceptions.LocationServiceUnavailable):
        router.roadDistanceKm(START, END)


## OpenObserve
def test_log_event_disabled_sends_nothing(monkeypatch):
    def fakePost(*args, **kwargs):
        raise AssertionError("nothing should be sent")

    monkeypatch.setattr(requests, "post", fakePost)

    assert openobserve.logEvent({"_path": "/health"}, enabled=False) is None


def test_log_event_failure_is_swallowed(monkeypatch):
    def fakePost(*args, **kwargs):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(requests, "post", fakePost)

    assert openobserve.logEvent({"_path": "/health"}, enabled=True) is None
