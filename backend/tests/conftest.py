import pytest
import requests


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def gemini_reply(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture
def fake_gemini(monkeypatch):
    """Replace requests.post; set .response to control the reply, .calls records requests."""

    class Fake:
        response = FakeResponse(payload=gemini_reply("A quiet patch of ocean."))
        calls = []

        def __call__(self, url, **kwargs):
            self.calls.append((url, kwargs))
            if isinstance(self.response, Exception):
                raise self.response
            return self.response

    fake = Fake()
    fake.calls = []
    monkeypatch.setattr(requests, "post", fake)
    return fake


@pytest.fixture
def settings(tmp_path):
    return {
        "GEMINI_API_KEY": "test-key",
        "GEMINI_MODEL": "gemini-test",
        "GEMINI_API_BASE_URL": "https://example.test/v1beta",
        "GEMINI_TIMEOUT": 5,
        "DESCRIPTION_CACHE": True,
        "CACHE_DIR": tmp_path / "descriptions",
    }


@pytest.fixture
def collection():
    return {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "id": "inside", "properties": {"name": "Null Island"},
             "geometry": {"type": "Point", "coordinates": [1, 1]}},
            {"type": "Feature", "_id": "far", "properties": {},
             "geometry": {"type": "Point", "coordinates": [120, 40]}},
            {"type": "Feature", "properties": {"kind": "empty"}, "geometry": None},
        ],
    }


# Web Mercator box around lon/lat (-2..2, -2..2)
EXTENT = [-222638.98, -222684.21, 222638.98, 222684.21]
