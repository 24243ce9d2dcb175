import re

from conftest import FakeExtractor


class ExplodingExtractor:
    async def extract_title(self, url, **kwargs):  # pragma: no cover - must never run
        raise AssertionError("health check touched the browser")


def test_status_reports_service_identity(client_factory):
    client = client_factory(ExplodingExtractor(), service_name="titles", service_version="9.9.9")

    resp = client.get("/status")

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/json; charset=utf-8"
    body = resp.json()
    assert body["ok"] is True
    assert body["service"] == "titles"
    assert body["version"] == "9.9.9"
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", body["timestamp"])


def test_healthz_alias_does_not_invoke_extractor(client_factory):
    extractor = FakeExtractor()
    client = client_factory(extractor)

    assert client.get("/healthz").json()["ok"] is True
    assert client.get("/status").status_code == 200
    assert extractor.calls == []
