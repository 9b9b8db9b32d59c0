"""Tests for the /batch, /nutrition and /proxy-access endpoints.

The pipeline's fetcher is replaced with lightweight mocks so the tests run
without internet access.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from app.exceptions import FetchError
from app.main import app

client = TestClient(app)


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Clear the slowapi in-memory counter before every test."""
    app.state.limiter._storage.reset()
    yield


# ---------------------------------------------------------------------------
# Shared HTML fixtures
# ---------------------------------------------------------------------------

_SPEAKABLE_HTML = """
<!DOCTYPE html>
<html>
<head>
  <meta name="geo.placename" content="Madrid">
  <meta name="geo.region" content="ES-M">
  <script type="application/ld+json">
  {"@graph": [{"@type": "WebPage", "speakable": {"@type": "SpeakableSpecification", "xpath": ["//h1"]}}]}
  </script>
</head>
<body>
  <div class="container article-internal"><h1>A</h1><h1>B</h1></div>
</body>
</html>
"""

_ARTICLE_HTML = """
<html>
<head>
  <script type="application/ld+json">{"@type": "Article", "headline": "Feeding puppies", "author": "Vet Team"}</script>
</head>
<body><article class="content-format-- content-source--"></article></body>
</html>
"""


def _post(path: str, urls: str, **kwargs):
    return client.post(path, json={"urls": urls, **kwargs})


# ---------------------------------------------------------------------------
# POST /batch
# ---------------------------------------------------------------------------

class TestMetadataBatch:
    def test_successful_batch(self):
        with patch("app.services.pipeline.fetch_html", new=AsyncMock(return_value=_SPEAKABLE_HTML)):
            resp = _post("/batch", "example.com", transport="direct")

        assert resp.status_code == 200
        data = resp.json()
        assert data["errors"] == []
        record = data["records"][0]
        assert record["url"] == "https://example.com"
        assert record["page_type"] == "ART"
        assert record["geo_place_name"] == "Madrid"
        assert record["geo_region"] == "ES-M"
        assert record["speakable"] == [
            {"type": "SpeakableSpecification", "xpath": "//h1", "value": "A, B"}
        ]
        assert record["speakable_summary"] == "Type: SpeakableSpecification, XPath: //h1, Value: A, B"
        assert data["rows"] == [
            {
                "PageType": "ART",
                "URL": "https://example.com",
                "GeoPlaceName": "Madrid",
                "GeoRegion": "ES-M",
                "Speakable": "Type: SpeakableSpecification, XPath: //h1, Value: A, B",
            }
        ]

    def test_invalid_urls_return_400_without_fetching(self):
        fetch = AsyncMock(side_effect=AssertionError("must not fetch"))
        with patch("app.services.pipeline.fetch_html", new=fetch):
            resp = _post("/batch", "notaurl\nexample.com")

        assert resp.status_code == 400
        detail = resp.json()["detail"]
        assert detail["invalid_urls"] == ["notaurl"]
        assert "notaurl" in detail["message"]
        fetch.assert_not_called()

    def test_per_url_failure_is_reported_separately(self):
        async def fake_fetch(url, transport, client=None):
            if "broken" in url:
                raise FetchError(url, 404, "Not Found")
            return _SPEAKABLE_HTML

        with patch("app.services.pipeline.fetch_html", new=AsyncMock(side_effect=fake_fetch)):
            resp = _post("/batch", "example.com\nbroken.com")

        assert resp.status_code == 200
        data = resp.json()
        assert [r["url"] for r in data["records"]] == ["https://example.com"]
        assert data["errors"] == [
            {"url": "https://broken.com", "error": "Error processing this URL: Error 404: Not Found"}
        ]

    def test_transport_selection_reaches_fetcher(self):
        fetch = AsyncMock(return_value=_SPEAKABLE_HTML)
        with patch("app.services.pipeline.fetch_html", new=fetch):
            _post("/batch", "example.com", transport="proxied")

        transport = fetch.call_args.args[1]
        assert transport.mode == "proxied"

    def test_default_transport_from_settings(self):
        fetch = AsyncMock(return_value=_SPEAKABLE_HTML)
        with patch("app.services.pipeline.fetch_html", new=fetch):
            _post("/batch", "example.com")

        assert fetch.call_args.args[1].mode == "proxied"

    def test_unknown_transport_is_rejected(self):
        resp = _post("/batch", "example.com", transport="carrier-pigeon")
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# POST /nutrition
# ---------------------------------------------------------------------------

class TestSchemaBatch:
    def test_article_schema(self):
        with patch("app.services.pipeline.fetch_html", new=AsyncMock(return_value=_ARTICLE_HTML)):
            resp = _post("/nutrition", "purina.com/es/articulo")

        assert resp.status_code == 200
        record = resp.json()["records"][0]
        assert record["url"] == "https://www.purina.com/es/articulo"
        assert record["type"] == "REC"
        assert record["status"]["status"] == "article"
        assert record["status"]["severity"] == "ok"
        assert record["fields"]["headline"] == "Feeding puppies"
        assert record["fields"]["author"] == {"type": "String", "name": "Vet Team", "url": "N/A"}

    def test_page_without_schema(self):
        with patch(
            "app.services.pipeline.fetch_html",
            new=AsyncMock(return_value="<html><body><p>x</p></body></html>"),
        ):
            resp = _post("/nutrition", "example.com")

        record = resp.json()["records"][0]
        assert record["type"] == "UNK"
        assert record["status"]["status"] == "none"
        assert record["status"]["message"] == "No schema found."
        assert record["fields"] is None

    def test_invalid_urls_return_400(self):
        resp = _post("/nutrition", "bad one")
        assert resp.status_code == 400
        assert resp.json()["detail"]["invalid_urls"] == ["bad one"]


# ---------------------------------------------------------------------------
# Misc endpoints
# ---------------------------------------------------------------------------

class TestMiscEndpoints:
    def test_status_reports_batch_defaults(self):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json() == {
            "service": "pagemeta",
            "version": "1.0.0",
            "default_transport": "proxied",
            "max_concurrency": 10,
        }

    def test_proxy_access_url(self):
        resp = client.get("/proxy-access")
        assert resp.status_code == 200
        assert resp.json() == {"url": "https://cors-anywhere.herokuapp.com/corsdemo"}

    def test_missing_urls_field_is_422(self):
        resp = client.post("/batch", json={})
        assert resp.status_code == 422
