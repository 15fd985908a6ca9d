"""Tests for API endpoints."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from shortener.common.validators import MAX_EXPIRY_HOURS
from shortener.database.models import ShortURL
from shortener.errors import StoreError


async def shorten(client, url, **extra):
    return await client.post("/api/shorten", json={"url": url, **extra})


@pytest.mark.asyncio
class TestShortenEndpoint:
    """Test POST /api/shorten."""

    async def test_shorten_url(self, client, sample_urls):
        response = await shorten(client, sample_urls[0])

        assert response.status_code == 201
        data = response.json()
        assert len(data["short_code"]) == 7
        assert data["original_url"] == sample_urls[0]
        assert data["short_url"] == f"http://testserver/{data['short_code']}"
        assert data["expires_at"] is None

    async def test_shorten_with_alias_and_expiry(self, client, sample_urls):
        response = await shorten(client, sample_urls[1], custom_alias="my-repo", expiry_hours=24)

        assert response.status_code == 201
        data = response.json()
        assert data["short_code"] == "my-repo"
        assert data["expires_at"] is not None

    async def test_short_url_uses_forwarded_headers(self, client, sample_urls):
        response = await client.post(
            "/api/shorten",
            json={"url": sample_urls[0], "custom_alias": "fwdlink"},
            headers={"X-Forwarded-Proto": "https", "X-Forwarded-Host": "sho.rt"},
        )

        assert response.json()["short_url"] == "https://sho.rt/fwdlink"

    async def test_duplicate_alias(self, client, sample_urls):
        first = await shorten(client, sample_urls[0], custom_alias="taken")
        second = await shorten(client, sample_urls[1], custom_alias="taken")

        assert first.status_code == 201
        assert second.status_code == 409
        assert "taken" in second.json()["detail"]

    async def test_invalid_url(self, client):
        response = await shorten(client, "not-a-url")

        assert response.status_code == 422

    async def test_reserved_alias(self, client, sample_urls):
        response = await shorten(client, sample_urls[0], custom_alias="healthz")

        assert response.status_code == 422

    async def test_non_positive_expiry(self, client, sample_urls):
        response = await shorten(client, sample_urls[0], expiry_hours=0)

        assert response.status_code == 422

    async def test_expiry_upper_bound(self, client, sample_urls):
        too_long = await shorten(client, sample_urls[0], expiry_hours=100_000_000)
        at_limit = await shorten(client, sample_urls[0], expiry_hours=MAX_EXPIRY_HOURS)

        assert too_long.status_code == 422
        assert at_limit.status_code == 201

    async def test_aliases_disabled(self, client, service, sample_urls):
        service.enable_custom_aliases = False

        response = await shorten(client, sample_urls[0], custom_alias="mylink")

        assert response.status_code == 400

    async def test_request_id_header(self, client, sample_urls):
        response = await shorten(client, sample_urls[0])
        assert response.headers["X-Request-ID"]

        response = await client.get("/healthz", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"


@pytest.mark.asyncio
class TestRedirectEndpoint:
    """Test GET /{short_code}."""

    async def test_redirect(self, client, service, sample_urls):
        code = (await shorten(client, sample_urls[0])).json()["short_code"]

        response = await client.get(f"/{code}")

        assert response.status_code == 302
        assert response.headers["location"] == sample_urls[0]
        assert response.headers["X-Cache-Hit"] == "false"

    async def test_second_redirect_served_from_cache(self, client, service, sample_urls):
        code = (await shorten(client, sample_urls[0])).json()["short_code"]

        await client.get(f"/{code}")
        await service.background.join()
        response = await client.get(f"/{code}")

        assert response.status_code == 302
        assert response.headers["X-Cache-Hit"] == "true"

    async def test_redirect_records_click(self, client, service, sample_urls):
        await shorten(client, sample_urls[0], custom_alias="clicked")

        await client.get(
            "/clicked",
            headers={
                "User-Agent": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) Mobile",
                "Referer": "https://news.example.com",
                "X-Forwarded-For": "203.0.113.7, 10.0.0.1",
            },
        )
        await service.background.join()

        history = await client.get("/api/analytics/clicked/clicks")
        click = history.json()["clicks"][0]
        assert click["ip_address"] == "203.0.113.7"
        assert click["referer"] == "https://news.example.com"
        assert click["device_type"] == "mobile"

    async def test_unknown_code(self, client):
        response = await client.get("/nothere")

        assert response.status_code == 404

    async def test_expired_code(self, client, service, sample_urls):
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        await service.store.create(
            ShortURL(short_code="oldlink", original_url=sample_urls[0], expires_at=past)
        )

        response = await client.get("/oldlink")

        assert response.status_code == 404

    async def test_store_failure(self, client, service, monkeypatch):
        monkeypatch.setattr(
            service.store, "get_by_short_code", AsyncMock(side_effect=StoreError("db down"))
        )

        response = await client.get("/abcdefg")

        assert response.status_code == 500


@pytest.mark.asyncio
class TestAnalyticsEndpoints:
    """Test GET /api/analytics/..."""

    async def test_analytics(self, client, service, sample_urls):
        await shorten(client, sample_urls[0], custom_alias="stats")
        for ip in ("1.1.1.1", "2.2.2.2", "1.1.1.1"):
            await client.get("/stats", headers={"X-Real-IP": ip})
        await service.background.join()

        response = await client.get("/api/analytics/stats", params={"days": 7})

        assert response.status_code == 200
        data = response.json()
        assert data["short_code"] == "stats"
        assert data["original_url"] == sample_urls[0]
        assert data["total_clicks"] == 3
        assert data["unique_ips"] == 2
        assert data["clicks_by_date"][0]["count"] == 3
        assert data["top_referrers"] == [{"referer": "Direct", "count": 3}]
        assert data["device_stats"]["unknown"] == 3

    async def test_analytics_unknown_code(self, client):
        response = await client.get("/api/analytics/nothere")

        assert response.status_code == 404

    async def test_analytics_days_bounds(self, client):
        assert (await client.get("/api/analytics/x?days=0")).status_code == 422
        assert (await client.get("/api/analytics/x?days=366")).status_code == 422

    async def test_click_history_pagination(self, client, service, sample_urls):
        await shorten(client, sample_urls[0], custom_alias="paged")
        for _ in range(5):
            await client.get("/paged")
        await service.background.join()

        response = await client.get("/api/analytics/paged/clicks", params={"page": 2, "page_size": 2})

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 5
        assert data["page"] == 2
        assert data["page_size"] == 2
        assert data["total_pages"] == 3
        assert len(data["clicks"]) == 2

    async def test_click_history_bounds(self, client):
        assert (await client.get("/api/analytics/x/clicks?page=0")).status_code == 422
        assert (await client.get("/api/analytics/x/clicks?page_size=101")).status_code == 422


@pytest.mark.asyncio
class TestHealthEndpoints:
    """Test readiness and liveness."""

    async def test_health(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "healthy"
        assert data["cache"] == "healthy"

    async def test_health_unhealthy_cache(self, client, service, monkeypatch):
        monkeypatch.setattr(service.cache, "health_check", AsyncMock(return_value=False))

        response = await client.get("/api/health")

        assert response.status_code == 503
        detail = response.json()["detail"]
        assert detail["status"] == "unhealthy"
        assert detail["cache"] == "unhealthy"

    async def test_liveness(self, client):
        response = await client.get("/healthz")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
