"""Integration tests for URL shortener."""

import httpx
import pytest

import app as app_module
from config import Config
from shortener.database.memory import InMemoryURLStore
from web_app import create_app


@pytest.fixture
def memory_config():
    return Config(_env_file=None, database_url="memory://", redis_url=None, base_url="http://testserver")


@pytest.mark.asyncio
class TestIntegration:
    """End-to-end tests through the application lifespan."""

    async def test_build_service_memory_backend(self, memory_config, logger):
        service = await app_module.build_service(memory_config, logger)

        try:
            assert isinstance(service.store, InMemoryURLStore)
            assert service.cache is None
            assert service.background.running
            assert service.generator.length == memory_config.short_code_length
        finally:
            await service.close(timeout=1.0)

        assert not service.background.running

    async def test_full_url_lifecycle(self, memory_config, logger):
        """Test complete URL shortening lifecycle."""
        fastapi_app = create_app(config=memory_config, logger=logger, lifespan=app_module.lifespan)

        async with app_module.lifespan(fastapi_app):
            service = fastapi_app.state.service
            transport = httpx.ASGITransport(app=fastapi_app)
            async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
                # 1. Create short URL via API
                create_response = await client.post(
                    "/api/shorten",
                    json={"url": "https://example.com/test"}
                )
                assert create_response.status_code == 201
                short_code = create_response.json()["short_code"]

                # 2. Analytics start empty
                analytics = await client.get(f"/api/analytics/{short_code}")
                assert analytics.status_code == 200
                assert analytics.json()["total_clicks"] == 0

                # 3. Access short URL (redirect)
                redirect_response = await client.get(f"/{short_code}")
                assert redirect_response.status_code == 302
                assert redirect_response.headers["location"] == "https://example.com/test"

                # 4. Verify the click was counted
                await service.background.join()
                analytics = await client.get(f"/api/analytics/{short_code}")
                assert analytics.json()["total_clicks"] == 1

        assert not service.background.running

    async def test_custom_alias_workflow(self, memory_config, logger):
        """Test workflow with a custom alias."""
        fastapi_app = create_app(config=memory_config, logger=logger)

        async with app_module.lifespan(fastapi_app):
            transport = httpx.ASGITransport(app=fastapi_app)
            async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
                response = await client.post(
                    "/api/shorten",
                    json={"url": "https://github.com/user/repo", "custom_alias": "mycustomlink"}
                )
                assert response.status_code == 201
                assert response.json()["short_code"] == "mycustomlink"

                redirect = await client.get("/mycustomlink")
                assert redirect.status_code == 302

                duplicate = await client.post(
                    "/api/shorten",
                    json={"url": "https://different-url.com", "custom_alias": "mycustomlink"}
                )
                assert duplicate.status_code == 409
