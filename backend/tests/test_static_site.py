import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from backend.app.routers.static_site import SiteStaticFiles


pytestmark = pytest.mark.asyncio

INDEX = "<!doctype html><title>Reservas</title>"


@pytest_asyncio.fixture
async def site_client(tmp_path):
    (tmp_path / "index.html").write_text(INDEX, encoding="utf-8")
    (tmp_path / "styles.css").write_text("body { margin: 0 }", encoding="utf-8")

    site = FastAPI()

    @site.get("/api/ping")
    async def ping():
        return {"ok": True}

    site.mount("/", SiteStaticFiles(directory=tmp_path, excluded_prefixes=("/api",)), name="static")

    async with AsyncClient(transport=ASGITransport(app=site), base_url="http://test") as client:
        yield client


@pytest.mark.parametrize("path", ["/", "/reservar", "/reservas/confirmacion"])
async def test_page_paths_serve_index(site_client, path):
    response = await site_client.get(path)

    assert response.status_code == 200
    assert response.text == INDEX


async def test_existing_assets_are_served(site_client):
    response = await site_client.get("/styles.css")

    assert response.status_code == 200
    assert response.text == "body { margin: 0 }"


@pytest.mark.parametrize("path", ["/missing.js", "/api/unknown", "/api"])
async def test_missing_assets_and_api_paths_stay_404(site_client, path):
    response = await site_client.get(path)

    assert response.status_code == 404


async def test_api_routes_take_precedence(site_client):
    response = await site_client.get("/api/ping")

    assert response.json() == {"ok": True}
