"""
Tests for the theme endpoints and their response cache.
"""

import pytest
import pytest_asyncio

from cvbuilder.services.themes import seed_default_themes

NEW_THEME = {
    "name": "ocean",
    "displayName": "Ocean",
    "description": "Blue tones",
    "colors": {"primary": "#006699"},
    "typography": {"main": "Lato, sans-serif"},
    "useCase": "general",
}


@pytest_asyncio.fixture
async def seeded(session_factory):
    async with session_factory() as session:
        await seed_default_themes(session)


async def theme_id_by_name(client, name: str) -> str:
    themes = (await client.get("/api/themes")).json()["data"]
    return next(theme["id"] for theme in themes if theme["name"] == name)


class TestThemes:
    @pytest.mark.asyncio
    async def test_list_sorted_by_display_name(self, client, seeded):
        response = await client.get("/api/themes")

        assert response.status_code == 200
        names = [theme["displayName"] for theme in response.json()["data"]]
        assert names == ["Minimal", "Modern", "Professional"]

    @pytest.mark.asyncio
    async def test_list_is_cached(self, client, seeded):
        first = await client.get("/api/themes")
        second = await client.get("/api/themes")

        assert first.headers["X-Cache"] == "MISS"
        assert second.headers["X-Cache"] == "HIT"
        assert second.json() == first.json()

    @pytest.mark.asyncio
    async def test_create_invalidates_cache(self, client, seeded):
        await client.get("/api/themes")

        created = await client.post("/api/themes", json=NEW_THEME)
        assert created.status_code == 201
        theme = created.json()["data"]
        assert theme["colors"]["secondary"] == "#666666"
        assert theme["fontSizes"]["sectionHeader"] == "14pt"

        listing = await client.get("/api/themes")
        assert listing.headers["X-Cache"] == "MISS"
        assert len(listing.json()["data"]) == 4

    @pytest.mark.asyncio
    async def test_create_duplicate_name(self, client, seeded):
        response = await client.post("/api/themes", json={**NEW_THEME, "name": "modern"})

        assert response.status_code == 400
        assert response.json()["message"] == "Theme name already exists"

    @pytest.mark.asyncio
    async def test_create_invalid_color(self, client):
        response = await client.post("/api/themes", json={**NEW_THEME, "colors": {"primary": "blue"}})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_new_default_clears_previous(self, client, seeded):
        created = await client.post("/api/themes", json={**NEW_THEME, "isDefault": True})
        assert created.json()["data"]["isDefault"] is True

        themes = (await client.get("/api/themes")).json()["data"]
        defaults = [theme["name"] for theme in themes if theme["isDefault"]]
        assert defaults == ["ocean"]

    @pytest.mark.asyncio
    async def test_update(self, client, seeded):
        theme_id = await theme_id_by_name(client, "modern")

        response = await client.put(
            f"/api/themes/{theme_id}",
            json={"displayName": "Modern Blue", "fontSizes": {"sectionHeader": "15pt"}},
        )

        assert response.status_code == 200
        theme = response.json()["data"]
        assert theme["displayName"] == "Modern Blue"
        assert theme["fontSizes"]["sectionHeader"] == "15pt"
        assert theme["colors"]["primary"] == "#3498db"

    @pytest.mark.asyncio
    async def test_get_unknown(self, client):
        response = await client.get("/api/themes/missing")

        assert response.status_code == 404
        assert response.json()["message"] == "Theme not found"

    @pytest.mark.asyncio
    async def test_delete(self, client, seeded):
        theme_id = await theme_id_by_name(client, "minimal")

        response = await client.delete(f"/api/themes/{theme_id}")

        assert response.json() == {"success": True, "message": "Theme removed"}
        assert (await client.get(f"/api/themes/{theme_id}")).status_code == 404

    @pytest.mark.asyncio
    async def test_cannot_delete_default(self, client, seeded):
        theme_id = await theme_id_by_name(client, "professional")

        response = await client.delete(f"/api/themes/{theme_id}")

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot delete default theme"
