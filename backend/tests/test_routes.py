"""
CatRouter - HTTP Endpoint Tests
===============================

What:  End-to-end tests through the FastAPI app with the lifespan running.
How:   httpx AsyncClient over ASGITransport; uploads land in a tmp_path dir.

What we test:
    ✅ GET always 200 {"cats": []}, with or without a trailing slash
    ✅ POST stores the file and reports success (stored_path check)
    ✅ POST always reports failure with the legacy_literal check
    ✅ Forms without exactly one `image` file are rejected before storage
    ✅ Names with no final path component fail as a 400 result
    ✅ Upload outcomes reach the access log
    ✅ Concurrent same-name uploads: last write wins, no corruption
    ✅ GET-only variant, unload removes routes, health, request IDs
"""

import asyncio
import logging

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from catrouter.config import ROUTER_PATH as CATS_PATH, Settings
from catrouter.main import create_app


class TestListCats:

    @pytest.mark.asyncio
    async def test_get_returns_empty_list(self, test_client):
        response = await test_client.get(CATS_PATH)

        assert response.status_code == 200
        assert response.json() == {"cats": []}

    @pytest.mark.asyncio
    async def test_get_with_trailing_slash_is_served_directly(self, test_client):
        response = await test_client.get(CATS_PATH + "/")

        assert response.status_code == 200
        assert response.json() == {"cats": []}

    @pytest.mark.asyncio
    async def test_get_ignores_query_and_headers(self, test_client):
        response = await test_client.get(
            CATS_PATH,
            params={"page": 3, "limit": 1, "name": "tom"},
            headers={"Accept-Language": "fr", "X-Anything": "1"},
        )

        assert response.status_code == 200
        assert response.json() == {"cats": []}

    @pytest.mark.asyncio
    async def test_response_carries_request_id(self, test_client):
        response = await test_client.get(CATS_PATH, headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"


class TestUploadImage:

    @pytest.mark.asyncio
    async def test_upload_success(self, test_client, upload_dir, sample_image_bytes):
        response = await test_client.post(
            CATS_PATH,
            files={"image": ("tom.jpg", sample_image_bytes, "image/jpeg")},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "error": None}
        assert (upload_dir / "tom.jpg").read_bytes() == sample_image_bytes

    @pytest.mark.asyncio
    async def test_upload_missing_image_field_rejected(self, test_client, upload_dir):
        response = await test_client.post(CATS_PATH, data={"name": "tom"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "upload_rejected"
        assert "image" in body["message"]
        assert list(upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_upload_wrong_field_rejected(self, test_client, upload_dir, sample_image_bytes):
        response = await test_client.post(
            CATS_PATH,
            files={"photo": ("tom.jpg", sample_image_bytes, "image/jpeg")},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Unexpected field 'photo'"
        assert list(upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_upload_two_files_rejected(self, test_client, upload_dir):
        response = await test_client.post(
            CATS_PATH,
            files=[
                ("image", ("a.jpg", b"a", "image/jpeg")),
                ("image", ("b.jpg", b"b", "image/jpeg")),
            ],
        )

        assert response.status_code == 400
        assert response.json()["error"] == "upload_rejected"
        assert list(upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_upload_plain_value_rejected(self, test_client, upload_dir):
        response = await test_client.post(CATS_PATH, data={"image": "not a file"})

        assert response.status_code == 400
        assert response.json()["message"] == "Field 'image' must be a file"
        assert list(upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_upload_rootlike_filename_reports_failure(self, test_client, upload_dir):
        response = await test_client.post(
            CATS_PATH,
            files={"image": ("/", b"x", "image/jpeg")},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Cannot store upload named '/'"
        assert list(upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_upload_with_trailing_slash(self, test_client, upload_dir, sample_image_bytes):
        response = await test_client.post(
            CATS_PATH + "/",
            files={"image": ("tom.jpg", sample_image_bytes, "image/jpeg")},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "error": None}
        assert (upload_dir / "tom.jpg").read_bytes() == sample_image_bytes

    @pytest.mark.asyncio
    async def test_upload_outcomes_reach_access_log(self, test_client, caplog, sample_image_bytes):
        caplog.set_level(logging.INFO, logger="catrouter.access")

        await test_client.post(
            CATS_PATH,
            files={"image": ("tom.jpg", sample_image_bytes, "image/jpeg")},
        )
        await test_client.post(CATS_PATH, data={"name": "tom"})

        outcomes = [
            (record.levelno, record.upload_outcome)
            for record in caplog.records
            if record.name == "catrouter.access"
        ]
        assert outcomes == [(logging.INFO, "stored"), (logging.WARNING, "rejected")]

    @pytest.mark.asyncio
    async def test_concurrent_same_name_uploads(self, test_client, upload_dir):
        first, second = b"1" * 50_000, b"2" * 80_000

        responses = await asyncio.gather(
            test_client.post(CATS_PATH, files={"image": ("same.jpg", first, "image/jpeg")}),
            test_client.post(CATS_PATH, files={"image": ("same.jpg", second, "image/jpeg")}),
        )

        assert [r.status_code for r in responses] == [200, 200]
        assert (upload_dir / "same.jpg").read_bytes() in (first, second)


class TestLegacyExistenceCheck:
    """The literal placeholder path never exists, so every upload fails."""

    @pytest_asyncio.fixture
    async def legacy_client(self, upload_dir):
        app = create_app(
            Settings(upload_dir=str(upload_dir), existence_check="legacy_literal")
        )
        async with app.router.lifespan_context(app):
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
                yield client

    @pytest.mark.asyncio
    async def test_upload_always_fails(self, legacy_client, upload_dir, sample_image_bytes):
        response = await legacy_client.post(
            CATS_PATH,
            files={"image": ("tom.jpg", sample_image_bytes, "image/jpeg")},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"]
        # Storage itself happened; only the check targets the wrong path
        assert (upload_dir / "tom.jpg").exists()


class TestGetOnlyVariant:

    @pytest_asyncio.fixture
    async def get_only_client(self, upload_dir):
        app = create_app(Settings(upload_dir=str(upload_dir), enable_uploads=False))
        async with app.router.lifespan_context(app):
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
                yield client

    @pytest.mark.asyncio
    async def test_get_works(self, get_only_client):
        response = await get_only_client.get(CATS_PATH)
        assert response.json() == {"cats": []}

    @pytest.mark.asyncio
    async def test_post_not_routed(self, get_only_client, upload_dir):
        response = await get_only_client.post(
            CATS_PATH,
            files={"image": ("tom.jpg", b"x", "image/jpeg")},
        )

        assert response.status_code == 405
        assert list(upload_dir.iterdir()) == []


class TestModuleLifecycleOnApp:

    @pytest.mark.asyncio
    async def test_routes_absent_before_startup(self, test_app):
        async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as client:
            response = await client.get(CATS_PATH)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unload_removes_routes_and_reload_restores(self, test_app, test_client):
        cat_router = test_app.state.cat_router
        host = test_app.state.host

        await cat_router.unload()
        assert (await test_client.get(CATS_PATH)).status_code == 404
        assert (await test_client.get(CATS_PATH + "/")).status_code == 404
        assert host.mounts() == []

        await cat_router.load(host)
        assert (await test_client.get(CATS_PATH)).status_code == 200
        assert host.mounts() == [CATS_PATH]

    @pytest.mark.asyncio
    async def test_shutdown_unmounts(self, test_app):
        async with test_app.router.lifespan_context(test_app):
            assert test_app.state.cat_router.loaded
        assert not test_app.state.cat_router.loaded
        assert test_app.state.host.mounts() == []


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy_when_mounted(self, test_client, upload_dir):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["modules"] == [CATS_PATH]
        assert body["upload_dir"] == str(upload_dir.resolve())
        assert body["upload_dir_writable"] is True

    @pytest.mark.asyncio
    async def test_degraded_when_unloaded(self, test_app, test_client):
        await test_app.state.cat_router.unload()

        body = (await test_client.get("/health")).json()

        assert body["status"] == "degraded"
        assert body["modules"] == []
