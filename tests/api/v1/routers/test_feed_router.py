"""Unit tests for the feed router against the in-memory store."""

from datetime import timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from livecast.api.errors import app_error_handler
from livecast.api.v1.dependency import get_feed_service
from livecast.api.v1.routers.feed import router
from livecast.domain.feed.feed_domain import FeedService
from livecast.schemas import ContentVisibility
from livecast.shared.utils.timeutil import utc_now
from livecast.utils.app_errors import AppError
from tests.fixtures.store_fixtures import make_content


@pytest.fixture
def test_app(memory_store) -> FastAPI:
    app = FastAPI()
    app.dependency_overrides[get_feed_service] = lambda: FeedService(memory_store, default_page_size=20)
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.include_router(router)
    return app


@pytest.fixture
def client(test_app: FastAPI) -> TestClient:
    return TestClient(test_app)


class TestGetFeed:
    """Tests for GET /feed."""

    async def test_boosted_first_then_next_page(self, client, memory_store):
        # Arrange
        now = utc_now()
        await memory_store.insert_content(make_content("B1", boost_level=3, boosted_at=now - timedelta(minutes=1)))
        await memory_store.insert_content(make_content("B2", boost_level=3, boosted_at=now - timedelta(hours=1)))
        await memory_store.insert_content(make_content("C1", created_at=now))

        # Act
        first = client.get("/feed", params={"limit": 2}).json()
        second = client.get("/feed", params={"limit": 2, "cursor": first["results"]["cursor"]}).json()

        # Assert
        assert [i["content_id"] for i in first["results"]["items"]] == ["B1", "B2"]
        assert first["results"]["has_more"] is True
        assert first["results"]["items"][0]["is_boosted"] is True
        assert [i["content_id"] for i in second["results"]["items"]] == ["C1"]
        assert second["results"]["has_more"] is False

    async def test_members_see_members_only_content(self, client, memory_store):
        await memory_store.insert_content(make_content("m1", visibility=ContentVisibility.MEMBERS_ONLY))

        anonymous = client.get("/feed").json()
        member = client.get("/feed", headers={"X-User-Id": "u.m", "X-User-Is-Member": "true"}).json()

        assert anonymous["results"]["items"] == []
        assert [i["content_id"] for i in member["results"]["items"]] == ["m1"]

    def test_invalid_cursor_is_400(self, client):
        response = client.get("/feed", params={"cursor": "%%%bad"})

        assert response.status_code == 400
        assert response.json()["errcode"] == "E_INVALID_CURSOR"

    def test_out_of_range_limit_is_clamped(self, client):
        response = client.get("/feed", params={"limit": 0})

        assert response.status_code == 200
        assert response.json()["results"]["items"] == []
