"""Unit tests for session router endpoints."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient

from livecast.api.errors import app_error_handler
from livecast.api.v1.dependency import get_session_service
from livecast.api.v1.routers.session import router
from livecast.domain.live.session.session_domain import SessionService
from livecast.domain.live.session.session_models import (
    SessionCreatedResponse,
    SessionEndResult,
    SessionResponse,
    SessionStatusResponse,
)
from livecast.schemas import SessionMode, SessionStatus, SessionVisibility
from livecast.shared.api.utils import validation_exception_handler
from livecast.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
CREATOR_HEADERS = {"X-User-Id": "u.creator", "X-User-Role": "creator"}


def _session_response(status: SessionStatus = SessionStatus.CONFIGURING) -> dict:
    return {
        "session_id": "se_1",
        "provider_session_id": "st_1",
        "creator_id": "u.creator",
        "title": "My stream",
        "visibility": SessionVisibility.PUBLIC,
        "mode": SessionMode.VIDEO,
        "status": status,
        "created_at": NOW,
        "updated_at": NOW,
    }


@pytest.fixture
def mock_session_service() -> AsyncMock:
    return AsyncMock(spec=SessionService)


@pytest.fixture
def test_app(mock_session_service: AsyncMock) -> FastAPI:
    """Create FastAPI test app with dependency overrides."""
    app = FastAPI()
    app.dependency_overrides[get_session_service] = lambda: mock_session_service
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.include_router(router)
    return app


@pytest.fixture
def client(test_app: FastAPI) -> TestClient:
    return TestClient(test_app)


class TestCreateSession:
    """Tests for POST /session/create_session."""

    def test_create_session_success(self, client, mock_session_service):
        """Should return ingest credentials in the success envelope."""
        # Arrange
        mock_session_service.create_session.return_value = SessionCreatedResponse(
            **_session_response(),
            ingest_url="rtmp://rtmp.example.com/live/key_1",
            stream_key="key_1",
        )

        # Act
        response = client.post(
            "/session/create_session", json={"title": "My stream"}, headers=CREATOR_HEADERS
        )

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["results"]["session_id"] == "se_1"
        assert body["results"]["stream_key"] == "key_1"
        assert body["results"]["status"] == "configuring"
        assert body["results"]["created_at"] == "2026-03-01T12:00:00+00:00"

        params = mock_session_service.create_session.call_args.args[0]
        assert params.creator_id == "u.creator"
        assert params.title == "My stream"
        caller = mock_session_service.create_session.call_args.kwargs["caller"]
        assert caller.user_id == "u.creator"

    def test_missing_identity_is_unauthorized(self, client, mock_session_service):
        response = client.post("/session/create_session", json={"title": "My stream"})

        assert response.status_code == 401
        assert response.json()["errcode"] == AppErrorCode.E_UNAUTHORIZED
        mock_session_service.create_session.assert_not_awaited()

    def test_invalid_role_header_is_unauthorized(self, client):
        response = client.post(
            "/session/create_session",
            json={"title": "My stream"},
            headers={"X-User-Id": "u.creator", "X-User-Role": "superuser"},
        )

        assert response.status_code == 401

    def test_empty_title_is_validation_error(self, client):
        response = client.post("/session/create_session", json={"title": ""}, headers=CREATOR_HEADERS)

        assert response.status_code == 422
        assert response.json()["errcode"] == "E_INVALID_PARAMS"
        assert response.json()["retryable"] is False

    def test_provider_unavailable_maps_to_503(self, client, mock_session_service):
        mock_session_service.create_session.side_effect = AppError(
            errcode=AppErrorCode.E_PROVIDER_UNAVAILABLE,
            errmesg="Video provider unavailable",
            status_code=HttpStatusCode.SERVICE_UNAVAILABLE,
        )

        response = client.post("/session/create_session", json={"title": "My stream"}, headers=CREATOR_HEADERS)

        assert response.status_code == 503
        body = response.json()
        assert body["success"] is False
        assert body["errcode"] == "E_PROVIDER_UNAVAILABLE"
        assert body["erresid"]
        assert body["retryable"] is True


class TestEndSession:
    def test_end_session_success(self, client, mock_session_service):
        mock_session_service.end_session.return_value = SessionEndResult(
            session=SessionResponse(**_session_response(SessionStatus.ENDED)),
            recording_id="rec_1",
            recording_created=True,
        )

        response = client.post("/session/end_session", json={"session_id": "se_1"}, headers=CREATOR_HEADERS)

        assert response.status_code == 200
        results = response.json()["results"]
        assert results["session"]["status"] == "ended"
        assert results["recording_id"] == "rec_1"
        mock_session_service.end_session.assert_awaited_once_with("se_1", "u.creator", is_admin=False)

    def test_admin_flag_is_forwarded(self, client, mock_session_service):
        mock_session_service.end_session.return_value = SessionEndResult(
            session=SessionResponse(**_session_response(SessionStatus.ENDED))
        )

        client.post(
            "/session/end_session",
            json={"session_id": "se_1"},
            headers={"X-User-Id": "u.admin", "X-User-Role": "admin"},
        )

        mock_session_service.end_session.assert_awaited_once_with("se_1", "u.admin", is_admin=True)

    def test_not_found(self, client, mock_session_service):
        mock_session_service.end_session.side_effect = AppError(
            errcode=AppErrorCode.E_SESSION_NOT_FOUND,
            errmesg="Session not found: se_x",
            status_code=HttpStatusCode.NOT_FOUND,
        )

        response = client.post("/session/end_session", json={"session_id": "se_x"}, headers=CREATOR_HEADERS)

        assert response.status_code == 404
        assert response.json()["errcode"] == "E_SESSION_NOT_FOUND"


class TestGetSession:
    def test_get_session_hides_stream_key(self, client, mock_session_service):
        mock_session_service.get_session.return_value = SessionResponse(**_session_response(SessionStatus.LIVE))

        response = client.get("/session/get_session", params={"session_id": "se_1"})

        assert response.status_code == 200
        results = response.json()["results"]
        assert results["status"] == "live"
        assert "stream_key" not in results

    def test_refresh_session_status(self, client, mock_session_service):
        mock_session_service.refresh_session_status.return_value = SessionStatusResponse(
            session=SessionResponse(**_session_response(SessionStatus.LIVE)),
            is_active=True,
            is_healthy=True,
        )

        response = client.post(
            "/session/refresh_session_status", json={"session_id": "se_1"}, headers=CREATOR_HEADERS
        )

        assert response.status_code == 200
        assert response.json()["results"]["is_active"] is True
