"""Tests for application wiring in livecast.main."""

from fastapi.testclient import TestClient

from livecast.main import API_PREFIX, app, build_granian_kwargs


class TestAppWiring:
    def test_health(self):
        response = TestClient(app).get("/health")

        assert response.status_code == 200
        assert response.json()["results"] == "OK"

    def test_routes_are_registered(self):
        paths = set(app.openapi()["paths"])

        assert f"{API_PREFIX}/feed" in paths
        assert f"{API_PREFIX}/session/create_session" in paths
        assert f"{API_PREFIX}/session/end_session" in paths
        assert f"{API_PREFIX}/session/get_session" in paths
        assert f"{API_PREFIX}/content/boost" in paths
        assert f"{API_PREFIX}/content/remove_boost" in paths
        assert f"{API_PREFIX}/session/refresh_session_status" in paths
        assert f"{API_PREFIX}/content/force_boost" in paths
        assert f"{API_PREFIX}/recording/delete_recording" in paths
        assert "/webhooks/provider" in paths

    def test_validation_errors_use_failure_envelope(self):
        response = TestClient(app).post(
            f"{API_PREFIX}/session/end_session", json={}, headers={"X-User-Id": "u.creator"}
        )

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["errcode"] == "E_INVALID_PARAMS"

    def test_granian_kwargs(self):
        kwargs = build_granian_kwargs()

        assert kwargs["interface"] == "asgi"
        assert isinstance(kwargs["port"], int)
