# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the HTTP API.
"""

import pytest
from unittest.mock import patch

from statusboard.middleware.error_handler import StoreError
from statusboard.models.entities import SessionUser


def _cookie_header(response) -> str:
    return " ".join(response.headers.getlist("Set-Cookie"))


class TestAuthEndpoints:
    """Test login, session check and logout."""

    def test_login_sets_http_only_cookie(self, test_client, admin, passwords):
        response = test_client.post('/api/auth/login', json={"email": admin.email, "password": passwords["admin"]})

        assert response.status_code == 200
        data = response.get_json()
        assert data["success"] is True
        assert data["user"]["email"] == "admin@example.com"
        assert data["user"]["isAdmin"] is True
        assert "passwordHash" not in data["user"]

        cookie = _cookie_header(response)
        assert "statusboard_session=" in cookie
        assert "HttpOnly" in cookie

    def test_login_bad_password(self, test_client, reporter):
        response = test_client.post('/api/auth/login', json={"email": reporter.email, "password": "wrong"})

        assert response.status_code == 401
        data = response.get_json()
        assert data["success"] is False
        assert data["error"] == "Invalid email or password"
        assert data["status"] == 401
        assert data["instance"] == "/api/auth/login"

    def test_login_unknown_email_same_response(self, test_client, reporter):
        response = test_client.post('/api/auth/login', json={"email": "ghost@example.com", "password": "wrong"})

        assert response.status_code == 401
        assert response.get_json()["error"] == "Invalid email or password"

    @pytest.mark.parametrize("payload", [None, {}, {"email": "not-an-email", "password": "x"}, {"email": "a@example.com"}])
    def test_login_invalid_body(self, test_client, payload):
        if payload is None:
            response = test_client.post('/api/auth/login', data="garbage", content_type="text/plain")
        else:
            response = test_client.post('/api/auth/login', json=payload)

        assert response.status_code == 400
        assert response.get_json()["success"] is False

    def test_session_check_without_session(self, test_client):
        response = test_client.get('/api/auth/session')

        assert response.status_code == 200
        assert response.get_json() == {"authenticated": False}

    def test_session_check_with_cookie(self, reporter_client, reporter):
        data = reporter_client.get('/api/auth/session').get_json()

        assert data["authenticated"] is True
        assert data["user"]["uid"] == reporter.uid
        assert data["user"]["isAdmin"] is False

    def test_session_check_with_bearer_token(self, test_client, session_store):
        token = session_store.create(SessionUser(uid="uid-9", email="bearer@example.com", username="Bearer"))

        data = test_client.get('/api/auth/session', headers={"Authorization": f"Bearer {token}"}).get_json()
        assert data["authenticated"] is True
        assert data["user"]["email"] == "bearer@example.com"

    def test_session_check_with_stale_cookie(self, test_client):
        test_client.set_cookie("statusboard_session", "expired-token")
        assert test_client.get('/api/auth/session').get_json() == {"authenticated": False}

    def test_logout_ends_session(self, reporter_client):
        response = reporter_client.post('/api/auth/logout')

        assert response.status_code == 200
        assert response.get_json() == {"success": True}
        assert reporter_client.get('/api/auth/session').get_json()["authenticated"] is False

    def test_logout_without_session(self, test_client):
        assert test_client.post('/api/auth/logout').status_code == 200


class TestBlockEndpoints:
    """Test block listing, units and board view."""

    def test_list_blocks(self, test_client):
        data = test_client.get('/api/blocks').get_json()

        assert [block["id"] for block in data["blocks"]] == list("ABCDEFGH")
        assert data["floors"] == 35
        assert data["units"] == 8
        assert data["roomsPerBlock"] == 280

    def test_units_of_empty_block(self, test_client):
        response = test_client.get('/api/blocks/A/units')

        assert response.status_code == 200
        assert response.get_json() == {"units": {}}

    def test_unknown_block(self, test_client):
        response = test_client.get('/api/blocks/Z/units')

        assert response.status_code == 400
        assert response.get_json()["error"] == "Unknown block: Z"

    def test_units_store_failure(self, app, test_client):
        with patch.object(app.status_store, "fetch_block", side_effect=StoreError("Failed to load room statuses")):
            response = test_client.get('/api/blocks/A/units')

        assert response.status_code == 500
        data = response.get_json()
        assert data["success"] is False
        assert data["error"] == "Failed to load room statuses"

    def test_view_defaults_to_grid(self, test_client):
        data = test_client.get('/api/blocks/B/view').get_json()

        assert data["block"] == "B"
        assert data["blockName"] == "道 (B座)"
        assert data["filteredCount"] == 280
        assert data["totalRooms"] == 280
        assert len(data["grid"]) == 35
        assert len(data["grid"][0]["cells"]) == 8

    def test_view_rejects_bad_filter(self, test_client):
        response = test_client.get('/api/blocks/A/view?statusFilter=burning')

        assert response.status_code == 400
        assert response.get_json()["errors"]

    def test_view_lowercase_block(self, test_client):
        assert test_client.get('/api/blocks/c/view?view=list').get_json()["block"] == "C"


class TestUnitStatusEndpoint:
    """Test POST /api/units."""

    def test_requires_session(self, test_client):
        response = test_client.post('/api/units', json={"block": "A", "floor": 1, "unit": 1, "status": "safe"})

        assert response.status_code == 401
        assert response.get_json()["success"] is False

    def test_upsert_and_read_back(self, reporter_client, reporter):
        response = reporter_client.post('/api/units', json={
            "block": "A",
            "floor": 5,
            "unit": 3,
            "status": "danger",
            "remark": "stuck",
            "source": "family_media",
            "sourceUrl": "https://example.com/post"
        })
        assert response.status_code == 200
        assert response.get_json() == {"success": True}

        units = reporter_client.get('/api/blocks/A/units').get_json()["units"]
        assert units["5_3"]["status"] == "danger"
        assert units["5_3"]["remark"] == "stuck"
        assert units["5_3"]["source"] == "family_media"
        assert units["5_3"]["updatedBy"] == reporter.uid
        assert units["5_3"]["updatedAt"].endswith("Z")

    @pytest.mark.parametrize("payload", [
        {"block": "A", "floor": 36, "unit": 1, "status": "safe"},
        {"block": "A", "floor": 1, "unit": 0, "status": "safe"},
        {"block": "X", "floor": 1, "unit": 1, "status": "safe"},
        {"block": "A", "floor": 1, "unit": 1, "status": "flooded"},
        {"block": "A", "unit": 1, "status": "safe"},
    ])
    def test_invalid_payloads(self, reporter_client, payload):
        response = reporter_client.post('/api/units', json=payload)

        assert response.status_code == 400
        assert response.get_json()["type"].endswith("/validation-error")

    def test_store_failure(self, app, reporter_client):
        with patch.object(app.status_store, "upsert", side_effect=StoreError("Failed to save room status")):
            response = reporter_client.post('/api/units', json={"block": "A", "floor": 1, "unit": 1, "status": "safe"})

        assert response.status_code == 500
        assert response.get_json()["error"] == "Failed to save room status"


class TestNewsEndpoints:
    """Test the news feed API."""

    def test_empty_list(self, test_client):
        response = test_client.get('/api/news')

        assert response.status_code == 200
        assert response.get_json() == []

    def test_admin_adds_and_deletes(self, admin_client):
        response = admin_client.post('/api/news', json={"content": "Shelter open", "link": "https://x", "linkText": "Map"})
        assert response.status_code == 200
        news_id = response.get_json()["id"]

        items = admin_client.get('/api/news').get_json()
        assert items[0]["id"] == news_id
        assert items[0]["linkText"] == "Map"
        assert items[0]["createdAt"].endswith("Z")

        assert admin_client.delete(f'/api/news/{news_id}').get_json() == {"success": True}
        assert admin_client.get('/api/news').get_json() == []

    def test_delete_missing_item_succeeds(self, admin_client):
        response = admin_client.delete('/api/news/does-not-exist')
        assert response.status_code == 200

    def test_limit(self, admin_client):
        for index in range(3):
            admin_client.post('/api/news', json={"content": f"News {index}"})

        items = admin_client.get('/api/news?limit=2').get_json()
        assert [item["content"] for item in items] == ["News 2", "News 1"]

    def test_invalid_limit(self, test_client):
        assert test_client.get('/api/news?limit=0').status_code == 400

    def test_anonymous_cannot_add(self, test_client):
        assert test_client.post('/api/news', json={"content": "x"}).status_code == 401

    def test_reporter_cannot_add_or_delete(self, reporter_client):
        assert reporter_client.post('/api/news', json={"content": "x"}).status_code == 403
        assert reporter_client.delete('/api/news/some-id').status_code == 403

    def test_blank_content(self, admin_client):
        assert admin_client.post('/api/news', json={"content": "  "}).status_code == 400

    def test_store_failure_gives_empty_list(self, app, test_client):
        with patch.object(app.news_feed, "list", side_effect=StoreError()):
            response = test_client.get('/api/news')

        assert response.status_code == 200
        assert response.get_json() == []


class TestHealthAndErrors:
    """Test health check, unknown routes and CORS."""

    def test_openapi_document_lists_routes_with_tags(self, app):
        paths = app.api_doc["paths"]

        assert paths["/api/healthz"]["get"]["tags"] == ["Health"]
        assert paths["/api/news"]["get"]["tags"] == ["News"]
        assert "/api/blocks/{block}/units" in paths

    def test_healthy(self, app, test_client):
        with patch.object(app.mongodb_service, "health_check", return_value={"status": "healthy"}):
            response = test_client.get('/api/healthz')

        assert response.status_code == 200
        data = response.get_json()
        assert data["status"] == "healthy"
        assert data["dependencies"]["redis"]["status"] == "healthy"

    def test_unhealthy_database(self, app, test_client):
        with patch.object(app.mongodb_service, "health_check", return_value={"status": "unhealthy", "error": "down"}):
            response = test_client.get('/api/healthz')

        assert response.status_code == 503
        assert response.get_json()["status"] == "unhealthy"

    def test_unknown_route_returns_json(self, test_client):
        response = test_client.get('/api/nothing-here')

        assert response.status_code == 404
        data = response.get_json()
        assert data["success"] is False
        assert data["title"] == "Resource Not Found"

    def test_cors_for_configured_origin(self, test_client):
        response = test_client.get('/api/blocks', headers={"Origin": "http://board.example.com"})

        assert response.headers["Access-Control-Allow-Origin"] == "http://board.example.com"
        assert response.headers["Access-Control-Allow-Credentials"] == "true"

    def test_cors_rejects_other_origins(self, test_client):
        response = test_client.get('/api/blocks', headers={"Origin": "http://evil.example.com"})
        assert "Access-Control-Allow-Origin" not in response.headers

    def test_cors_preflight(self, test_client):
        response = test_client.options('/api/units', headers={
            "Origin": "http://board.example.com",
            "Access-Control-Request-Method": "POST"
        })

        assert response.status_code == 204
        assert "POST" in response.headers["Access-Control-Allow-Methods"]
