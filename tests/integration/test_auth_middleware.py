# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for authentication middleware.

Tests the middleware components in isolation from database.
"""

from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from pydantic import SecretStr

from edurecords.api.middleware.auth import AuthMiddleware, get_current_user
from edurecords.api.middleware.rate_limit import get_client_identifier
from edurecords.domains.auth.jwt import JWTManager


@pytest.fixture
def jwt_settings() -> MagicMock:
    """Create mock JWT settings."""
    settings = MagicMock()
    settings.secret_key = SecretStr("test-secret-key-for-jwt-testing")
    settings.algorithm = "HS256"
    settings.access_token_expire_minutes = 30
    return settings


@pytest.fixture
def jwt_manager(jwt_settings: MagicMock) -> JWTManager:
    """Create JWT manager with test settings."""
    return JWTManager(jwt_settings)


def _whoami_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(AuthMiddleware)

    @app.get("/whoami")
    async def whoami(request: Request) -> dict:
        user = get_current_user(request)
        if user is None:
            return {"user": None}
        return {
            "user": user.id,
            "role": user.role,
            "client": get_client_identifier(request),
        }

    return app


class TestAuthMiddleware:
    """Tests for AuthMiddleware."""

    def test_public_path_bypasses_auth(self) -> None:
        """Test that public paths don't require authentication."""
        app = FastAPI()
        app.add_middleware(AuthMiddleware)

        @app.get("/health")
        async def health() -> dict:
            return {"status": "ok"}

        client = TestClient(app)
        response = client.get("/health")

        assert response.status_code == 200

    @patch("edurecords.api.middleware.auth.get_settings")
    def test_valid_token_sets_user(
        self,
        mock_settings: MagicMock,
        jwt_settings: MagicMock,
        jwt_manager: JWTManager,
    ) -> None:
        """Test that a valid token sets request.state.user."""
        mock_settings.return_value.jwt = jwt_settings
        token = jwt_manager.create_access_token("faculty-1", "faculty")

        client = TestClient(_whoami_app())
        response = client.get("/whoami", headers={"Authorization": f"Bearer {token}"})

        assert response.json() == {
            "user": "faculty-1",
            "role": "faculty",
            "client": "user:faculty-1",
        }

    @patch("edurecords.api.middleware.auth.get_settings")
    def test_expired_token_leaves_user_unset(
        self,
        mock_settings: MagicMock,
        jwt_settings: MagicMock,
        jwt_manager: JWTManager,
    ) -> None:
        """Test that an expired token is ignored."""
        mock_settings.return_value.jwt = jwt_settings
        token = jwt_manager.create_access_token(
            "student-1", "student", expires_in=timedelta(seconds=-5)
        )

        client = TestClient(_whoami_app())
        response = client.get("/whoami", headers={"Authorization": f"Bearer {token}"})

        assert response.json() == {"user": None}

    @patch("edurecords.api.middleware.auth.get_settings")
    def test_non_bearer_header_ignored(
        self,
        mock_settings: MagicMock,
        jwt_settings: MagicMock,
    ) -> None:
        """Test that other authorization schemes are ignored."""
        mock_settings.return_value.jwt = jwt_settings

        client = TestClient(_whoami_app())
        response = client.get("/whoami", headers={"Authorization": "Basic dXNlcjpwYXNz"})

        assert response.json() == {"user": None}
