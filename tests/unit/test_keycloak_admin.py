"""Unit tests for the Keycloak admin client."""

import json

import httpx
import pytest

from chatbot_service.services.keycloak_admin import KeycloakAdminClient
from tests.conftest import make_keycloak_config

ROLE = {"id": "role-123", "name": "practitioner"}


class FakeKeycloak:
    """Records requests and answers like the Keycloak admin API."""

    def __init__(self, role_status: int = 200, assign_status: int = 204) -> None:
        self.requests: list[httpx.Request] = []
        self.role_status = role_status
        self.assign_status = assign_status

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/realms/master/protocol/openid-connect/token":
            return httpx.Response(200, json={"access_token": "admin-token"})
        if path == "/admin/realms/healthcare/roles/practitioner":
            return httpx.Response(self.role_status, json=ROLE)
        if path == "/admin/realms/healthcare/users/user-1/role-mappings/realm":
            return httpx.Response(self.assign_status)
        return httpx.Response(404)


class TestAssignRealmRole:
    @pytest.mark.asyncio
    async def test_assigns_role(self) -> None:
        fake = FakeKeycloak()
        client = KeycloakAdminClient(
            make_keycloak_config(), transport=httpx.MockTransport(fake)
        )

        assert await client.assign_realm_role("user-1", "practitioner") is True

        token_request, role_request, assign_request = fake.requests
        form = dict(
            pair.split("=", 1) for pair in token_request.content.decode().split("&")
        )
        assert form["grant_type"] == "password"
        assert form["client_id"] == "admin-cli"
        assert form["username"] == "admin"
        assert role_request.headers["Authorization"] == "Bearer admin-token"
        assert assign_request.method == "POST"
        assert json.loads(assign_request.content) == [ROLE]

    @pytest.mark.asyncio
    async def test_missing_credentials_skips_calls(self) -> None:
        fake = FakeKeycloak()
        client = KeycloakAdminClient(
            make_keycloak_config(admin_password=""), transport=httpx.MockTransport(fake)
        )

        assert await client.assign_realm_role("user-1", "practitioner") is False
        assert fake.requests == []

    @pytest.mark.asyncio
    async def test_unknown_role_returns_false(self) -> None:
        fake = FakeKeycloak(role_status=404)
        client = KeycloakAdminClient(
            make_keycloak_config(), transport=httpx.MockTransport(fake)
        )

        assert await client.assign_realm_role("user-1", "practitioner") is False
        assert len(fake.requests) == 2

    @pytest.mark.asyncio
    async def test_assignment_error_returns_false(self) -> None:
        fake = FakeKeycloak(assign_status=500)
        client = KeycloakAdminClient(
            make_keycloak_config(), transport=httpx.MockTransport(fake)
        )

        assert await client.assign_realm_role("user-1", "practitioner") is False

    @pytest.mark.asyncio
    async def test_network_error_returns_false(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = KeycloakAdminClient(
            make_keycloak_config(), transport=httpx.MockTransport(refuse)
        )

        assert await client.assign_realm_role("user-1", "practitioner") is False
