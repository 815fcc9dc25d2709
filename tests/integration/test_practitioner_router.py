"""Integration tests for practitioner onboarding endpoints."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient

ONBOARD_BODY = {
    "iamUserId": "u1",
    "fhirPractitionerId": "prac-1",
    "fhirOrganizationId": "org-1",
}


class TestSelfOnboard:
    @pytest.mark.asyncio
    async def test_onboard(
        self, async_client: AsyncClient, keycloak_client: MagicMock
    ) -> None:
        response = await async_client.post(
            "/api/practitioners/self-onboard", json=ONBOARD_BODY
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["roleAssigned"] is True
        assert body["mapping"]["iam_user_id"] == "u1"
        assert body["mapping"]["fhir_organization_id"] == "org-1"
        keycloak_client.assign_realm_role.assert_awaited_once_with("u1", "practitioner")

    @pytest.mark.asyncio
    async def test_different_organization_409(self, async_client: AsyncClient) -> None:
        await async_client.post("/api/practitioners/self-onboard", json=ONBOARD_BODY)

        response = await async_client.post(
            "/api/practitioners/self-onboard",
            json={**ONBOARD_BODY, "fhirOrganizationId": "org-2"},
        )

        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Practitioner already attached to a different organization"

    @pytest.mark.asyncio
    async def test_role_failure_still_succeeds(
        self, async_client: AsyncClient, keycloak_client: MagicMock
    ) -> None:
        keycloak_client.assign_realm_role = AsyncMock(return_value=False)

        response = await async_client.post(
            "/api/practitioners/self-onboard", json=ONBOARD_BODY
        )

        assert response.status_code == 200
        assert response.json()["roleAssigned"] is False

    @pytest.mark.asyncio
    async def test_missing_fields_400(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/practitioners/self-onboard", json={"iamUserId": "u1"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"


class TestGetMapping:
    @pytest.mark.asyncio
    async def test_get_mapping(self, async_client: AsyncClient) -> None:
        await async_client.post("/api/practitioners/self-onboard", json=ONBOARD_BODY)

        response = await async_client.get("/api/practitioners/mapping/u1")

        assert response.status_code == 200
        assert response.json()["mapping"]["fhir_practitioner_id"] == "prac-1"

    @pytest.mark.asyncio
    async def test_missing_mapping_is_null(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/practitioners/mapping/nobody")

        assert response.status_code == 200
        assert response.json() == {"success": True, "mapping": None}
