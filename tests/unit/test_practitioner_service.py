"""Unit tests for PractitionerService."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from chatbot_service.core.exceptions import ConflictError
from chatbot_service.repositories.practitioner_repo import PractitionerRepository
from chatbot_service.services.practitioner_service import PractitionerService


@pytest.fixture
def service(db_session: AsyncSession, keycloak_client: MagicMock) -> PractitionerService:
    return PractitionerService(PractitionerRepository(db_session), keycloak_client)


class TestSelfOnboard:
    @pytest.mark.asyncio
    async def test_creates_mapping_and_assigns_role(
        self, service: PractitionerService, keycloak_client: MagicMock
    ) -> None:
        result = await service.self_onboard("u1", "prac-1", "org-1")

        assert result.role_assigned is True
        assert result.mapping.fhir_practitioner_id == "prac-1"
        assert result.mapping.fhir_organization_id == "org-1"
        keycloak_client.assign_realm_role.assert_awaited_once_with("u1", "practitioner")

    @pytest.mark.asyncio
    async def test_same_organization_updates_practitioner(
        self, service: PractitionerService
    ) -> None:
        await service.self_onboard("u1", "prac-1", "org-1")

        result = await service.self_onboard("u1", "prac-2", "org-1")

        assert result.mapping.fhir_practitioner_id == "prac-2"

    @pytest.mark.asyncio
    async def test_other_organization_conflicts(
        self, service: PractitionerService
    ) -> None:
        await service.self_onboard("u1", "prac-1", "org-1")

        with pytest.raises(ConflictError):
            await service.self_onboard("u1", "prac-1", "org-2")

        mapping = await service.get_mapping("u1")
        assert mapping is not None
        assert mapping.fhir_organization_id == "org-1"

    @pytest.mark.asyncio
    async def test_role_failure_is_not_fatal(
        self, service: PractitionerService, keycloak_client: MagicMock
    ) -> None:
        keycloak_client.assign_realm_role = AsyncMock(return_value=False)

        result = await service.self_onboard("u1", "prac-1", "org-1")

        assert result.role_assigned is False
        assert await service.get_mapping("u1") is not None


class TestGetMapping:
    @pytest.mark.asyncio
    async def test_missing(self, service: PractitionerService) -> None:
        assert await service.get_mapping("nobody") is None
