"""Service layer for practitioner self-onboarding."""

from dataclasses import dataclass

import structlog

from chatbot_service.core.exceptions import ConflictError
from chatbot_service.repositories.practitioner_repo import PractitionerRepository
from chatbot_service.schemas.practitioner_schema import PractitionerMappingResponse
from chatbot_service.services.keycloak_admin import KeycloakAdminClient

logger = structlog.get_logger()

PRACTITIONER_ROLE = "practitioner"


@dataclass(frozen=True)
class OnboardResult:
    mapping: PractitionerMappingResponse
    role_assigned: bool


class PractitionerService:
    """Attaches IAM users to a FHIR practitioner within a single organization."""

    def __init__(
        self, repo: PractitionerRepository, keycloak: KeycloakAdminClient
    ) -> None:
        self._repo = repo
        self._keycloak = keycloak

    async def self_onboard(
        self,
        iam_user_id: str,
        fhir_practitioner_id: str,
        fhir_organization_id: str,
    ) -> OnboardResult:
        """Store the mapping and grant the practitioner realm role.

        Raises:
            ConflictError: The user already belongs to another organization.
        """
        existing = await self._repo.get_mapping_by_user(iam_user_id)
        if existing is not None and existing.fhir_organization_id != fhir_organization_id:
            raise ConflictError(
                "Practitioner already attached to a different organization"
            )

        mapping = await self._repo.upsert_mapping(
            iam_user_id, fhir_practitioner_id, fhir_organization_id
        )
        response = PractitionerMappingResponse.model_validate(mapping)

        role_assigned = await self._keycloak.assign_realm_role(
            iam_user_id, PRACTITIONER_ROLE
        )
        if not role_assigned:
            logger.warning(
                "Practitioner onboarded without realm role", iam_user_id=iam_user_id
            )
        return OnboardResult(mapping=response, role_assigned=role_assigned)

    async def get_mapping(self, iam_user_id: str) -> PractitionerMappingResponse | None:
        mapping = await self._repo.get_mapping_by_user(iam_user_id)
        if mapping is None:
            return None
        return PractitionerMappingResponse.model_validate(mapping)
