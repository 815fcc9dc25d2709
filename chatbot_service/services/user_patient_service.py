"""Service layer for IAM user to FHIR patient access."""

import structlog

from chatbot_service.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from chatbot_service.repositories.user_patient_repo import UserPatientRepository
from chatbot_service.schemas.user_patient_schema import UserPatientMappingResponse

logger = structlog.get_logger()


def _require(**values: str) -> None:
    missing = [name for name, value in values.items() if not value or not value.strip()]
    if missing:
        raise ValidationError(f"{' and '.join(missing)} required")


class UserPatientService:
    """Grants, revokes and queries a user's access to patients.

    Runs on the request-scoped session, so every call commits as one
    transaction when the request completes.
    """

    def __init__(self, repo: UserPatientRepository) -> None:
        self._repo = repo

    async def list_patients(self, user_id: str) -> list[str]:
        _require(userId=user_id)
        return await self._repo.get_patients_by_user(user_id)

    async def add_patient(
        self, user_id: str, patient_id: str, is_primary: bool = True
    ) -> UserPatientMappingResponse:
        """Grant access to a patient, optionally making it the primary one."""
        _require(userId=user_id, patientId=patient_id)
        mapping = await self._repo.add_patient_to_user(user_id, patient_id, is_primary)
        logger.info(
            "Patient added to user",
            user_id=user_id,
            patient_id=patient_id,
            is_primary=is_primary,
        )
        return UserPatientMappingResponse.model_validate(mapping)

    async def get_primary_patient(self, user_id: str) -> str:
        """Raises NotFoundError when the user has no primary patient."""
        _require(userId=user_id)
        patient_id = await self._repo.get_primary_patient(user_id)
        if patient_id is None:
            raise NotFoundError("Primary patient")
        return patient_id

    async def has_access(self, user_id: str, patient_id: str) -> bool:
        return await self._repo.has_access_to_patient(user_id, patient_id)

    async def is_primary(self, user_id: str, patient_id: str) -> bool:
        mapping = await self._repo.find(user_id, patient_id)
        return mapping is not None and mapping.is_primary

    async def set_primary(self, user_id: str, patient_id: str) -> None:
        """Make an already mapped patient the user's only primary patient."""
        _require(userId=user_id, patientId=patient_id)
        if not await self._repo.has_access_to_patient(user_id, patient_id):
            raise ForbiddenError("Patient not found or user does not have access")
        await self._repo.set_primary_patient(user_id, patient_id)
        logger.info("Primary patient set", user_id=user_id, patient_id=patient_id)

    async def remove_patient(self, user_id: str, patient_id: str) -> None:
        _require(userId=user_id, patientId=patient_id)
        await self._repo.remove_patient_from_user(user_id, patient_id)
        logger.info("Patient removed from user", user_id=user_id, patient_id=patient_id)

    async def list_users(self, patient_id: str) -> list[str]:
        _require(patientId=patient_id)
        return await self._repo.get_users_for_patient(patient_id)
