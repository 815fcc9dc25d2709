"""User-patient access API routers."""

from typing import Annotated

from fastapi import APIRouter, Depends

from chatbot_service.dependencies import get_user_patient_service
from chatbot_service.schemas.response_schema import success_response
from chatbot_service.schemas.user_patient_schema import AddPatientRequest
from chatbot_service.services.user_patient_service import UserPatientService

users_router = APIRouter(prefix="/api/users", tags=["user-patient-mapping"])
patients_router = APIRouter(prefix="/api/patients", tags=["user-patient-mapping"])

UserPatientServiceDep = Annotated[
    UserPatientService, Depends(get_user_patient_service)
]


@users_router.get("/{user_id}/patients")
async def list_user_patients(user_id: str, service: UserPatientServiceDep) -> dict:
    """Patients a user can access, primary first."""
    patient_ids = await service.list_patients(user_id)
    return success_response(
        userId=user_id, patientIds=patient_ids, count=len(patient_ids)
    )


@users_router.post("/{user_id}/patients")
async def add_user_patient(
    user_id: str, request: AddPatientRequest, service: UserPatientServiceDep
) -> dict:
    """Grant a user access to a patient."""
    mapping = await service.add_patient(user_id, request.patient_id, request.is_primary)
    return success_response(
        message=f"Patient {request.patient_id} added to user {user_id}",
        mapping=mapping,
    )


@users_router.get("/{user_id}/patients/primary")
async def get_primary_patient(user_id: str, service: UserPatientServiceDep) -> dict:
    primary_patient_id = await service.get_primary_patient(user_id)
    return success_response(userId=user_id, primaryPatientId=primary_patient_id)


@users_router.get("/{user_id}/patients/{patient_id}/access")
async def check_patient_access(
    user_id: str, patient_id: str, service: UserPatientServiceDep
) -> dict:
    has_access = await service.has_access(user_id, patient_id)
    return success_response(userId=user_id, patientId=patient_id, hasAccess=has_access)


@users_router.get("/{user_id}/patients/{patient_id}/primary")
async def check_primary_patient(
    user_id: str, patient_id: str, service: UserPatientServiceDep
) -> dict:
    is_primary = await service.is_primary(user_id, patient_id)
    return success_response(userId=user_id, patientId=patient_id, isPrimary=is_primary)


@users_router.put("/{user_id}/patients/{patient_id}/primary")
async def set_primary_patient(
    user_id: str, patient_id: str, service: UserPatientServiceDep
) -> dict:
    """Make a mapped patient the user's primary patient."""
    await service.set_primary(user_id, patient_id)
    return success_response(
        message=f"Patient {patient_id} set as primary for user {user_id}"
    )


@users_router.delete("/{user_id}/patients/{patient_id}")
async def remove_user_patient(
    user_id: str, patient_id: str, service: UserPatientServiceDep
) -> dict:
    await service.remove_patient(user_id, patient_id)
    return success_response(message=f"Patient {patient_id} removed from user {user_id}")


@patients_router.get("/{patient_id}/users")
async def list_patient_users(patient_id: str, service: UserPatientServiceDep) -> dict:
    """Users with access to a patient."""
    user_ids = await service.list_users(patient_id)
    return success_response(patientId=patient_id, userIds=user_ids, count=len(user_ids))
