"""Practitioner onboarding API router."""

from typing import Annotated

from fastapi import APIRouter, Depends

from chatbot_service.dependencies import get_practitioner_service
from chatbot_service.schemas.practitioner_schema import SelfOnboardRequest
from chatbot_service.schemas.response_schema import success_response
from chatbot_service.services.practitioner_service import PractitionerService

router = APIRouter(prefix="/api/practitioners", tags=["practitioners"])

PractitionerServiceDep = Annotated[
    PractitionerService, Depends(get_practitioner_service)
]


@router.post("/self-onboard")
async def self_onboard(
    request: SelfOnboardRequest, service: PractitionerServiceDep
) -> dict:
    """Attach the IAM user to a practitioner and grant the practitioner role."""
    result = await service.self_onboard(
        request.iam_user_id,
        request.fhir_practitioner_id,
        request.fhir_organization_id,
    )
    return success_response(mapping=result.mapping, roleAssigned=result.role_assigned)


@router.get("/mapping/{iam_user_id}")
async def get_mapping(iam_user_id: str, service: PractitionerServiceDep) -> dict:
    mapping = await service.get_mapping(iam_user_id)
    return success_response(mapping=mapping)
