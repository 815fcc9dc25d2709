"""Practitioner onboarding schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SelfOnboardRequest(BaseModel):
    """Attach an IAM user to a FHIR practitioner and organization."""

    iam_user_id: str = Field(..., min_length=1, alias="iamUserId")
    fhir_practitioner_id: str = Field(..., min_length=1, alias="fhirPractitionerId")
    fhir_organization_id: str = Field(..., min_length=1, alias="fhirOrganizationId")


class PractitionerMappingResponse(BaseModel):
    """Practitioner mapping row as returned by the API."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    iam_user_id: str
    fhir_practitioner_id: str
    fhir_organization_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
