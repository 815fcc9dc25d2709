"""User-patient mapping schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AddPatientRequest(BaseModel):
    """Request to grant a user access to a patient."""

    patient_id: str = Field(..., min_length=1, alias="patientId")
    is_primary: bool = Field(default=True, alias="isPrimary")


class UserPatientMappingResponse(BaseModel):
    """Mapping row as returned by the API."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    iam_user_id: str
    fhir_patient_id: str
    is_primary: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
