"""IAM user to FHIR practitioner mapping database model."""

from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from chatbot_service.core.database import Base


class UserPractitionerMapping(Base):
    """Practitioner identity and organization of an onboarded IAM user."""

    __tablename__ = "user_practitioner_mapping"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    iam_user_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    fhir_practitioner_id: Mapped[str] = mapped_column(String(255), nullable=False)
    fhir_organization_id: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
