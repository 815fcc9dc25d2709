"""IAM user to FHIR patient mapping database model."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String, UniqueConstraint, func, text
from sqlalchemy.orm import Mapped, mapped_column

from chatbot_service.core.database import Base


class UserPatientMapping(Base):
    """Patients an IAM user may act for; at most one primary per user."""

    __tablename__ = "user_patient_mapping"
    __table_args__ = (
        UniqueConstraint(
            "iam_user_id", "fhir_patient_id", name="uq_user_patient_mapping_pair"
        ),
        Index(
            "uq_user_patient_mapping_primary",
            "iam_user_id",
            unique=True,
            postgresql_where=text("is_primary"),
            sqlite_where=text("is_primary = 1"),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    iam_user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    fhir_patient_id: Mapped[str] = mapped_column(
        String(255), nullable=False, index=True
    )
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
