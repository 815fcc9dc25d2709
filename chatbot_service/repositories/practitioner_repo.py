"""User-practitioner mapping repository."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from chatbot_service.core.database import dialect_insert
from chatbot_service.models.user_practitioner_mapping import UserPractitionerMapping


class PractitionerRepository:
    """Encapsulates IAM user to FHIR practitioner mapping queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_mapping_by_user(
        self, iam_user_id: str
    ) -> UserPractitionerMapping | None:
        """Find the practitioner mapping of a user."""
        result = await self._session.execute(
            select(UserPractitionerMapping)
            .where(UserPractitionerMapping.iam_user_id == iam_user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def upsert_mapping(
        self,
        iam_user_id: str,
        fhir_practitioner_id: str,
        fhir_organization_id: str,
    ) -> UserPractitionerMapping:
        """Create or replace the single mapping row of a user."""
        table = UserPractitionerMapping.__table__
        stmt = dialect_insert(self._session, table).values(
            iam_user_id=iam_user_id,
            fhir_practitioner_id=fhir_practitioner_id,
            fhir_organization_id=fhir_organization_id,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["iam_user_id"],
            set_={
                "fhir_practitioner_id": stmt.excluded.fhir_practitioner_id,
                "fhir_organization_id": stmt.excluded.fhir_organization_id,
                "updated_at": func.now(),
            },
        )
        await self._session.execute(stmt)
        mapping = await self.get_mapping_by_user(iam_user_id)
        if mapping is None:
            raise RuntimeError("Upserted practitioner mapping could not be read back")
        return mapping
