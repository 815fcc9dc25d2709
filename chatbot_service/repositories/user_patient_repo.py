"""User-patient mapping repository."""

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chatbot_service.core.database import dialect_insert
from chatbot_service.models.user_patient_mapping import UserPatientMapping


class UserPatientRepository:
    """Encapsulates IAM user to FHIR patient mapping queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add_patient_to_user(
        self, iam_user_id: str, fhir_patient_id: str, is_primary: bool = True
    ) -> UserPatientMapping:
        """Grant access to a patient, upserting the primary flag.

        When the new mapping is primary, the user's other mappings are demoted
        first so that at most one primary row exists.
        """
        if is_primary:
            await self._unset_primary(iam_user_id, except_patient_id=fhir_patient_id)

        table = UserPatientMapping.__table__
        stmt = dialect_insert(self._session, table).values(
            iam_user_id=iam_user_id,
            fhir_patient_id=fhir_patient_id,
            is_primary=is_primary,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["iam_user_id", "fhir_patient_id"],
            set_={"is_primary": stmt.excluded.is_primary, "updated_at": func.now()},
        )
        await self._session.execute(stmt)
        mapping = await self.find(iam_user_id, fhir_patient_id)
        if mapping is None:
            raise RuntimeError("Upserted mapping could not be read back")
        return mapping

    async def find(
        self, iam_user_id: str, fhir_patient_id: str
    ) -> UserPatientMapping | None:
        """Find a single mapping row."""
        result = await self._session.execute(
            select(UserPatientMapping)
            .where(
                UserPatientMapping.iam_user_id == iam_user_id,
                UserPatientMapping.fhir_patient_id == fhir_patient_id,
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_patients_by_user(self, iam_user_id: str) -> list[str]:
        """Patient ids a user can access, primary first then oldest."""
        result = await self._session.execute(
            select(UserPatientMapping.fhir_patient_id)
            .where(UserPatientMapping.iam_user_id == iam_user_id)
            .order_by(
                UserPatientMapping.is_primary.desc(),
                UserPatientMapping.created_at.asc(),
                UserPatientMapping.id.asc(),
            )
        )
        return list(result.scalars().all())

    async def get_primary_patient(self, iam_user_id: str) -> str | None:
        """The user's primary patient id, if any."""
        result = await self._session.execute(
            select(UserPatientMapping.fhir_patient_id)
            .where(
                UserPatientMapping.iam_user_id == iam_user_id,
                UserPatientMapping.is_primary.is_(True),
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def set_primary_patient(self, iam_user_id: str, fhir_patient_id: str) -> None:
        """Make one patient the user's only primary patient."""
        await self._unset_primary(iam_user_id, except_patient_id=fhir_patient_id)
        await self._session.execute(
            update(UserPatientMapping)
            .where(
                UserPatientMapping.iam_user_id == iam_user_id,
                UserPatientMapping.fhir_patient_id == fhir_patient_id,
            )
            .values(is_primary=True, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )

    async def remove_patient_from_user(
        self, iam_user_id: str, fhir_patient_id: str
    ) -> None:
        """Revoke a user's access to a patient."""
        await self._session.execute(
            delete(UserPatientMapping)
            .where(
                UserPatientMapping.iam_user_id == iam_user_id,
                UserPatientMapping.fhir_patient_id == fhir_patient_id,
            )
            .execution_options(synchronize_session=False)
        )

    async def has_access_to_patient(
        self, iam_user_id: str, fhir_patient_id: str
    ) -> bool:
        """Check whether a mapping exists for the pair."""
        result = await self._session.execute(
            select(UserPatientMapping.id)
            .where(
                UserPatientMapping.iam_user_id == iam_user_id,
                UserPatientMapping.fhir_patient_id == fhir_patient_id,
            )
            .limit(1)
        )
        return result.first() is not None

    async def delete_user_mappings(self, iam_user_id: str) -> None:
        """Remove every mapping of a user."""
        await self._session.execute(
            delete(UserPatientMapping)
            .where(UserPatientMapping.iam_user_id == iam_user_id)
            .execution_options(synchronize_session=False)
        )

    async def get_users_for_patient(self, fhir_patient_id: str) -> list[str]:
        """Distinct IAM users with access to a patient."""
        result = await self._session.execute(
            select(UserPatientMapping.iam_user_id)
            .where(UserPatientMapping.fhir_patient_id == fhir_patient_id)
            .distinct()
            .order_by(UserPatientMapping.iam_user_id)
        )
        return list(result.scalars().all())

    async def _unset_primary(self, iam_user_id: str, except_patient_id: str) -> None:
        await self._session.execute(
            update(UserPatientMapping)
            .where(
                UserPatientMapping.iam_user_id == iam_user_id,
                UserPatientMapping.fhir_patient_id != except_patient_id,
                UserPatientMapping.is_primary.is_(True),
            )
            .values(is_primary=False, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
