from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.logger import logger
from app.core.redis import SlotCache
from app.db.models import ScheduleExceptionRecord
from app.scheduling.availability import review_exception
from app.scheduling.errors import InvalidTransitionError
from app.schemas.exception import (
    ExceptionApproval,
    ExceptionDenial,
    ExceptionStatus,
    ScheduleException,
    ScheduleExceptionCreate,
)

class ExceptionService:
    def __init__(self, session: AsyncSession, cache: Optional[SlotCache] = None):
        self.session = session
        self.cache = cache

    async def create_exception(self, data: ScheduleExceptionCreate) -> ScheduleException:
        record = ScheduleExceptionRecord(
            **data.model_dump(exclude={"exception_type"}),
            exception_type=data.exception_type.value,
            status=ExceptionStatus.REQUESTED.value,
        )
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)

        logger.info(
            f"Exception {record.id} requested for clinician {record.clinician_id} "
            f"({record.start_date.isoformat()} - {record.end_date.isoformat()})"
        )
        return ScheduleException.model_validate(record)

    async def get_exceptions(
        self,
        clinician_id: UUID,
        status: Optional[ExceptionStatus] = None,
    ) -> List[ScheduleException]:
        stmt = select(ScheduleExceptionRecord).where(
            ScheduleExceptionRecord.clinician_id == clinician_id
        )
        if status:
            stmt = stmt.where(ScheduleExceptionRecord.status == status.value)
        stmt = stmt.order_by(ScheduleExceptionRecord.start_date.desc())

        result = await self.session.execute(stmt)
        return [ScheduleException.model_validate(r) for r in result.scalars().all()]

    async def approve(self, exception_id: UUID, approval: ExceptionApproval) -> ScheduleException:
        return await self._review(exception_id, ExceptionStatus.APPROVED, approval.approved_by)

    async def deny(self, exception_id: UUID, denial: ExceptionDenial) -> ScheduleException:
        return await self._review(
            exception_id, ExceptionStatus.DENIED, denial.approved_by, denial.denial_reason
        )

    async def _review(
        self,
        exception_id: UUID,
        decision: ExceptionStatus,
        reviewed_by: UUID,
        denial_reason: Optional[str] = None,
    ) -> ScheduleException:
        record = await self.session.get(ScheduleExceptionRecord, exception_id)
        if not record:
            raise HTTPException(status_code=404, detail="Schedule exception not found")

        try:
            reviewed = review_exception(
                ScheduleException.model_validate(record), decision, reviewed_by, denial_reason
            )
        except InvalidTransitionError as e:
            raise HTTPException(status_code=409, detail=str(e))

        record.status = reviewed.status.value
        record.approved_by = reviewed.approved_by
        record.approval_date = reviewed.approval_date
        record.denial_reason = reviewed.denial_reason
        record.updated_at = datetime.utcnow()
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)

        logger.info(f"Exception {record.id} {record.status.lower()} by {reviewed_by}")
        if self.cache and decision == ExceptionStatus.APPROVED:
            await self.cache.invalidate(record.clinician_id)

        return ScheduleException.model_validate(record)
