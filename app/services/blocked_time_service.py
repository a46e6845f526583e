from typing import List, Optional
from uuid import UUID, uuid4

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import delete, select

from app.core.config import settings
from app.core.logger import logger
from app.core.redis import SlotCache
from app.db.models import BlockedTimeRecord
from app.scheduling.errors import SchedulingError
from app.scheduling.recurrence import expand_blocked_time
from app.schemas.exception import BlockedTime, BlockedTimeCreate

class BlockedTimeService:
    def __init__(self, session: AsyncSession, cache: Optional[SlotCache] = None):
        self.session = session
        self.cache = cache

    async def create_blocked_time(self, data: BlockedTimeCreate) -> List[BlockedTime]:
        parent_block_id = uuid4() if data.recurrence_pattern else None
        try:
            blocks = expand_blocked_time(data, parent_block_id, settings.MAX_SERIES_OCCURRENCES)
        except SchedulingError as e:
            raise HTTPException(status_code=400, detail=str(e))

        records = []
        for block in blocks:
            record = BlockedTimeRecord(
                **block.model_dump(exclude={"id", "block_type", "recurrence_pattern"}),
                block_type=block.block_type.value,
                recurrence_pattern=block.recurrence_pattern.model_dump(mode="json") if block.recurrence_pattern else None,
            )
            self.session.add(record)
            records.append(record)
        await self.session.commit()
        for record in records:
            await self.session.refresh(record)

        logger.info(f"Created {len(records)} blocked time entries for clinician {data.clinician_id}")
        if self.cache:
            await self.cache.invalidate(data.clinician_id)

        return [BlockedTime.model_validate(r) for r in records]

    async def get_blocked_times(self, clinician_id: UUID) -> List[BlockedTime]:
        stmt = select(BlockedTimeRecord).where(
            BlockedTimeRecord.clinician_id == clinician_id
        ).order_by(BlockedTimeRecord.start_date)
        result = await self.session.execute(stmt)
        return [BlockedTime.model_validate(r) for r in result.scalars().all()]

    async def delete_blocked_time(self, blocked_time_id: UUID, whole_series: bool = False) -> dict:
        record = await self.session.get(BlockedTimeRecord, blocked_time_id)
        if not record:
            raise HTTPException(status_code=404, detail="Blocked time not found")

        clinician_id = record.clinician_id
        if whole_series and record.parent_block_id:
            stmt = delete(BlockedTimeRecord).where(
                BlockedTimeRecord.parent_block_id == record.parent_block_id
            )
            await self.session.execute(stmt)
        else:
            await self.session.delete(record)
        await self.session.commit()

        if self.cache:
            await self.cache.invalidate(clinician_id)
        return {"message": "Blocked time deleted successfully"}
