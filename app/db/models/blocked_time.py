from sqlmodel import SQLModel, Field
from sqlalchemy import JSON, Column
from typing import Optional
from datetime import date, datetime
from uuid import UUID, uuid4

class BlockedTimeRecord(SQLModel, table=True):
    __tablename__ = "blocked_times"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    clinician_id: UUID = Field(index=True)
    title: str
    block_type: str
    start_date: date
    end_date: date
    start_time: str  # HH:MM
    end_time: str
    notes: Optional[str] = None
    is_recurring: bool = Field(default=False)
    recurrence_pattern: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    parent_block_id: Optional[UUID] = Field(default=None, index=True)
    created_by: Optional[UUID] = None
    created_date: datetime = Field(default_factory=datetime.utcnow)
