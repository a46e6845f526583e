from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import date, datetime
from uuid import UUID, uuid4

class ScheduleExceptionRecord(SQLModel, table=True):
    __tablename__ = "schedule_exceptions"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    clinician_id: UUID = Field(index=True)
    exception_type: str
    start_date: date
    end_date: date
    start_time: Optional[str] = None  # HH:MM
    end_time: Optional[str] = None
    all_day: bool = Field(default=True)
    reason: str
    notes: Optional[str] = None
    status: str = Field(default="Requested")  # Requested, Approved, Denied
    approved_by: Optional[UUID] = None
    approval_date: Optional[datetime] = None
    denial_reason: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
