from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import date, datetime
from uuid import UUID, uuid4

class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    clinician_id: UUID = Field(index=True)
    client_id: Optional[UUID] = None
    appointment_date: date = Field(index=True)
    start_time: str  # HH:MM
    end_time: str
    status: str = Field(default="Scheduled")  # Scheduled ... Cancelled, No Show
    appointment_type: Optional[str] = None
    notes: Optional[str] = None
    is_recurring: bool = Field(default=False)
    parent_recurrence_id: Optional[UUID] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
