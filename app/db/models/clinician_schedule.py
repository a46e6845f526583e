from sqlmodel import SQLModel, Field
from sqlalchemy import JSON, Column
from typing import Optional
from datetime import date, datetime
from uuid import UUID, uuid4

class ClinicianSchedule(SQLModel, table=True):
    __tablename__ = "clinician_schedules"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    clinician_id: UUID = Field(index=True)
    # WeeklySchedule.model_dump(mode="json"): days + buffer_minutes
    weekly_schedule: dict = Field(default_factory=dict, sa_column=Column(JSON))
    effective_start_date: date
    effective_end_date: Optional[date] = None
    accept_new_clients: bool = Field(default=True)
    max_appointments_per_day: Optional[int] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
