from datetime import date
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class AvailabilityResult(BaseModel):
    available: bool
    reason: Optional[str] = None


class Slot(BaseModel):
    time: str
    available: bool
    reason: Optional[str] = None


class SlotsResponse(BaseModel):
    clinician_id: UUID
    on_date: date
    duration_minutes: int
    cached: bool = False
    slots: List[Slot]


class AvailabilityCheckResponse(AvailabilityResult):
    clinician_id: UUID
    on_date: date
    time: str
