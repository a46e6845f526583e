from fastapi import APIRouter
from app.api.v1 import schedules, availability, exceptions, blocked_times, appointments

api_router = APIRouter()

api_router.include_router(schedules.router, prefix="/schedules", tags=["schedules"])
api_router.include_router(availability.router, prefix="/availability", tags=["availability"])
api_router.include_router(exceptions.router, prefix="/exceptions", tags=["exceptions"])
api_router.include_router(blocked_times.router, prefix="/blocked-times", tags=["blocked-times"])
api_router.include_router(appointments.router, prefix="/appointments", tags=["appointments"])
