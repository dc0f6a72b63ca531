from fastapi import APIRouter
from salonbook.api.v1.endpoints import (
    appointments,
    auth,
    availability,
    booking_config,
    public,
    recurrence,
    time_blocks,
    waiting_list,
)

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(appointments.router, prefix="/appointments", tags=["appointments"])
api_router.include_router(availability.router, prefix="/availability", tags=["availability"])
api_router.include_router(time_blocks.router, prefix="/time-blocks", tags=["time-blocks"])
api_router.include_router(waiting_list.router, prefix="/waiting-list", tags=["waiting-list"])
api_router.include_router(recurrence.router, prefix="/recurrence", tags=["recurrence"])
api_router.include_router(booking_config.router, prefix="/booking-config", tags=["booking-config"])
api_router.include_router(public.router, prefix="/public", tags=["public"])
