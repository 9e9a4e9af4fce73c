from fastapi import APIRouter

from parkboard.api.v1 import admin, auth, bookings, profile, slots

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(auth.router)
api_router.include_router(profile.router)
api_router.include_router(slots.router)
api_router.include_router(bookings.router)
api_router.include_router(admin.router)
