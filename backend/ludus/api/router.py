"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from ludus.api.routes import auth, vendors, activities, bookings

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(vendors.router)
api_router.include_router(activities.router)
api_router.include_router(bookings.router)
