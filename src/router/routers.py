# src/router/routers.py

from fastapi import FastAPI
from src.modules.matching.matching_controller import router as matching_router
from src.modules.donor.donor_controller import router as donor_router
from src.modules.requests.requests_controller import router as requests_router
from src.modules.notifications.notifications_controller import router as notifications_router

def include_routers(app: FastAPI) -> None:
    """Include all API routers in the FastAPI application."""
    app.include_router(matching_router)
    app.include_router(donor_router)
    app.include_router(requests_router)
    app.include_router(notifications_router)
