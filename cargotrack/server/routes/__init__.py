"""Route registration for the CargoTrack API."""

from fastapi import FastAPI

from .providers import router as providers_router
from .tracking import router as tracking_router


def register_routes(app: FastAPI):
    app.include_router(providers_router)
    app.include_router(tracking_router)
