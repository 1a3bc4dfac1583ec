"""FastAPI app creation, CORS, global state, and helper functions."""

import logging
import os
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader

from ..app import CargoTrack
from ..errors import InvalidTrackingQuery, ProviderConfigurationError

logger = logging.getLogger(__name__)

_config_path = os.getenv("CARGOTRACK_CONFIG", "config.yaml")

_app: Optional[CargoTrack] = None


def _try_load_app():
    """Build CargoTrack from the config file, or the environment if it is missing."""
    global _app
    try:
        _app = CargoTrack(_config_path)
    except Exception as e:
        logger.error(f"Failed to load CargoTrack: {e}", exc_info=True)
        _app = None


def require_app() -> CargoTrack:
    """Raise 503 if app could not be configured. Lazy-loads on first call."""
    global _app
    if _app is None:
        _try_load_app()
    if _app is None:
        raise HTTPException(503, "Tracking is not configured. Check the server logs.")
    return _app


def set_app(new_app: Optional[CargoTrack]):
    """Replace the global CargoTrack instance (used by tests and embedding code)."""
    global _app
    _app = new_app


def get_app_instance() -> Optional[CargoTrack]:
    """Get the current global _app instance (may be None)."""
    return _app


# ── Optional API key authentication ──

_API_KEY = os.getenv("CARGOTRACK_API_KEY")
_api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(
    request: Request,
    api_key_header_value: Optional[str] = Security(_api_key_header),
):
    """Verify API key from Authorization: Bearer <key> or X-API-Key header.

    When CARGOTRACK_API_KEY is not set, all requests are allowed (dev mode).
    When set, a valid key is required on tracking endpoints.
    """
    if _API_KEY is None:
        return None

    if api_key_header_value and api_key_header_value == _API_KEY:
        return api_key_header_value

    auth_header = request.headers.get("authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:]
        if token == _API_KEY:
            return token

    raise HTTPException(401, "Invalid or missing API key")


async def _invalid_query_handler(request: Request, exc: InvalidTrackingQuery):
    return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})


async def _misconfigured_provider_handler(request: Request, exc: ProviderConfigurationError):
    logger.error(f"Provider misconfiguration: {exc}")
    return JSONResponse(status_code=500, content={"success": False, "error": "Tracking service error"})


# --- FastAPI app creation (after all helpers are defined to avoid circular imports) ---

def create_api() -> FastAPI:
    """Create and configure the FastAPI app with routes."""
    from .. import __version__

    _api = FastAPI(title="CargoTrack", version=__version__)

    allowed_origins_str = os.getenv(
        "CARGOTRACK_ALLOWED_ORIGINS",
        "http://localhost:3000,http://localhost:5173",
    )
    allowed_origins = [o.strip() for o in allowed_origins_str.split(",") if o.strip()]
    _api.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if _API_KEY is None:
        logger.warning(
            "CARGOTRACK_API_KEY is not set. API endpoints are unauthenticated. "
            "Set CARGOTRACK_API_KEY environment variable to enable authentication."
        )

    _api.add_exception_handler(InvalidTrackingQuery, _invalid_query_handler)
    _api.add_exception_handler(ProviderConfigurationError, _misconfigured_provider_handler)

    from .routes import register_routes
    register_routes(_api)
    return _api


api = create_api()
