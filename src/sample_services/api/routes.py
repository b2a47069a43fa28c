"""Demo endpoints.

Both always answer 200; they do not depend on the worker.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from sample_services.observability.correlation import logger_with_trace

router = APIRouter()

WELCOME_MESSAGE = "Welcome to Sample API with new ver"


@router.get("/healthz")
async def healthz():
    """Liveness probe."""
    return JSONResponse({"status": "ok"})


@router.get("/")
async def root(request: Request):
    services = request.app.state.services
    logger_with_trace(services.logger, getattr(request.state, "trace_context", None)).debug("welcome_served")
    return JSONResponse({"message": WELCOME_MESSAGE})
