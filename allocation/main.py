import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from allocation.api.v1.router import router as v1_router
from allocation.core.config import settings
from allocation.core.errors import InvariantViolationError
from allocation.core.telemetry import setup_telemetry

logging.basicConfig(level=settings.log_level)
log = logging.getLogger(__name__)

app = FastAPI(title="Parking Allocation API", version="0.1.0")


@app.exception_handler(InvariantViolationError)
async def invariant_violation_handler(request: Request, exc: InvariantViolationError) -> JSONResponse:
    log.error("invariant violation on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=400, content={"detail": exc.kind.value, "message": exc.message})


if settings.telemetry_enabled:
    setup_telemetry(app)
app.include_router(v1_router)
