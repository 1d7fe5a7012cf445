"""FastAPI application: routers, CORS and error mapping."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from messmate.api.admin import router as admin_router
from messmate.api.manager import router as manager_router
from messmate.api.member import router as member_router
from messmate.api.schemas import ErrorResponse
from messmate.config import get_settings
from messmate.errors import MessMateError, error_response

logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(
    title=settings.api_title,
    description="Shared-meal expense tracking and monthly settlement",
    version=settings.api_version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Documented error bodies for every router
ERROR_RESPONSES = {code: {"model": ErrorResponse} for code in (400, 401, 402, 403, 404, 409, 423)}

app.include_router(manager_router, responses=ERROR_RESPONSES)
app.include_router(member_router, responses=ERROR_RESPONSES)
app.include_router(admin_router, responses=ERROR_RESPONSES)


@app.exception_handler(MessMateError)
async def messmate_error_handler(request: Request, exc: MessMateError) -> JSONResponse:
    """Map application errors to a JSON error body with the error's status."""
    if exc.http_status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.debug("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.http_status, content=error_response(exc))


# Register health check endpoint
@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint for monitoring."""
    return {"status": "ok"}


__all__ = ["app"]
