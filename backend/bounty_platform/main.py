from __future__ import annotations
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from bounty_platform.config import settings
from bounty_platform.errors import PlatformError, UpstreamError
from bounty_platform.logging_setup import configure_logging
from bounty_platform.routes.system import router as system_router
from bounty_platform.routes.bounties import router as bounties_router
from bounty_platform.routes.search import router as search_router
from bounty_platform.routes.submissions import router as submissions_router
from bounty_platform.routes.media import router as media_router
from bounty_platform.routes.profile import router as profile_router
from bounty_platform.routes.sync import router as sync_router
from bounty_platform.routes.community import router as community_router
from bounty_platform.routes.debug import router as debug_router
import structlog

configure_logging()
log = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    log.info(
        "startup",
        env=settings.environment,
        version=settings.app_version,
        git_sha=settings.git_sha,
        airtable_base=settings.airtable_base_id,
        mock_fallback=settings.mock_fallback_enabled,
    )
    yield
    # Shutdown
    log.info("shutdown")

app = FastAPI(
    title=f"{settings.app_display_name} API",
    version=settings.app_version,
    lifespan=lifespan,
    description=f"{settings.app_display_name} API for bounties, submissions and community activity",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "dev" else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(system_router)
app.include_router(bounties_router)
app.include_router(search_router)
app.include_router(submissions_router)
app.include_router(media_router)
app.include_router(profile_router)
app.include_router(sync_router)
app.include_router(community_router)
app.include_router(debug_router)


@app.exception_handler(PlatformError)
async def platform_error_handler(request: Request, exc: PlatformError):
    if isinstance(exc, UpstreamError):
        log.error("upstream.error", service=exc.service, status=exc.upstream_status, message=exc.message, path=request.url.path)
    else:
        log.error("platform.error", error=type(exc).__name__, message=exc.message, path=request.url.path)
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_body()))


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    body = {"error": exc.detail}
    if isinstance(exc.detail, dict):
        body = {"error": exc.detail.get("error", "Request failed"), "details": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=422, content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())})


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    structlog.contextvars.bind_contextvars(request_id=rid)
    response: Response = await call_next(request)
    response.headers["X-Request-ID"] = rid
    structlog.contextvars.clear_contextvars()
    return response
