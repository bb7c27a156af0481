import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from lumina.api.v1.api_v1_router import api_router
from lumina.core.config import settings
from lumina.core.database import close_db, init_db
from lumina.core.exceptions import LuminaError
from lumina.core.logging_config import setup_logging
from lumina.cron_job.cron import build_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()

    logger.info("Connecting to DB...")
    await init_db()

    # The Mongo TTL index expires codes on its own; the in-process store needs a sweep
    scheduler = None
    if settings.CODE_STORE_BACKEND == "memory":
        scheduler = build_scheduler()
        scheduler.start()

    yield  # Application runs here

    if scheduler:
        scheduler.shutdown()

    logger.info("Closing DB connection...")
    await close_db()


# Initialize FastAPI app with lifespan
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Lumina gallery authentication API",
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.frontend_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LuminaError)
async def lumina_error_handler(request: Request, exc: LuminaError):
    return JSONResponse(
        status_code=exc.http_status,
        content={"success": False, "message": exc.message}
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    error = exc.errors()[0]
    loc = ".".join(str(x) for x in error["loc"] if x != "body") or "request body"
    msg = error["msg"]

    return JSONResponse(
        status_code=400,
        content={"success": False, "message": f"Invalid {loc}: {msg.lower()}"}
    )


@app.exception_handler(PyMongoError)
async def database_error_handler(request: Request, exc: PyMongoError):
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={"success": False, "message": "Service temporarily unavailable"}
    )


# Include routers
app.include_router(api_router, prefix=settings.API_PREFIX)


# Root endpoint
@app.get("/")
async def root():
    return {"message": "Welcome to the Lumina API"}
