"""
FastAPI Application Entry Point

This module initializes the FastAPI application and configures:
- API routes
- Middleware (logging, CORS)
- Static pages
- Startup/shutdown hooks for the database
"""

import logging

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from tinylink.api import endpoints
from tinylink.api.schemas import HealthResponse
from tinylink.core.setting import settings
from tinylink.db.session import create_tables, engine
from tinylink.middleware.logging import add_logging_middleware

VERSION = "1.0"

logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logging.getLogger("tinylink").setLevel(settings.LOG_LEVEL.upper())

logger = logging.getLogger(__name__)

app = FastAPI(
    title="TinyLink",
    description="URL shortener with click counting",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

add_logging_middleware(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed request bodies as 400."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request body. Expected {\"url\": string, \"code\"?: string}"},
    )


# Health endpoint defined before router to match before catch-all route
@app.get("/healthz", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    return HealthResponse(ok=True, version=VERSION)


app.include_router(endpoints.router, tags=["Links"])

if settings.STATIC_DIR.is_dir():
    app.mount("/static", StaticFiles(directory=settings.STATIC_DIR), name="static")


@app.on_event("startup")
async def startup_event():
    """Create tables on startup unless migrations manage the schema."""
    if settings.AUTO_CREATE_TABLES:
        await create_tables()
    logger.info(f"TinyLink started, base URL {settings.BASE_URL}")


@app.on_event("shutdown")
async def shutdown_event():
    """Release pooled connections."""
    await engine.dispose()


if __name__ == "__main__":
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
