from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

import structlog

from cocoa_scoring.config import settings
from cocoa_scoring.core.logging import configure_logging

# IMPORT ROUTERS
from cocoa_scoring.routers.contests import router as contests_router
from cocoa_scoring.routers.errors import validation_exception_handler
from cocoa_scoring.routers.health import router as health_router
from cocoa_scoring.routers.rankings import router as rankings_router
from cocoa_scoring.routers.samples import router as samples_router
from cocoa_scoring.services.cache import reset_cache

configure_logging()
logger = structlog.get_logger(__name__)


# SWAGGER UI - tag display order
_OPENAPI_TAGS = [
    {"name": "Root"},
    {"name": "Health"},
    {"name": "Samples"},
    {"name": "Rankings"},
    {"name": "Contests"},
]

# FASTAPI APPLICATION CONFIGURATION
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=_OPENAPI_TAGS,
)

app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

# REGISTER EXCEPTION HANDLERS
app.add_exception_handler(RequestValidationError, validation_exception_handler)

# REGISTER ROUTERS (order matches _OPENAPI_TAGS / Swagger UI display order)
app.include_router(health_router)    # Health
app.include_router(samples_router)   # Physical evaluation / approval / judge evaluations
app.include_router(rankings_router)  # Recompute / top-N / outlier report
app.include_router(contests_router)  # Status / physical stats / cleanup


# ROOT ENDPOINT
@app.get("/", tags=["Root"], summary="Root endpoint")
async def root():
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc"
        },
        "status": "running"
    }


# STARTUP EVENT
@app.on_event("startup")
async def startup_event():
    logger.info("app_starting", env=settings.APP_ENV, version=settings.APP_VERSION)


# SHUTDOWN EVENT
@app.on_event("shutdown")
async def shutdown_event():
    reset_cache()
    logger.info("app_stopped")


# RUN WITH UVICORN
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "cocoa_scoring.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
