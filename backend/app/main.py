"""
FastAPI entrypoint for Triva backend application.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.core.config import settings
from app.core.exceptions import TripLedgerError
from app.api.router import api_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Triva API",
    description="Backend API for shared trip expenses and settlements",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TripLedgerError)
async def trip_ledger_error_handler(request: Request, exc: TripLedgerError):
    """Render domain errors with their HTTP status."""
    content = {"detail": exc.message}
    if exc.errors is not None:
        content["errors"] = exc.errors
    if exc.status_code >= 500 and settings.DEBUG and exc.__cause__ is not None:
        content["debug"] = str(exc.__cause__)
    return JSONResponse(status_code=exc.status_code, content=content)


# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "Triva API is running"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
