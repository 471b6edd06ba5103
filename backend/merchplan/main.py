"""MERCHPLAN WHAT-IF - FastAPI Application.

Merchandise planning scenario simulation (advisory only)
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from merchplan.core.config import settings
from merchplan.api import simulator

logging.getLogger("merchplan").setLevel(settings.LOG_LEVEL.upper())

app = FastAPI(
    title=settings.APP_NAME,
    description="MERCHPLAN - What-If Scenario Simulation for Merchandise Planning",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(simulator.router)  # What-If Simulator API


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "service": "MERCHPLAN WHAT-IF",
        "version": "1.0.0",
        "status": "operational",
    }


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "debug": settings.DEBUG,
    }
