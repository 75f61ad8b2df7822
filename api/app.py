"""
FastAPI Application Entry Point

This module creates the development enrollment service the FaceNomad
wizard talks to when no real biometric backend is running.

Usage:
    # From project root:
    uvicorn api.app:app --host 127.0.0.1 --port 8000 --reload

    # Or run directly:
    python -m api.app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes.enrollment import router as enrollment_router, get_registry
from api.schemas import HealthResponse
from core.config import get_server_config


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup and clear the in-memory registry on shutdown."""
    logger.info("Starting FaceNomad development enrollment service")
    yield
    logger.info(f"Shutting down ({len(get_registry())} faces enrolled this session)")
    get_registry().clear()


app = FastAPI(
    title="FaceNomad Enrollment Service (development)",
    description="""
Stand-in for the biometric enrollment service.

POST a multipart form to `/api/biometrics/enroll` with the photo under the
`image` field. The response is `{"ok": bool, "message": str}`.
    """,
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(enrollment_router)


# ============================================================
# Health Check Endpoint
# ============================================================

@app.get("/health", response_model=HealthResponse, tags=["system"])
async def health_check():
    """Liveness check used by the wizard's backend auto-detection."""
    return HealthResponse(status="healthy", enrolled_faces=len(get_registry()))


@app.get("/", tags=["system"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": "FaceNomad Enrollment Service",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    server = get_server_config()
    logger.info(f"Starting server on {server['host']}:{server['port']}")
    uvicorn.run(
        "api.app:app",
        host=server["host"],
        port=server["port"],
        reload=True,
        log_level="info",
    )
