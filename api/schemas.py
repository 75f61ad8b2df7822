"""
Pydantic Schemas for API Request/Response Models

This module defines the data models exchanged between the desktop
wizard and the enrollment service.
"""

from typing import Optional
from pydantic import BaseModel, Field


# ============================================================
# Enrollment Schemas
# ============================================================

class EnrollResponse(BaseModel):
    """Acknowledgment returned for an enrollment upload."""
    ok: bool = Field(..., description="True if the face was enrolled")
    message: Optional[str] = Field(None, description="Human-readable outcome, shown verbatim on failure")


# ============================================================
# Health Check Schemas
# ============================================================

class HealthResponse(BaseModel):
    """System health check response."""
    status: str = Field(..., description="Overall status: 'healthy'")
    enrolled_faces: int = Field(..., description="Number of photos enrolled since startup")
