"""
API Routes Package

- enrollment.py: multipart photo upload endpoint
"""

from api.routes.enrollment import router as enrollment_router

__all__ = [
    "enrollment_router",
]
