"""
Enrollment API Routes

This module provides the REST endpoint the desktop wizard uploads to.
The photo arrives as one multipart part holding JPEG bytes; the response
is always JSON with an ``ok`` acknowledgment flag.
"""

import hashlib
import logging
import threading
from typing import Set

from fastapi import APIRouter, File, UploadFile

from api.schemas import EnrollResponse
from frontend.components.webcam_capture import decode_jpeg

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/biometrics", tags=["enrollment"])


class EnrollmentRegistry:
    """
    In-memory record of enrolled photos for the lifetime of the process.

    Photos are identified by the SHA-256 of their bytes, so only an exact
    resubmission is reported as a duplicate.
    """

    def __init__(self):
        self._digests: Set[str] = set()
        self._lock = threading.Lock()

    def add(self, data: bytes) -> bool:
        """Record a photo. Returns False if it was already enrolled."""
        digest = hashlib.sha256(data).hexdigest()
        with self._lock:
            if digest in self._digests:
                return False
            self._digests.add(digest)
            return True

    def clear(self) -> None:
        with self._lock:
            self._digests.clear()

    def __len__(self) -> int:
        return len(self._digests)


_registry = EnrollmentRegistry()


def get_registry() -> EnrollmentRegistry:
    """Get the process-wide enrollment registry."""
    return _registry


@router.post("/enroll", response_model=EnrollResponse)
async def enroll(image: UploadFile = File(...)):
    """
    Enroll a face photo.

    Args:
        image: JPEG upload (multipart field ``image``).

    Returns:
        EnrollResponse. Rejections are reported with ok=false and HTTP 200.
    """
    data = await image.read()
    frame = decode_jpeg(data)

    if frame is None:
        logger.warning(f"Rejected upload '{image.filename}': not a decodable image")
        return EnrollResponse(ok=False, message="Invalid image")

    if not get_registry().add(data):
        logger.info(f"Rejected upload '{image.filename}': already enrolled")
        return EnrollResponse(ok=False, message="This face is already enrolled")

    height, width = frame.shape[:2]
    logger.info(f"Enrolled '{image.filename}' ({width}x{height}, {len(data)} bytes)")
    return EnrollResponse(ok=True, message="Enrollment successful")
