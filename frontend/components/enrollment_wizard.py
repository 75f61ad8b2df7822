"""
Enrollment wizard for the FaceNomad desktop app.

A single-session, four-stage state machine:

    intro -> capture -> processing -> result -> (intro | capture)

The wizard owns the camera session and the captured snapshot. The camera
is held only while the stage is ``capture``: every transition goes through
``_transition`` which releases it on exit and acquires it on entry.

Submission is split into ``begin_submit`` (moves to processing, returns a
ticket) and ``resolve_submit`` (performs the upload and applies the outcome)
so a UI can render the processing stage before the blocking request. A
result whose ticket no longer matches the current transition generation is
discarded.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

import cv2
import numpy as np

from frontend.api_client import (
    EnrollmentClient,
    EnrollmentError,
    GENERIC_FAILURE_MESSAGE,
)
from frontend.components.webcam_capture import (
    CameraPermissionError,
    DEFAULT_JPEG_QUALITY,
    Snapshot,
    WebcamCapture,
    take_snapshot,
)

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Enrollment successful"
NO_SNAPSHOT_MESSAGE = "Take a photo first."
CAMERA_ERROR_MESSAGE = "Could not access the camera. Check permissions."


class WizardStage(Enum):
    """Current step of the enrollment flow."""
    INTRO = "intro"
    CAPTURE = "capture"
    PROCESSING = "processing"
    RESULT = "result"


class WizardValidationError(ValueError):
    """The user attempted an action whose precondition is not met."""


class WizardStateError(RuntimeError):
    """An operation was invoked from a stage that does not offer it."""


@dataclass
class WizardConfig:
    """Configuration for the enrollment wizard."""
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    preview_interval_sec: float = 0.1

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "WizardConfig":
        data = data or {}
        return cls(
            jpeg_quality=int(data.get("jpeg_quality", cls.jpeg_quality)),
            preview_interval_sec=float(data.get("preview_interval_sec", cls.preview_interval_sec)),
        )


@dataclass(frozen=True)
class SubmissionTicket:
    """Tags an in-flight submission with the generation that issued it."""
    generation: int
    jpeg: bytes


class EnrollmentWizard:
    """
    Drives the intro / capture / processing / result flow.

    Args:
        client: Uploads the snapshot and interprets the acknowledgment.
        camera_factory: Zero-argument callable returning a camera object with
            ``open()``, ``close()``, ``read_frame()`` and ``is_open``.
        config: Wizard settings.
    """

    def __init__(
        self,
        client: EnrollmentClient,
        camera_factory: Callable[[], WebcamCapture] = WebcamCapture,
        config: Optional[WizardConfig] = None,
    ):
        self.client = client
        self.config = config or WizardConfig()
        self._camera_factory = camera_factory
        self._camera: Optional[WebcamCapture] = None
        self._lock = threading.RLock()

        self._stage = WizardStage.INTRO
        self._generation = 0
        self._snapshot: Optional[Snapshot] = None
        self._success_message: Optional[str] = None
        self._error_message: Optional[str] = None

    # ==================== Observable state ====================

    @property
    def stage(self) -> WizardStage:
        return self._stage

    @property
    def snapshot(self) -> Optional[Snapshot]:
        return self._snapshot

    @property
    def success_message(self) -> Optional[str]:
        return self._success_message

    @property
    def error_message(self) -> Optional[str]:
        return self._error_message

    @property
    def has_camera(self) -> bool:
        """True while a camera session is held."""
        return self._camera is not None and self._camera.is_open

    @property
    def generation(self) -> int:
        return self._generation

    # ==================== Transitions ====================

    def start(self) -> None:
        """intro -> capture."""
        with self._lock:
            self._require(WizardStage.INTRO, "start")
            self._transition(WizardStage.CAPTURE)

    def capture(self) -> Optional[Snapshot]:
        """
        Capture the current live frame as the snapshot.

        Returns:
            The new Snapshot, or None when there is no live camera session
            or no frame could be read. In that case nothing changes.
        """
        with self._lock:
            self._require(WizardStage.CAPTURE, "capture")

            if not self.has_camera:
                logger.debug("Capture ignored: no active camera session")
                return None

            success, frame = self._camera.read_frame()
            if not success or frame is None:
                logger.debug("Capture ignored: camera returned no frame")
                return None

            self._snapshot = take_snapshot(frame, self.config.jpeg_quality)
            logger.info(f"Captured snapshot {self._snapshot.width}x{self._snapshot.height}")
            return self._snapshot

    def retake(self) -> None:
        """Discard the snapshot and return to the live feed."""
        with self._lock:
            self._require(WizardStage.CAPTURE, "retake")
            self._snapshot = None
            self._error_message = None
            self._ensure_camera()

    def begin_submit(self) -> SubmissionTicket:
        """
        capture -> processing.

        Raises:
            WizardValidationError: If no snapshot has been taken. The stage
                stays at capture and the inline error is set.
        """
        with self._lock:
            self._require(WizardStage.CAPTURE, "submit")

            if self._snapshot is None:
                self._error_message = NO_SNAPSHOT_MESSAGE
                raise WizardValidationError(NO_SNAPSHOT_MESSAGE)

            jpeg = self._snapshot.jpeg
            self._error_message = None
            self._transition(WizardStage.PROCESSING)
            return SubmissionTicket(generation=self._generation, jpeg=jpeg)

    def resolve_submit(self, ticket: SubmissionTicket) -> bool:
        """
        Upload the ticket's photo and move to the result stage.

        The request runs outside the lock. Its outcome is applied only if
        no other transition happened since ``begin_submit``.

        Returns:
            True if the outcome was applied, False if it was stale.
        """
        success_message = None
        error_message = None
        try:
            self.client.enroll(ticket.jpeg)
            success_message = SUCCESS_MESSAGE
        except EnrollmentError as e:
            error_message = e.message or GENERIC_FAILURE_MESSAGE

        with self._lock:
            if ticket.generation != self._generation:
                logger.debug(
                    f"Discarding stale submission result (ticket {ticket.generation}, "
                    f"current {self._generation})"
                )
                return False

            self._success_message = success_message
            self._error_message = error_message
            self._transition(WizardStage.RESULT)

        if success_message:
            logger.info("Enrollment acknowledged")
        else:
            logger.warning(f"Enrollment failed: {error_message}")
        return True

    def submit(self) -> bool:
        """Submit the snapshot and wait for the outcome."""
        ticket = self.begin_submit()
        return self.resolve_submit(ticket)

    def finalize(self) -> None:
        """result (success) -> intro, clearing everything."""
        with self._lock:
            self._require(WizardStage.RESULT, "finalize")
            if not self._success_message:
                raise WizardStateError("finalize is only available after a successful enrollment")
            self._snapshot = None
            self._transition(WizardStage.INTRO)

    def retry(self) -> None:
        """result (error) -> capture, keeping the snapshot for resubmission."""
        with self._lock:
            self._require(WizardStage.RESULT, "retry")
            if self._success_message:
                raise WizardStateError("retry is only available after a failed enrollment")
            self._transition(WizardStage.CAPTURE)

    def reset(self) -> None:
        """
        Return to intro from any stage, e.g. when the page is reloaded.

        An in-flight submission is not cancelled; its result will be
        discarded as stale.
        """
        with self._lock:
            self._snapshot = None
            self._success_message = None
            self._error_message = None
            self._transition(WizardStage.INTRO)

    def shutdown(self) -> None:
        """Release the camera regardless of stage."""
        with self._lock:
            self._release_camera()

    # ==================== Display ====================

    def preview_frame(self) -> Optional[np.ndarray]:
        """
        RGB image for the display surface.

        The snapshot while one is held, otherwise the live frame.
        """
        with self._lock:
            if self._stage != WizardStage.CAPTURE:
                return None
            if self._snapshot is not None:
                return self._snapshot.to_rgb()
            if not self.has_camera:
                return None
            success, frame = self._camera.read_frame()
        if not success or frame is None:
            return None
        return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

    # ==================== Internals ====================

    def _require(self, stage: WizardStage, action: str) -> None:
        if self._stage != stage:
            raise WizardStateError(
                f"'{action}' is not available in stage '{self._stage.value}'"
            )

    def _transition(self, stage: WizardStage) -> None:
        previous = self._stage
        self._stage = stage
        self._generation += 1

        if previous == WizardStage.RESULT:
            self._success_message = None
            self._error_message = None

        if stage == WizardStage.CAPTURE:
            self._ensure_camera()
        else:
            self._release_camera()

        logger.info(f"Stage {previous.value} -> {stage.value}")

    def _ensure_camera(self) -> None:
        """Acquire a camera session unless one is already held."""
        if self.has_camera:
            return

        camera = self._camera or self._camera_factory()
        try:
            camera.open()
        except CameraPermissionError as e:
            logger.warning(f"Camera unavailable: {e}")
            self._camera = None
            self._error_message = CAMERA_ERROR_MESSAGE
            return

        self._camera = camera
        if self._error_message == CAMERA_ERROR_MESSAGE:
            self._error_message = None

    def _release_camera(self) -> None:
        if self._camera is not None:
            self._camera.close()
            self._camera = None
