"""
Frontend UI components for the FaceNomad enrollment wizard.
"""

from .webcam_capture import (
    WebcamCapture, CaptureConfig, CameraPermissionError, Snapshot, take_snapshot,
)
from .enrollment_wizard import (
    EnrollmentWizard, WizardConfig, WizardStage, WizardStateError, WizardValidationError,
)

__all__ = [
    "WebcamCapture", "CaptureConfig", "CameraPermissionError", "Snapshot", "take_snapshot",
    "EnrollmentWizard", "WizardConfig", "WizardStage", "WizardStateError", "WizardValidationError",
]
