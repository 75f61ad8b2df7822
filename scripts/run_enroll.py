"""
One-Command Enrollment: capture (or load) a face photo and submit it

Runs the same wizard the desktop app uses, without the UI:
  1. Open the webcam (or load a JPEG from disk)
  2. Capture one frame
  3. POST it to the enrollment service and print the outcome

Usage:
    # Webcam capture against the configured service
    python scripts/run_enroll.py

    # Upload an existing photo to a specific service
    python scripts/run_enroll.py --image face.jpg --api-url http://127.0.0.1:8000

    # No service needed
    python scripts/run_enroll.py --mock
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Tuple

import numpy as np

PROJECT_ROOT = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(PROJECT_ROOT))

from core.config import get_camera_config, get_enrollment_service_config, get_wizard_config
from frontend.api_client import create_client
from frontend.components.enrollment_wizard import EnrollmentWizard, WizardConfig
from frontend.components.webcam_capture import (
    CameraPermissionError,
    CaptureConfig,
    WebcamCapture,
    decode_jpeg,
)

logger = logging.getLogger("run_enroll")


class StillImageSource:
    """Camera stand-in that serves one image from disk as the live frame."""

    def __init__(self, path: Path):
        self.path = path
        self._frame: Optional[np.ndarray] = None

    def open(self) -> None:
        try:
            data = self.path.read_bytes()
        except OSError as e:
            raise CameraPermissionError(f"Cannot read {self.path}: {e}") from e
        frame = decode_jpeg(data)
        if frame is None:
            raise CameraPermissionError(f"{self.path} is not a readable image")
        self._frame = frame

    def close(self) -> None:
        self._frame = None

    def read_frame(self) -> Tuple[bool, Optional[np.ndarray]]:
        if self._frame is None:
            return False, None
        return True, self._frame

    @property
    def is_open(self) -> bool:
        return self._frame is not None


def print_banner(text: str) -> None:
    print()
    print("=" * 60)
    print(f"  {text}")
    print("=" * 60)


def capture_with_warmup(wizard: EnrollmentWizard, attempts: int, delay_sec: float) -> bool:
    """Webcams often return empty frames right after opening."""
    for _ in range(attempts):
        if wizard.capture() is not None:
            return True
        time.sleep(delay_sec)
    return False


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Capture one face photo and submit it for enrollment",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--image", type=Path, default=None,
        help="Upload this JPEG instead of capturing from the webcam",
    )
    parser.add_argument(
        "--api-url", default=None,
        help="Enrollment service base URL (default: enrollment_service.base_url)",
    )
    parser.add_argument(
        "--mock", action="store_true",
        help="Answer locally instead of calling the service",
    )
    parser.add_argument(
        "--warmup", type=int, default=30,
        help="Frames to wait for the webcam to deliver an image",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    service_config = dict(get_enrollment_service_config())
    if args.api_url:
        service_config["base_url"] = args.api_url
    client = create_client(service_config, mode="mock" if args.mock else None)

    if args.image:
        camera_factory = lambda: StillImageSource(args.image)
        source = str(args.image)
    else:
        capture_config = CaptureConfig.from_dict(get_camera_config())
        camera_factory = lambda: WebcamCapture(capture_config)
        source = f"camera {capture_config.device_id}"

    wizard = EnrollmentWizard(
        client=client,
        camera_factory=camera_factory,
        config=WizardConfig.from_dict(get_wizard_config()),
    )

    print_banner("PHASE 1: Capture")
    print(f"  Source:      {source}")
    try:
        wizard.start()
        if not wizard.has_camera:
            print(f"\nERROR: {wizard.error_message}")
            return 1

        if not capture_with_warmup(wizard, args.warmup, 0.05):
            print("\nERROR: No frame could be captured")
            return 1
        print(f"  Snapshot:    {wizard.snapshot.width}x{wizard.snapshot.height}, "
              f"{len(wizard.snapshot.jpeg)} bytes")

        print_banner("PHASE 2: Submit")
        print(f"  Endpoint:    {client.config.enroll_url} ({client.mode.value})")
        wizard.submit()
    finally:
        wizard.shutdown()

    if wizard.success_message:
        print_banner(f"ENROLLMENT COMPLETE: {wizard.success_message}")
        return 0

    print_banner(f"ENROLLMENT FAILED: {wizard.error_message}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
