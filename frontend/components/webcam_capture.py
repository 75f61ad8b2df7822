"""
Webcam capture component for the FaceNomad enrollment wizard.

Owns the camera session (an OpenCV VideoCapture handle) and turns a live
frame into an encoded JPEG snapshot ready for upload.
"""

import base64
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_JPEG_QUALITY = 92


class CameraPermissionError(PermissionError):
    """Raised when the camera cannot be opened (denied, busy or missing)."""


@dataclass
class CaptureConfig:
    """Configuration for webcam capture."""
    width: int = 640
    height: int = 480
    fps: int = 30
    device_id: int = 0

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CaptureConfig":
        data = data or {}
        return cls(
            width=int(data.get("width", cls.width)),
            height=int(data.get("height", cls.height)),
            fps=int(data.get("fps", cls.fps)),
            device_id=int(data.get("device_id", cls.device_id)),
        )


@dataclass
class Snapshot:
    """A single still frame captured from the live feed."""
    frame: np.ndarray  # BGR, native size of the live frame
    jpeg: bytes
    width: int
    height: int

    @property
    def data_url(self) -> str:
        return "data:image/jpeg;base64," + base64.b64encode(self.jpeg).decode("ascii")

    def to_rgb(self) -> np.ndarray:
        return cv2.cvtColor(self.frame, cv2.COLOR_BGR2RGB)


def encode_jpeg(frame: np.ndarray, quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    """
    Encode a BGR frame as JPEG.

    Args:
        frame: BGR numpy array
        quality: JPEG quality (0-100)

    Returns:
        Encoded JPEG bytes.
    """
    encode_param = [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)]
    success, buffer = cv2.imencode(".jpg", frame, encode_param)

    if not success:
        raise ValueError("Failed to encode frame")

    return buffer.tobytes()


def decode_jpeg(data: bytes) -> Optional[np.ndarray]:
    """Decode image bytes to a BGR frame, or None if they are not an image."""
    if not data:
        return None
    nparr = np.frombuffer(data, np.uint8)
    return cv2.imdecode(nparr, cv2.IMREAD_COLOR)


def take_snapshot(frame: np.ndarray, quality: int = DEFAULT_JPEG_QUALITY) -> Snapshot:
    """
    Render a live frame into a Snapshot of exactly the same size.

    The frame is copied so later reads from the device cannot mutate
    the captured pixels.
    """
    height, width = frame.shape[:2]
    still = np.ascontiguousarray(frame).copy()
    return Snapshot(
        frame=still,
        jpeg=encode_jpeg(still, quality),
        width=width,
        height=height,
    )


class WebcamCapture:
    """
    Manages webcam access and frame capture for the enrollment wizard.

    This component handles:
    - Opening/closing the webcam device
    - Reading live frames at the configured resolution
    """

    def __init__(self, config: Optional[CaptureConfig] = None):
        self.config = config or CaptureConfig()
        self._cap: Optional[cv2.VideoCapture] = None
        self._is_running: bool = False

    def open(self) -> None:
        """
        Open the webcam device.

        Raises:
            CameraPermissionError: If the device could not be opened.
        """
        if self._cap is not None:
            self.close()

        cap = cv2.VideoCapture(self.config.device_id)

        if not cap.isOpened():
            cap.release()
            logger.warning(f"Failed to open camera {self.config.device_id}")
            raise CameraPermissionError(
                f"Camera {self.config.device_id} is unavailable or access was denied"
            )

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.height)
        cap.set(cv2.CAP_PROP_FPS, self.config.fps)

        self._cap = cap
        self._is_running = True
        logger.info(
            f"Opened camera {self.config.device_id} at {self.config.width}x{self.config.height}"
        )

    def close(self) -> None:
        """Release the webcam device."""
        self._is_running = False
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.info("Camera closed")

    def read_frame(self) -> Tuple[bool, Optional[np.ndarray]]:
        """
        Read a single frame from the webcam.

        Returns:
            Tuple of (success, frame) where frame is BGR numpy array or None.
        """
        if self._cap is None or not self._is_running:
            return False, None

        ret, frame = self._cap.read()
        if not ret or frame is None:
            return False, None

        return True, frame

    @property
    def is_open(self) -> bool:
        """Check if webcam is currently open."""
        return self._cap is not None and self._is_running and self._cap.isOpened()

