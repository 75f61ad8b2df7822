"""
Tests for the webcam capture component

These tests verify that:
1. Snapshots keep the native frame size and encode to JPEG
2. WebcamCapture opens, reads and releases the device
3. A device that cannot be opened raises CameraPermissionError
"""

import base64

import numpy as np
import pytest
from unittest.mock import MagicMock, patch

from frontend.components.webcam_capture import (
    CameraPermissionError,
    CaptureConfig,
    WebcamCapture,
    decode_jpeg,
    encode_jpeg,
    take_snapshot,
)


@pytest.fixture
def frame():
    return np.random.randint(0, 255, (90, 160, 3), dtype=np.uint8)


@pytest.fixture
def mock_capture(frame):
    """A cv2.VideoCapture double that is open and returns ``frame``."""
    cap = MagicMock()
    cap.isOpened.return_value = True
    cap.read.return_value = (True, frame)
    return cap


class TestSnapshot:
    """Tests for snapshot creation and encoding."""

    def test_snapshot_keeps_native_size(self, frame):
        snapshot = take_snapshot(frame)

        assert snapshot.width == 160
        assert snapshot.height == 90
        assert snapshot.frame.shape == frame.shape

    def test_snapshot_jpeg_decodes_to_same_size(self, frame):
        snapshot = take_snapshot(frame)

        decoded = decode_jpeg(snapshot.jpeg)
        assert decoded is not None
        assert decoded.shape == frame.shape

    def test_data_url(self, frame):
        snapshot = take_snapshot(frame)

        prefix = "data:image/jpeg;base64,"
        assert snapshot.data_url.startswith(prefix)
        assert base64.b64decode(snapshot.data_url[len(prefix):]) == snapshot.jpeg

    def test_to_rgb_swaps_channels(self):
        bgr = np.zeros((4, 4, 3), dtype=np.uint8)
        bgr[..., 0] = 255  # blue

        rgb = take_snapshot(bgr).to_rgb()
        assert rgb[0, 0, 2] == 255
        assert rgb[0, 0, 0] == 0

    def test_lower_quality_is_smaller(self, frame):
        assert len(encode_jpeg(frame, quality=10)) < len(encode_jpeg(frame, quality=95))

    def test_decode_rejects_garbage(self):
        assert decode_jpeg(b"") is None
        assert decode_jpeg(b"not an image") is None


class TestCaptureConfig:
    """Tests for CaptureConfig."""

    def test_defaults(self):
        config = CaptureConfig.from_dict(None)
        assert (config.width, config.height, config.fps, config.device_id) == (640, 480, 30, 0)

    def test_from_dict(self):
        config = CaptureConfig.from_dict({"device_id": 2, "width": 1280, "height": 720})
        assert config.device_id == 2
        assert config.width == 1280
        assert config.height == 720
        assert config.fps == 30


class TestWebcamCapture:
    """Tests for WebcamCapture with a mocked OpenCV device."""

    def test_open_read_close(self, mock_capture, frame):
        with patch("frontend.components.webcam_capture.cv2.VideoCapture",
                   return_value=mock_capture) as video_capture:
            camera = WebcamCapture(CaptureConfig(device_id=1))
            camera.open()

            assert camera.is_open is True
            video_capture.assert_called_once_with(1)

            success, read = camera.read_frame()
            assert success is True
            assert read is frame

            camera.close()

        assert camera.is_open is False
        mock_capture.release.assert_called_once()
        assert camera.read_frame() == (False, None)

    def test_open_failure_raises_permission_error(self):
        cap = MagicMock()
        cap.isOpened.return_value = False

        with patch("frontend.components.webcam_capture.cv2.VideoCapture", return_value=cap):
            camera = WebcamCapture()
            with pytest.raises(CameraPermissionError):
                camera.open()

        assert camera.is_open is False
        cap.release.assert_called_once()

    def test_permission_error_is_a_permission_error(self):
        assert issubclass(CameraPermissionError, PermissionError)

    def test_failed_read(self, mock_capture):
        mock_capture.read.return_value = (False, None)

        with patch("frontend.components.webcam_capture.cv2.VideoCapture",
                   return_value=mock_capture):
            camera = WebcamCapture()
            camera.open()

        assert camera.read_frame() == (False, None)
