"""
Tests for the headless enrollment script

These tests verify that:
1. A readable photo enrolled in mock mode exits with 0
2. An unreadable or missing photo exits with 1 and names the camera error
"""

import importlib.util
from pathlib import Path

import numpy as np
import pytest

from frontend.components.webcam_capture import encode_jpeg

SCRIPT = Path(__file__).parent.parent / "scripts" / "run_enroll.py"


@pytest.fixture(scope="module")
def run_enroll():
    spec = importlib.util.spec_from_file_location("run_enroll", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def face_jpeg(tmp_path):
    path = tmp_path / "face.jpg"
    path.write_bytes(encode_jpeg(np.full((48, 64, 3), 120, dtype=np.uint8)))
    return path


class TestMain:
    """Exit codes of run_enroll.main()."""

    def test_mock_enrollment_succeeds(self, run_enroll, face_jpeg, capsys):
        assert run_enroll.main(["--image", str(face_jpeg), "--mock"]) == 0

        out = capsys.readouterr().out
        assert "64x48" in out
        assert "ENROLLMENT COMPLETE: Enrollment successful" in out

    def test_undecodable_image_fails(self, run_enroll, tmp_path, capsys):
        path = tmp_path / "broken.jpg"
        path.write_bytes(b"not a jpeg")

        assert run_enroll.main(["--image", str(path), "--mock"]) == 1
        assert "Could not access the camera" in capsys.readouterr().out

    def test_missing_image_fails(self, run_enroll, tmp_path):
        assert run_enroll.main(["--image", str(tmp_path / "absent.jpg"), "--mock"]) == 1


class TestStillImageSource:
    """The file-backed camera stand-in."""

    def test_serves_the_same_frame_until_closed(self, run_enroll, face_jpeg):
        source = run_enroll.StillImageSource(face_jpeg)
        source.open()

        success, frame = source.read_frame()
        assert success is True
        assert frame.shape == (48, 64, 3)
        assert source.is_open is True

        source.close()
        assert source.read_frame() == (False, None)
        assert source.is_open is False
