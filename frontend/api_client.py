"""
API client for the FaceNomad enrollment service.

Uploads a captured face photo to the biometric enrollment endpoint and
interprets the service's acknowledgment.
Includes mock mode for development without backend.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Error processing enrollment."
TRANSPORT_FAILURE_MESSAGE = "Failed to send the photo to the enrollment service."


class ConnectionMode(Enum):
    """API connection mode."""
    MOCK = "mock"          # Simulated responses (no backend needed)
    LIVE = "live"          # Real backend connection


class EnrollmentError(Exception):
    """Base class for failed enrollment submissions."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TransportError(EnrollmentError):
    """The request never produced a usable response (network failure)."""


class ServiceRejection(EnrollmentError):
    """The service answered but did not acknowledge the enrollment."""


@dataclass
class EnrollmentResult:
    """Acknowledged response from the enrollment endpoint."""
    ok: bool
    message: Optional[str] = None
    status_code: Optional[int] = None


@dataclass
class ServiceConfig:
    """Where and how to upload the photo."""
    base_url: str = "http://127.0.0.1:8000"
    enroll_path: str = "/api/biometrics/enroll"
    field_name: str = "image"
    filename: str = "face.jpg"
    timeout_sec: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ServiceConfig":
        data = data or {}
        timeout = data.get("timeout_sec")
        return cls(
            base_url=data.get("base_url", cls.base_url),
            enroll_path=data.get("enroll_path", cls.enroll_path),
            field_name=data.get("field_name", cls.field_name),
            filename=data.get("filename", cls.filename),
            timeout_sec=float(timeout) if timeout is not None else None,
        )

    @property
    def enroll_url(self) -> str:
        return self.base_url.rstrip("/") + "/" + self.enroll_path.lstrip("/")


def interpret_response(status_code: int, payload: Any) -> EnrollmentResult:
    """
    Apply the acknowledgment rule to a decoded response.

    Success requires a 2xx status AND ``payload["ok"] is True``. Anything
    else raises ServiceRejection carrying the server message when there is one.

    Args:
        status_code: HTTP status of the response
        payload: Decoded JSON body, or None if the body was not JSON

    Returns:
        EnrollmentResult with ok=True.

    Raises:
        ServiceRejection: If the service did not acknowledge the enrollment.
    """
    body = payload if isinstance(payload, dict) else {}
    message = body.get("message")
    if not isinstance(message, str) or not message.strip():
        message = None

    if 200 <= status_code < 300 and body.get("ok") is True:
        return EnrollmentResult(ok=True, message=message, status_code=status_code)

    raise ServiceRejection(message or GENERIC_FAILURE_MESSAGE, status_code=status_code)


class MockBackend:
    """
    Simulates the enrollment endpoint for development without the real API.
    Accepts anything that decodes as an image.
    """

    def enroll(self, jpeg: bytes) -> Dict[str, Any]:
        from frontend.components.webcam_capture import decode_jpeg

        if decode_jpeg(jpeg) is None:
            return {"ok": False, "message": "Invalid image"}
        return {"ok": True, "message": "Enrolled (mock)"}


class EnrollmentClient:
    """
    Client for the biometric enrollment endpoint.

    Supports both live (real backend) and mock (simulated) modes. Each call
    to enroll() performs exactly one request: no retry, no cancellation.
    """

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        mode: ConnectionMode = ConnectionMode.LIVE,
    ):
        self.config = config or ServiceConfig()
        self.mode = mode
        self._mock = MockBackend()

    def set_mode(self, mode: ConnectionMode) -> None:
        """Switch between mock and live mode."""
        self.mode = mode
        logger.info(f"Switched to {mode.value.upper()} mode")

    def check_backend_available(self) -> bool:
        """Check if the backend server is reachable."""
        try:
            response = httpx.get(f"{self.config.base_url.rstrip('/')}/health", timeout=2.0)
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    def enroll(self, jpeg: bytes) -> EnrollmentResult:
        """
        Upload a face photo for enrollment.

        Args:
            jpeg: Encoded JPEG bytes of the captured snapshot

        Returns:
            EnrollmentResult with ok=True when the service acknowledged.

        Raises:
            TransportError: If the request failed before a response arrived.
            ServiceRejection: If the service declined, answered non-2xx,
                or returned a body that is not the expected JSON.
        """
        if self.mode == ConnectionMode.MOCK:
            return interpret_response(200, self._mock.enroll(jpeg))

        url = self.config.enroll_url
        files = {
            self.config.field_name: (self.config.filename, jpeg, "image/jpeg"),
        }

        try:
            response = httpx.post(url, files=files, timeout=self.config.timeout_sec)
        except httpx.HTTPError as e:
            logger.warning(f"POST {url} failed: {e}")
            raise TransportError(TRANSPORT_FAILURE_MESSAGE) from e

        try:
            payload = response.json()
        except ValueError:
            logger.warning(f"POST {url} returned a non-JSON body ({response.status_code})")
            payload = None

        result = interpret_response(response.status_code, payload)
        logger.info(f"POST {url} acknowledged ({response.status_code})")
        return result


def create_client(service_config: Optional[Dict[str, Any]] = None,
                  mode: Optional[str] = None) -> EnrollmentClient:
    """
    Build a client from the enrollment_service config section.

    ``mode`` overrides the configured one; "auto" checks the backend and
    falls back to mock mode when it is unreachable.
    """
    service_config = service_config or {}
    client = EnrollmentClient(ServiceConfig.from_dict(service_config))

    mode = (mode or service_config.get("mode", "live")).lower()
    if mode == "auto":
        if client.check_backend_available():
            logger.info("Backend detected - using LIVE mode")
            client.set_mode(ConnectionMode.LIVE)
        else:
            logger.info("Backend not available - using MOCK mode")
            client.set_mode(ConnectionMode.MOCK)
    else:
        client.set_mode(ConnectionMode(mode))

    return client
