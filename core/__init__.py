"""
Core Module for the FaceNomad enrollment wizard

This package contains shared infrastructure used by the frontend,
the development enrollment service and the scripts.

Main components:
    - config: Configuration loading and management

Usage:
    from core.config import get_config, get_camera_config
"""

from core.config import (
    get_config,
    get_section,
    get_camera_config,
    get_enrollment_service_config,
    get_wizard_config,
    get_app_config,
    get_server_config,
)

__all__ = [
    "get_config",
    "get_section",
    "get_camera_config",
    "get_enrollment_service_config",
    "get_wizard_config",
    "get_app_config",
    "get_server_config",
]
