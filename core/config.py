"""
Configuration Management Module

This module provides a centralized way to load and access configuration settings
from the config.yaml file. It uses the Singleton pattern to ensure only one
configuration instance exists throughout the application.

Usage:
    from core.config import get_config
    config = get_config()
    camera_config = config["camera"]
"""

import yaml
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse


# Store the singleton instance (module-level variable)
_config_instance: Optional[Dict[str, Any]] = None


def get_project_root() -> Path:
    """
    Find the project root directory.

    The project root is identified by the presence of config.yaml file.
    This function walks up the directory tree from this file's location
    until it finds config.yaml.

    Returns:
        Path: The absolute path to the project root directory.

    Raises:
        FileNotFoundError: If config.yaml cannot be found in any parent directory.
    """
    current_dir = Path(__file__).resolve().parent

    while current_dir != current_dir.parent:
        config_path = current_dir / "config.yaml"
        if config_path.exists():
            return current_dir
        current_dir = current_dir.parent

    raise FileNotFoundError(
        "Could not find config.yaml in any parent directory. "
        "Make sure you're running from within the project directory."
    )


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Optional path to the config file.
                     If not provided, uses the default config.yaml in project root.

    Returns:
        Dict containing all configuration values.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        yaml.YAMLError: If the config file contains invalid YAML.
    """
    if config_path is None:
        config_path = get_project_root() / "config.yaml"
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    return config or {}


def get_config(reload: bool = False) -> Dict[str, Any]:
    """
    Get the configuration singleton.

    Args:
        reload: If True, forces reloading the configuration from disk.

    Returns:
        Dict containing all configuration values.

    Example:
        config = get_config()
        quality = config["wizard"]["jpeg_quality"]
    """
    global _config_instance

    if _config_instance is None or reload:
        _config_instance = load_config()

    return _config_instance


def get_section(section_name: str) -> Dict[str, Any]:
    """
    Get a specific section from the configuration.

    Args:
        section_name: Name of the configuration section
                      (e.g., "camera", "enrollment_service", "wizard")

    Returns:
        Dict containing the section's configuration values.

    Raises:
        KeyError: If the section doesn't exist in the configuration.
    """
    config = get_config()

    if section_name not in config:
        raise KeyError(
            f"Configuration section '{section_name}' not found. "
            f"Available sections: {list(config.keys())}"
        )

    return config[section_name]


# Convenience functions for commonly used configuration sections
def get_camera_config() -> Dict[str, Any]:
    """Get webcam configuration."""
    return get_section("camera")


def get_enrollment_service_config() -> Dict[str, Any]:
    """Get enrollment service (HTTP endpoint) configuration."""
    return get_section("enrollment_service")


def get_wizard_config() -> Dict[str, Any]:
    """Get enrollment wizard configuration."""
    return get_section("wizard")


def get_app_config() -> Dict[str, Any]:
    """Get host shell (Gradio launch) configuration."""
    return get_section("app")


def get_server_config() -> Dict[str, Any]:
    """
    Get host and port for the development enrollment service.

    Derived from enrollment_service.base_url so the client and the
    local service always agree.
    """
    base_url = get_enrollment_service_config().get("base_url", "http://127.0.0.1:8000")
    parsed = urlparse(base_url)

    return {
        "host": parsed.hostname or "127.0.0.1",
        "port": parsed.port or 8000,
    }


if __name__ == "__main__":
    print("Testing configuration loader...")

    config = get_config()
    print(f"Successfully loaded config with sections: {list(config.keys())}")

    service = get_enrollment_service_config()
    print(f"Enrollment endpoint: {service['base_url']}{service['enroll_path']}")
