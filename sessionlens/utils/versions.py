# ==============================================================================
# Version Utilities
# ==============================================================================
"""
Utilities for retrieving package versions.
"""

from importlib.metadata import PackageNotFoundError, version


def get_sessionlens_version() -> str:
    """
    Get the sessionlens package version.

    Returns:
        Version string (e.g., "0.1.0")
    """
    try:
        return version("sessionlens")
    except PackageNotFoundError:
        return "0.1.0"
