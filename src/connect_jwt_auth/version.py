from __future__ import annotations

from importlib import metadata

DISTRIBUTION = "connect-jwt-auth"
UNKNOWN_VERSION = "0.0.0"


def get_version(distribution: str = DISTRIBUTION) -> str:
    """Installed version of ``distribution``, or ``UNKNOWN_VERSION`` when the
    package is imported straight from ``src/``."""
    try:
        return metadata.version(distribution)
    except metadata.PackageNotFoundError:
        return UNKNOWN_VERSION


__version__ = get_version()
