"""Configuration module using Pydantic Settings.

Provides typed copier configuration with environment variable support.

Usage:
    from structcopy import Copier
    from structcopy.config import CopierSettings

    copier = Copier.from_settings(CopierSettings())
"""

from structcopy.config.settings import CopierSettings

__all__ = [
    "CopierSettings",
]
