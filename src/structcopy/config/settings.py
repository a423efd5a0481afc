"""Configuration settings using Pydantic Settings.

Usage:
    from structcopy.config import CopierSettings

    # Load from environment variables (STRUCTCOPY_*)
    settings = CopierSettings()

    # Or override with explicit values
    settings = CopierSettings(strict=False)
"""

from __future__ import annotations

try:
    from pydantic_settings import BaseSettings, SettingsConfigDict
except ImportError as e:
    raise ImportError(
        "pydantic-settings is required for config module. "
        "Install with: pip install structcopy[config]"
    ) from e


class CopierSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for Copier instances.

    Attributes:
        strict: Only copy leaves whose conversion is lossless (int -> float).
            When False, Pydantic's lax conversions apply as well (3.0 -> 3).
        copy_leaves: Deep copy mutable opaque leaves such as sets. When False
            they are shared between source and copy.
        alias_streams: Share readable streams instead of copying them.

    Environment Variables:
        STRUCTCOPY_STRICT
        STRUCTCOPY_COPY_LEAVES
        STRUCTCOPY_ALIAS_STREAMS
    """

    model_config = SettingsConfigDict(
        env_prefix="STRUCTCOPY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    strict: bool = True
    copy_leaves: bool = True
    alias_streams: bool = True
