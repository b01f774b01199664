"""External game toolchain adapters."""

from .bob import BobToolchain, VersionInfo

__all__ = ["BobToolchain", "VersionInfo"]
