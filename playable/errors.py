"""Failure taxonomy for playable builds."""

from __future__ import annotations

from pathlib import Path


class BundleError(RuntimeError):
    """Base class for every fatal build failure."""


class CompressionFailure(BundleError):
    """Raised when the external compressor exits with a non-zero status."""

    def __init__(self, path: Path | str, returncode: int | None = None, detail: str = "") -> None:
        self.path = Path(path)
        self.returncode = returncode
        self.detail = detail
        message = f"Can't deflate the file: {self.path}"
        if returncode is not None:
            message += f" (exit code {returncode})"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class MissingAssetFile(BundleError):
    """Raised when a referenced asset does not exist on disk."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"Referenced asset not found: {self.path}")


class ToolchainFailure(BundleError):
    """Raised when a step of the external game toolchain fails."""

    def __init__(self, step: str, detail: str = "") -> None:
        self.step = step
        self.detail = detail
        message = f"Toolchain step '{step}' failed"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class ConfigurationError(BundleError):
    """Raised when project metadata or .playable.yml cannot be parsed."""


__all__ = [
    "BundleError",
    "CompressionFailure",
    "ConfigurationError",
    "MissingAssetFile",
    "ToolchainFailure",
]
