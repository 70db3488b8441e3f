from __future__ import annotations

from typing import Optional


class InstallError(Exception):
    """Fatal installer error. Aborts the whole run with exit code 1."""

    kind = "install"

    def __init__(self, message: str, *, step_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.step_id = step_id


class ConfigError(InstallError):
    kind = "config"


class PreflightError(InstallError):
    """Not root, or a required command is missing. Raised before any mutation."""

    kind = "precondition"


class ProvisioningError(InstallError):
    """User, directory, ownership or config file could not be created."""

    kind = "provisioning"


class TransportError(InstallError):
    kind = "transport"


class EmptyDownloadError(TransportError):
    """The download reported success but left a missing or zero-byte file."""


class ExtractionError(InstallError):
    kind = "structural"


class LayoutError(InstallError):
    """The release archive does not have the expected directory/binary layout."""

    kind = "structural"


class ServiceError(InstallError):
    kind = "service"
