"""Data models and errors for name validation and availability checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .constants import AuthType, Constants


@dataclass(frozen=True)
class ParsedName:
    """A package name split into scope and bare name."""
    full: str
    scope: Optional[str]
    name: str
    is_scoped: bool


@dataclass
class ValidationResult:
    """Outcome of validating a single package name.

    Errors make a name unusable for any package; warnings only rule it out
    for newly published packages.
    """
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    suggestions: Optional[List[str]] = None

    @property
    def valid(self) -> bool:
        return not self.errors and not self.warnings

    @property
    def valid_for_new_packages(self) -> bool:
        return not self.errors and not self.warnings

    @property
    def valid_for_old_packages(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for JSON output; suggestions are left out when empty."""
        data: Dict[str, Any] = {
            "valid": self.valid,
            "valid_for_new_packages": self.valid_for_new_packages,
            "valid_for_old_packages": self.valid_for_old_packages,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }
        if self.suggestions:
            data["suggestions"] = list(self.suggestions)
        return data


@dataclass
class AvailabilityOptions:
    """Options for a single availability probe. Timeout is in milliseconds."""
    registry_url: Optional[str] = None
    timeout: int = Constants.DEFAULT_TIMEOUT_MS


@dataclass
class BatchOptions(AvailabilityOptions):
    """Availability options plus the number of probes allowed in flight."""
    concurrency: int = Constants.DEFAULT_CONCURRENCY


@dataclass
class CheckResult:
    """Validation plus availability for one name."""
    name: str
    available: Optional[bool]
    validation: ValidationResult
    error: Optional[Exception] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "available": self.available}
        data.update(self.validation.to_dict())
        if self.error is not None:
            data["error"] = str(self.error)
        return data


@dataclass(frozen=True)
class AuthInfo:
    """Credentials resolved for a registry."""
    token: str
    type: AuthType

    def header_value(self) -> str:
        """Value for the ``authorization`` request header."""
        return f"{self.type.value} {self.token}"


class NpnameError(Exception):
    """Base class for errors raised by npname."""


class InvalidNameError(NpnameError):
    """A name failed validation and cannot be checked against a registry."""

    def __init__(self, message: str, errors: List[str], warnings: List[str]):
        super().__init__(message)
        self.errors = list(errors)
        self.warnings = list(warnings)


class CheckFailedError(NpnameError):
    """One or more names in a batch could not be checked.

    Every per-name failure is kept in ``errors``, in the order the names
    were given.
    """

    def __init__(self, message: str, errors: List[Exception]):
        super().__init__(message)
        self.errors = list(errors)


class RequestTimeoutError(NpnameError):
    """The registry did not answer within the configured timeout."""

    def __init__(self, timeout_ms: int):
        super().__init__(f"Request timed out after {timeout_ms}ms")
        self.timeout_ms = timeout_ms


class RequestAbortedError(NpnameError):
    """The connection was dropped before a response arrived."""

    def __init__(self):
        super().__init__("Request was aborted")


class UnexpectedStatusError(NpnameError):
    """The registry answered with a status that says nothing about availability."""

    def __init__(self, status: int):
        super().__init__(f"Unexpected response status: {status}")
        self.status = status
