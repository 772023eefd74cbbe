"""npname - npm package name validation and availability checks.

Typical use::

    import asyncio
    import npname

    npname.validate("my-package").valid_for_new_packages
    asyncio.run(npname.check_availability("my-package"))
"""

from .models import (
    AuthInfo,
    AvailabilityOptions,
    BatchOptions,
    CheckFailedError,
    CheckResult,
    InvalidNameError,
    NpnameError,
    ParsedName,
    RequestAbortedError,
    RequestTimeoutError,
    UnexpectedStatusError,
    ValidationResult,
)
from .validate import UNDEFINED, is_organization, is_scoped, is_url_safe, parse_name, validate
from .registry import (
    DEFAULT_REGISTRY,
    EnvironmentSource,
    NpmrcSource,
    check,
    check_availability,
    check_availability_many,
    expand_env_vars,
    get_auth_token,
    get_registry_url,
    normalize_url,
    parse_npmrc,
)

__version__ = "1.0.0"

__all__ = [
    "AuthInfo",
    "AvailabilityOptions",
    "BatchOptions",
    "CheckFailedError",
    "CheckResult",
    "InvalidNameError",
    "NpnameError",
    "ParsedName",
    "RequestAbortedError",
    "RequestTimeoutError",
    "UnexpectedStatusError",
    "ValidationResult",
    "UNDEFINED",
    "is_organization",
    "is_scoped",
    "is_url_safe",
    "parse_name",
    "validate",
    "DEFAULT_REGISTRY",
    "EnvironmentSource",
    "NpmrcSource",
    "check",
    "check_availability",
    "check_availability_many",
    "expand_env_vars",
    "get_auth_token",
    "get_registry_url",
    "normalize_url",
    "parse_npmrc",
]
