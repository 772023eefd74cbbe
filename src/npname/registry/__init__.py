"""npm registry package.

- config.py: registry URL and credential resolution from env and .npmrc
- availability.py: HEAD probes against the registry, single and batched
"""

from .config import (
    DEFAULT_REGISTRY,
    EnvironmentSource,
    NpmrcSource,
    expand_env_vars,
    get_auth_token,
    get_registry_url,
    normalize_url,
    parse_npmrc,
)
from .availability import check, check_availability, check_availability_many

__all__ = [
    "DEFAULT_REGISTRY",
    "EnvironmentSource",
    "NpmrcSource",
    "expand_env_vars",
    "get_auth_token",
    "get_registry_url",
    "normalize_url",
    "parse_npmrc",
    "check",
    "check_availability",
    "check_availability_many",
]
