"""Registry URL and credential resolution from the environment and .npmrc.

Both inputs are explicit sources passed to each call. The defaults read
the live process environment and the filesystem; nothing is cached, so
every call sees the current state of the .npmrc file.

Resolution priority for the registry URL:
1. ``npm_config_registry`` environment variable
2. ``NPM_CONFIG_REGISTRY`` environment variable
3. ``<scope>:registry`` in .npmrc (scoped lookups only)
4. ``registry`` in .npmrc
5. https://registry.npmjs.org/
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
import re
from pathlib import Path
from typing import Dict, Mapping, Optional, Union
from urllib.parse import urlsplit

from ..constants import AuthType, Constants
from ..models import AuthInfo

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY = Constants.DEFAULT_REGISTRY

ENV_VAR_BRACES_PATTERN = re.compile(r"\$\{([^}]+)\}")
ENV_VAR_DOLLAR_PATTERN = re.compile(r"\$([A-Za-z_][A-Za-z0-9_]*)")


class EnvironmentSource:
    """Read-only view of environment variables."""

    def __init__(self, values: Optional[Mapping[str, str]] = None):
        self._values: Dict[str, str] = dict(values or {})

    @classmethod
    def snapshot(cls) -> "EnvironmentSource":
        """Copy of the current process environment."""
        return cls(os.environ)

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self._values


class NpmrcSource:
    """File-backed .npmrc lookup.

    The nearest ``.npmrc`` between ``cwd`` and the filesystem root wins,
    then ``home/.npmrc``. The file is re-read on every ``load()``.
    """

    def __init__(
        self,
        cwd: Optional[Union[str, Path]] = None,
        home: Optional[Union[str, Path]] = None,
        env: Optional[EnvironmentSource] = None,
    ):
        self._cwd = Path(cwd) if cwd is not None else None
        self._home = Path(home) if home is not None else None
        self._env = env

    def find(self) -> Optional[Path]:
        """Locate the .npmrc to use, or None."""
        start = (self._cwd or Path.cwd()).resolve()
        for directory in (start, *start.parents):
            candidate = directory / Constants.NPMRC_FILE
            if candidate.is_file():
                return candidate

        home = self._home or Path.home()
        candidate = home / Constants.NPMRC_FILE
        if candidate.is_file():
            return candidate
        return None

    def load(self) -> Dict[str, str]:
        """Parse the located .npmrc; missing or unreadable files give {}."""
        path = self.find()
        if path is None:
            return {}
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Could not read %s: %s", path, exc)
            return {}
        logger.debug("Loaded registry config from %s", path)
        return parse_npmrc(content, env=self._env)


def normalize_url(url: str) -> str:
    """Return ``url`` with exactly one trailing slash appended if missing."""
    return url if url.endswith("/") else f"{url}/"


def expand_env_vars(value: str, env: Optional[EnvironmentSource] = None) -> str:
    """Expand ``${VAR}`` and ``$VAR`` references; undefined variables become ''."""
    env = env if env is not None else EnvironmentSource.snapshot()
    result = ENV_VAR_BRACES_PATTERN.sub(lambda m: env.get(m.group(1)) or "", value)
    return ENV_VAR_DOLLAR_PATTERN.sub(lambda m: env.get(m.group(1)) or "", result)


def parse_npmrc(content: str, env: Optional[EnvironmentSource] = None) -> Dict[str, str]:
    """Parse .npmrc content into a flat key/value mapping.

    Lines starting with ``#`` or ``;`` and lines without ``=`` are skipped.
    Keys and values are trimmed; values have environment references expanded.
    """
    env = env if env is not None else EnvironmentSource.snapshot()
    result: Dict[str, str] = {}
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith(("#", ";")) or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if key:
            result[key] = expand_env_vars(value.strip(), env)
    return result


def get_registry_url(
    scope: Optional[str] = None,
    *,
    env: Optional[EnvironmentSource] = None,
    npmrc: Optional[NpmrcSource] = None,
) -> str:
    """Resolve the registry URL for ``scope`` (e.g. ``@myorg``) or the default registry.

    Unscoped lookups return an environment override without reading
    ``.npmrc``. A scoped lookup prefers ``<scope>:registry`` from ``.npmrc``
    and then falls back to the environment override.

    Returns:
        str: Registry URL, always with a trailing slash.
    """
    env = env if env is not None else EnvironmentSource.snapshot()
    env_registry = env.get(Constants.ENV_REGISTRY) or env.get(Constants.ENV_REGISTRY_UPPER)
    if env_registry and not scope:
        return normalize_url(env_registry)

    npmrc = npmrc if npmrc is not None else NpmrcSource(env=env)
    config = npmrc.load()

    if scope:
        scoped = config.get(f"{scope}:registry")
        if scoped:
            return normalize_url(scoped)
    if env_registry:
        return normalize_url(env_registry)

    return normalize_url(config.get("registry") or DEFAULT_REGISTRY)


def get_registry_key(registry_url: str) -> str:
    """Convert ``https://host/path/`` to the ``//host/path`` form used as .npmrc key prefix."""
    try:
        parts = urlsplit(registry_url)
    except ValueError:
        return ""
    if not parts.scheme or not parts.netloc:
        return ""
    host = parts.netloc.rsplit("@", 1)[-1].lower()
    path = parts.path or "/"
    if path.endswith("/"):
        path = path[:-1]
    return f"//{host}{path}"


def _lookup(config: Mapping[str, str], reg_key: str, name: str) -> Optional[str]:
    return config.get(f"{reg_key}/:{name}") or config.get(f"{reg_key}:{name}")


def _decode_password(encoded: str) -> str:
    try:
        padded = encoded + "=" * (-len(encoded) % 4)
        return base64.b64decode(padded, validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        logger.debug("Ignoring malformed base64 _password value")
        return ""


def _bearer_auth(config: Mapping[str, str], reg_key: str) -> Optional[AuthInfo]:
    token = _lookup(config, reg_key, "_authToken")
    if token:
        return AuthInfo(token=token, type=AuthType.BEARER)
    return None


def _basic_auth(config: Mapping[str, str], reg_key: str) -> Optional[AuthInfo]:
    username = _lookup(config, reg_key, "username")
    encoded_password = _lookup(config, reg_key, "_password")
    if username and encoded_password:
        password = _decode_password(encoded_password)
        token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
        return AuthInfo(token=token, type=AuthType.BASIC)
    return None


def _legacy_auth(config: Mapping[str, str]) -> Optional[AuthInfo]:
    legacy = config.get("_auth")
    if legacy:
        return AuthInfo(token=legacy, type=AuthType.BASIC)
    return None


def get_auth_token(
    registry_url: str,
    *,
    npmrc: Optional[NpmrcSource] = None,
) -> Optional[AuthInfo]:
    """Find credentials for ``registry_url`` in .npmrc.

    Checked in order: bearer ``_authToken``, ``username`` plus base64
    ``_password``, then the global legacy ``_auth`` value.
    """
    npmrc = npmrc if npmrc is not None else NpmrcSource()
    config = npmrc.load()
    reg_key = get_registry_key(registry_url)

    auth = None
    if reg_key:
        auth = _bearer_auth(config, reg_key) or _basic_auth(config, reg_key)
    auth = auth or _legacy_auth(config)
    if auth is not None:
        logger.debug("Using %s auth for %s", auth.type.value, reg_key or registry_url)
    return auth
