"""npm package name parsing and validation rules.

Validation never raises: every problem is reported in the returned
``ValidationResult``. Errors make a name unusable for any package,
warnings only rule it out for new packages (old packages published before
the rule existed keep working).
"""

from __future__ import annotations

import re
from typing import List, Tuple
from urllib.parse import quote

from slugify import slugify as make_slug

from .constants import Constants
from .core_modules import BUILTIN_MODULES
from .models import ParsedName, ValidationResult

SCOPED_PACKAGE_PATTERN = re.compile(r"^(?:@([^/]+?)/)?([^/]+?)\Z")
ORGANIZATION_PATTERN = re.compile(r"^@[0-9A-Za-z_][\w.-]*\Z", re.ASCII | re.IGNORECASE)
SPECIAL_CHARS_PATTERN = re.compile(r"[~'!()*]")
EXCLUSION_LIST = frozenset({"node_modules", "favicon.ico"})

# encodeURIComponent leaves these alone in addition to letters and digits
_URL_SAFE_EXTRA = "!~*'()"


class _Undefined:
    """Marker for a value that was never supplied (distinct from None)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


def is_url_safe(name: str) -> bool:
    """Return True if ``name`` survives URL component encoding unchanged."""
    try:
        return quote(name, safe=_URL_SAFE_EXTRA) == name
    except UnicodeEncodeError:
        # lone surrogates cannot be encoded at all
        return False


def parse_name(name: str) -> ParsedName:
    """Split ``name`` into scope and package name.

    Input that does not look like ``@scope/name`` is returned whole as an
    unscoped name; parsing never fails.
    """
    match = SCOPED_PACKAGE_PATTERN.match(name)
    if not match:
        return ParsedName(full=name, scope=None, name=name, is_scoped=False)

    scope = match.group(1)
    package_name = match.group(2) or name
    return ParsedName(
        full=name,
        scope=scope,
        name=package_name,
        is_scoped=scope is not None,
    )


def is_scoped(name: str) -> bool:
    return name.startswith("@") and "/" in name


def is_organization(name: str) -> bool:
    """True for a bare organization handle such as ``@babel`` (no package part)."""
    return ORGANIZATION_PATTERN.match(name) is not None


def slugify(name: str) -> str:
    """Lowercase transliterated slug of ``name`` joined with ``-``."""
    return make_slug(name, separator="-")


def _type_error(name: object) -> str:
    if name is None:
        return "name cannot be null"
    if name is UNDEFINED:
        return "name cannot be undefined"
    return "name must be a string"


def _basic_format_errors(name: str) -> List[str]:
    checks = [
        (len(name) == 0, "name length must be greater than zero"),
        (name.startswith("."), "name cannot start with a period"),
        (name.startswith("-"), "name cannot start with a hyphen"),
        (name.startswith("_"), "name cannot start with an underscore"),
        (name.strip() != name, "name cannot contain leading or trailing spaces"),
    ]
    return [message for failed, message in checks if failed]


def _blocked_name_errors(name: str) -> List[str]:
    lowered = name.lower()
    if lowered in EXCLUSION_LIST:
        return [f"{lowered} is not a valid package name"]
    return []


def _collect_warnings(name: str) -> Tuple[List[str], bool]:
    warnings = []
    has_uppercase = name.lower() != name
    last_part = name.split("/")[-1]

    # whole-name lookup, so "@scope/http" is never a core module
    if name.lower() in BUILTIN_MODULES:
        warnings.append(f"{name} is a core module name")
    if len(name) > Constants.MAX_NAME_LENGTH:
        warnings.append(
            f"name can no longer contain more than {Constants.MAX_NAME_LENGTH} characters"
        )
    if has_uppercase:
        warnings.append("name can no longer contain capital letters")
    if last_part and SPECIAL_CHARS_PATTERN.search(last_part):
        warnings.append('name can no longer contain special characters ("~\'!()*")')

    return warnings, has_uppercase


def _url_safety_errors(name: str) -> Tuple[List[str], bool]:
    """Return URL-related errors and whether the name is URL-unfriendly.

    ``@scope/name`` is unsafe as a whole but fine when both halves are.
    """
    if is_url_safe(name):
        return [], False

    errors = []
    match = SCOPED_PACKAGE_PATTERN.match(name)
    if match:
        user, pkg = match.group(1), match.group(2)
        if user and pkg.startswith("."):
            errors.append("name cannot start with a period")
        if user and pkg and is_url_safe(user) and is_url_safe(pkg):
            return errors, False

    errors.append("name can only contain URL-friendly characters")
    return errors, True


def _suggestions(name: str, has_uppercase: bool, has_url_unsafe: bool) -> List[str]:
    suggestions = []
    if has_uppercase:
        suggestions.append(name.lower())
    if has_url_unsafe:
        slug = slugify(name)
        if slug and slug != name:
            suggestions.append(slug)
    # dedupe, keep first occurrence
    return list(dict.fromkeys(suggestions))


def validate(name: object = UNDEFINED) -> ValidationResult:
    """Validate an npm package name against the registry naming rules.

    Args:
        name: Candidate name. Anything other than ``str`` is rejected with a
            single type error.

    Returns:
        ValidationResult with accumulated errors, warnings and, when a fix
        is obvious, suggestions.
    """
    if not isinstance(name, str):
        return ValidationResult(errors=[_type_error(name)], warnings=[])

    errors = _basic_format_errors(name) + _blocked_name_errors(name)
    warnings, has_uppercase = _collect_warnings(name)
    url_errors, has_url_unsafe = _url_safety_errors(name)
    errors.extend(url_errors)

    suggestions = _suggestions(name, has_uppercase, has_url_unsafe)
    return ValidationResult(
        errors=errors,
        warnings=warnings,
        suggestions=suggestions or None,
    )
