"""Rendering of CLI results as text, JSON or bare names."""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .constants import Constants
from .models import ValidationResult

UNICODE_SYMBOLS = {
    "available": "✔",
    "info": "ℹ",
    "invalid": "✖",
    "unavailable": "✖",
    "warning": "⚠",
}

ASCII_SYMBOLS = {
    "available": "+",
    "info": "i",
    "invalid": "x",
    "unavailable": "x",
    "warning": "!",
}


@dataclass
class CliResult:
    """One line of CLI output: validation details plus availability."""
    name: str
    available: Optional[bool] = None
    valid: bool = False
    valid_for_new_packages: bool = False
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    suggestions: Optional[List[str]] = None
    error: Optional[str] = None

    @classmethod
    def from_validation(
        cls,
        name: str,
        validation: Optional[ValidationResult],
        available: Optional[bool] = None,
        error: Optional[str] = None,
    ) -> "CliResult":
        if validation is None:
            return cls(name=name, available=available, error=error)
        return cls(
            name=name,
            available=available,
            valid=validation.valid,
            valid_for_new_packages=validation.valid_for_new_packages,
            errors=list(validation.errors),
            warnings=list(validation.warnings),
            suggestions=list(validation.suggestions) if validation.suggestions else None,
            error=error,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "available": self.available,
            "valid": self.valid,
            "valid_for_new_packages": self.valid_for_new_packages,
            "errors": self.errors,
            "warnings": self.warnings,
        }
        if self.suggestions:
            data["suggestions"] = self.suggestions
        if self.error is not None:
            data["error"] = self.error
        return data


def supports_unicode(env: Optional[Mapping[str, str]] = None, platform: Optional[str] = None) -> bool:
    """Decide whether the terminal can show the Unicode status symbols."""
    env = os.environ if env is None else env
    platform = sys.platform if platform is None else platform
    if env.get(Constants.ENV_ASCII) == "1":
        return False
    if platform != "win32":
        return True
    return bool(
        env.get("CI")
        or env.get("TERM_PROGRAM") == "vscode"
        or env.get("WT_SESSION")
        or env.get("ConEmuTask")
        or "xterm" in env.get("TERM", "")
    )


def get_symbols(env: Optional[Mapping[str, str]] = None, platform: Optional[str] = None) -> Dict[str, str]:
    return UNICODE_SYMBOLS if supports_unicode(env, platform) else ASCII_SYMBOLS


def _details(result: CliResult, symbols: Mapping[str, str]) -> List[str]:
    lines = [f"  {symbols['invalid']} {err}" for err in result.errors]
    lines.extend(f"  {symbols['warning']} {warn}" for warn in result.warnings)
    if result.suggestions:
        lines.append("  Suggestions:")
        lines.extend(f"    {symbols['info']} {sug}" for sug in result.suggestions)
    return lines


def format_result(result: CliResult, mode: str, symbols: Mapping[str, str]) -> str:
    """Render one result for ``mode`` ("check" or "validate")."""
    if result.error:
        return f"{symbols['invalid']} {result.name} - {result.error}"

    if mode == "validate":
        if result.valid_for_new_packages:
            head = f"{symbols['available']} {result.name} - valid for new packages"
        elif not result.errors:
            head = f"{symbols['warning']} {result.name} - valid for old packages only"
        else:
            head = f"{symbols['invalid']} {result.name} - invalid"
    elif result.available is None:
        head = f"{symbols['warning']} {result.name} - unknown"
    elif result.available:
        head = f"{symbols['available']} {result.name} - available"
    else:
        head = f"{symbols['unavailable']} {result.name} - unavailable"

    return "\n".join([head] + _details(result, symbols))


def format_summary(results: List[CliResult], mode: str) -> str:
    if mode == "check":
        available = sum(1 for r in results if r.available is True)
        taken = sum(1 for r in results if r.available is False)
        errored = sum(1 for r in results if r.error)
        summary = f"{available} available, {taken} taken"
        if errored:
            summary += f", {errored} errored"
    else:
        valid_new = sum(1 for r in results if r.valid_for_new_packages)
        legacy_only = sum(1 for r in results if not r.errors and not r.valid_for_new_packages)
        invalid = sum(1 for r in results if r.errors)
        summary = f"{valid_new} valid"
        if legacy_only:
            summary += f", {legacy_only} legacy only"
        summary += f", {invalid} invalid"
    return f"Summary: {summary}"


def format_json(results: List[CliResult]) -> str:
    """Single results render as an object, several as a list."""
    payload: Any = results[0].to_dict() if len(results) == 1 else [r.to_dict() for r in results]
    return json.dumps(payload, indent=2)


def format_quiet(results: List[CliResult], mode: str) -> str:
    if mode == "validate":
        names = [r.name for r in results if r.valid_for_new_packages]
    else:
        names = [r.name for r in results if r.available is True]
    return "\n".join(names)


def render(
    results: List[CliResult],
    mode: str,
    *,
    as_json: bool = False,
    quiet: bool = False,
    symbols: Optional[Mapping[str, str]] = None,
) -> str:
    """Render all results the way the CLI prints them."""
    if as_json:
        return format_json(results)
    if quiet:
        return format_quiet(results, mode)

    symbols = symbols or get_symbols()
    blocks = [format_result(result, mode, symbols) for result in results]
    if len(results) > 1:
        blocks.append("")
        blocks.append(format_summary(results, mode))
    return "\n".join(blocks)
