"""Preflight validation of credentials and local state.

Runs before any network call: a missing GitHub token or provider API key is
reported here instead of surfacing halfway through an analysis. No checks
touch the network.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from repolens.config import RepoLensConfig
from repolens.models.llm_config import ProviderSettings


@dataclass
class CheckResult:
    """Result of a single preflight check.

    Attributes:
        name: Check name
        passed: Whether the check passed
        required: Whether a failure blocks analysis
        message: Human-readable context
    """

    name: str
    passed: bool
    required: bool = True
    message: str = ""


@dataclass
class PreflightResult:
    """Result of preflight validation.

    Attributes:
        success: Whether all required checks passed
        checks: Individual check results
        errors: Messages for failed required checks
        warnings: Messages for failed optional checks
    """

    success: bool = True
    checks: list[CheckResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_check(self, check: CheckResult) -> None:
        """Add a check result."""
        self.checks.append(check)

        if not check.passed:
            if check.required:
                self.success = False
                self.errors.append(f"{check.name}: {check.message}")
            else:
                self.warnings.append(f"{check.name}: {check.message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "success": self.success,
            "checks": [
                {
                    "name": c.name,
                    "passed": c.passed,
                    "required": c.required,
                    "message": c.message,
                }
                for c in self.checks
            ],
            "errors": self.errors,
            "warnings": self.warnings,
        }


def mask_secret(secret: str | None) -> str:
    """Mask a secret for display, keeping the last four characters."""
    if not secret:
        return "(not set)"
    if len(secret) <= 8:
        return "*" * len(secret)
    return f"{'*' * 8}{secret[-4:]}"


class PreflightChecker:
    """Validates credentials and the state directory.

    Usage:
        checker = PreflightChecker()
        result = checker.check_all(config, settings)
        if not result.success:
            sys.exit(1)
    """

    def check_github_token(self, config: RepoLensConfig) -> CheckResult:
        token = config.github.resolve_token()
        if token:
            return CheckResult("github-token", True, message=mask_secret(token))
        return CheckResult(
            "github-token",
            False,
            message="No GitHub token. Set github.token in the config or GITHUB_TOKEN.",
        )

    def check_provider(self, settings: ProviderSettings) -> CheckResult:
        name = f"provider:{settings.provider}"
        if settings.is_configured:
            return CheckResult(name, True, message=mask_secret(settings.api_keys[settings.provider]))
        return CheckResult(
            name,
            False,
            message=f"No API key for {settings.provider}. "
            f"Run: repolens provider set-key {settings.provider} <KEY>",
        )

    def check_state_dir(self, state_dir: Path) -> CheckResult:
        # The directory is created on first write, so its nearest existing parent must be writable
        candidate = state_dir
        while not candidate.exists() and candidate != candidate.parent:
            candidate = candidate.parent
        writable = candidate.is_dir() and os.access(candidate, os.W_OK)
        return CheckResult(
            "state-dir",
            writable,
            required=False,
            message=str(state_dir) if writable else f"{state_dir} is not writable; results will not persist",
        )

    def check_all(self, config: RepoLensConfig, settings: ProviderSettings) -> PreflightResult:
        """Run every check.

        Args:
            config: Loaded configuration
            settings: Current provider settings

        Returns:
            PreflightResult with all checks
        """
        result = PreflightResult()
        result.add_check(self.check_github_token(config))
        result.add_check(self.check_provider(settings))
        result.add_check(self.check_state_dir(config.storage.path))
        return result
