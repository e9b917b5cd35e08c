"""
validator:
    Pre-flight validation of a deployment before any file is written.

Warnings come from the same CapabilityRegistry the providers consult, so
every category reported here as skipped is exactly what a provider omits.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from teamforge.capabilities import CapabilityRegistry, unsupported_categories
from teamforge.models import (
    DeploymentValidation,
    DeployOptions,
    Team,
    ValidationWarning,
)

logger = logging.getLogger(__name__)


class DeploymentValidator:
    """Computes per-target warnings and structural errors for a deployment."""

    def __init__(self, registry: Optional[CapabilityRegistry] = None):
        self.registry = registry or CapabilityRegistry()

    def validate(
        self,
        team: Team,
        target_systems: list[str],
        project_path: Path | str | None,
        options: Optional[DeployOptions] = None,
    ) -> DeploymentValidation:
        """
        Validate a deployment. Never raises for bad input.

        Args:
            team: Team to deploy
            target_systems: Requested systems, in caller order
            project_path: Project directory the deployment writes into
            options: Deploy options; only the location is checked

        Returns:
            DeploymentValidation with errors (blocking) and warnings (skipped features)
        """
        validation = DeploymentValidation()

        if not target_systems:
            validation.errors.append("No target systems specified")

        if project_path is None or str(project_path) == "":
            validation.errors.append("Project path is required")
        else:
            path = Path(project_path)
            if not path.exists():
                validation.errors.append(f"Project path does not exist: {path}")
            elif not path.is_dir():
                validation.errors.append(f"Project path is not a directory: {path}")

        if not team.id:
            validation.errors.append("Team is missing required field: 'id'")
        if not team.name:
            validation.errors.append("Team is missing required field: 'name'")

        for system in dict.fromkeys(target_systems or []):
            if system not in self.registry:
                validation.errors.append(
                    f"Unknown system: {system}. Supported: {self.registry.get_all_systems()}"
                )
                continue

            caps = self.registry.get_capabilities(system)
            for category in unsupported_categories(team, caps):
                validation.warnings.append(
                    ValidationWarning(
                        system=system,
                        feature=category,
                        message=f"{category} not supported by {system}, will be skipped",
                    )
                )

            if options is not None:
                unsupported = [
                    scope
                    for scope in options.scopes
                    if not self.registry.supports_scope(system, scope)
                ]
                if len(unsupported) == len(options.scopes):
                    validation.errors.append(
                        f"{system} does not support location '{options.location}'"
                    )
                    continue
                for scope in unsupported:
                    validation.warnings.append(
                        ValidationWarning(
                            system=system,
                            feature="location",
                            message=f"{scope} scope not supported by {system}, will be skipped",
                        )
                    )

        for warning in validation.warnings:
            logger.debug("Validation warning [%s]: %s", warning.system, warning.message)
        for error in validation.errors:
            logger.debug("Validation error: %s", error)
        return validation
