"""
service:
    Orchestrates validation and deployment of a team to one or more systems.

A failure while deploying to one target never prevents the others from
being attempted: every provider call is isolated, and whatever it raises is
turned into a failed DeploymentResult for that target.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from teamforge.capabilities import CapabilityRegistry
from teamforge.detector import ConfigDetector
from teamforge.exceptions import ProviderWriteError, UnknownSystemError
from teamforge.library import TemplateLibrary
from teamforge.models import (
    CapabilityDescriptor,
    DeployedConfig,
    DeploymentResult,
    DeploymentValidation,
    DeployOptions,
    MultiDeploymentResult,
    Team,
)
from teamforge.providers import PROVIDERS, Provider, create_provider
from teamforge.validator import DeploymentValidator

logger = logging.getLogger(__name__)


class DeploymentService:
    """Entry point for validating, deploying and inspecting team deployments."""

    def __init__(
        self,
        library: TemplateLibrary,
        registry: Optional[CapabilityRegistry] = None,
        providers: Optional[dict[str, Provider]] = None,
        home: Optional[Path | str] = None,
    ):
        self.library = library
        self.registry = registry or CapabilityRegistry()
        self.home = home
        self.validator = DeploymentValidator(self.registry)
        self._providers: dict[str, Provider] = dict(providers or {})
        self._detector: Optional[ConfigDetector] = None

    # -------------------------------------------------------------------------
    # Capabilities
    # -------------------------------------------------------------------------

    def get_available_systems(self) -> list[str]:
        return self.registry.get_all_systems()

    def get_system_capabilities(
        self, system: str, project_path: Path | str | None = None
    ) -> CapabilityDescriptor:
        """Capabilities are project-independent; project_path is accepted and ignored."""
        return self.registry.get_capabilities(system)

    def get_all_system_capabilities(
        self, project_path: Path | str | None = None
    ) -> dict[str, CapabilityDescriptor]:
        return {
            system: self.get_system_capabilities(system, project_path)
            for system in self.get_available_systems()
        }

    def get_provider(self, system: str) -> Provider:
        """
        Raises:
            UnknownSystemError: If the system is not registered or has no provider.
        """
        if system in self._providers:
            return self._providers[system]
        if system not in self.registry or system not in PROVIDERS:
            raise UnknownSystemError(system, self.get_available_systems())
        provider = create_provider(
            system, self.library, registry=self.registry, home=self.home
        )
        self._providers[system] = provider
        return provider

    # -------------------------------------------------------------------------
    # Deployment
    # -------------------------------------------------------------------------

    def validate_deployment(
        self,
        team: Team,
        target_systems: list[str],
        project_path: Path | str | None,
        options: Optional[DeployOptions] = None,
    ) -> DeploymentValidation:
        return self.validator.validate(team, target_systems, project_path, options)

    def deploy(
        self,
        team: Team,
        target_system: str,
        project_path: Path | str,
        options: Optional[DeployOptions] = None,
    ) -> DeploymentResult:
        """Validate for a single target, then deploy to it.

        Nothing is cleared or written when validation reports errors.
        """
        options = options or DeployOptions()
        validation = self.validate_deployment(team, [target_system], project_path, options)
        if not validation.valid:
            error = "Validation failed: " + "; ".join(validation.errors)
            logger.warning("Not deploying to %s: %s", target_system, error)
            return DeploymentResult(system=target_system).fail(error)

        self._log_warnings(validation)
        return self._deploy_one(team, target_system, project_path, options)

    def deploy_to_multiple(
        self,
        team: Team,
        target_systems: list[str],
        project_path: Path | str,
        options: Optional[DeployOptions] = None,
    ) -> MultiDeploymentResult:
        """Validate once, then deploy to each target in the order given.

        Repeated systems are deployed once. When validation fails no target
        is attempted and each one gets a failed result.
        """
        options = options or DeployOptions()
        systems = list(dict.fromkeys(target_systems))
        validation = self.validate_deployment(team, systems, project_path, options)
        multi = MultiDeploymentResult(validation=validation)

        if not validation.valid:
            error = "Validation failed: " + "; ".join(validation.errors)
            logger.warning("Not deploying team '%s': %s", team.name, error)
            for system in systems:
                multi.results[system] = DeploymentResult(system=system).fail(error)
                multi.errors.append({"system": system, "error": error})
            return multi

        self._log_warnings(validation)
        for system in systems:
            result = self._deploy_one(team, system, project_path, options)
            multi.results[system] = result
            if not result.success:
                multi.errors.append({"system": system, "error": result.error or "Unknown error"})

        logger.info("Team '%s': %s", team.name, multi.summary())
        return multi

    def _deploy_one(
        self,
        team: Team,
        system: str,
        project_path: Path | str,
        options: DeployOptions,
    ) -> DeploymentResult:
        logger.info("Deploying team '%s' to %s", team.name, system)
        try:
            provider = self.get_provider(system)
            return provider.deploy(team, Path(project_path), options)
        except Exception as e:
            logger.exception("Deployment to %s failed", system)
            result = DeploymentResult(system=system)
            if isinstance(e, ProviderWriteError):
                result.files_written = list(e.written)
            return result.fail(str(e) or type(e).__name__)

    def _log_warnings(self, validation: DeploymentValidation) -> None:
        for warning in validation.warnings:
            logger.warning("[%s] %s", warning.system, warning.message)

    # -------------------------------------------------------------------------
    # Detection
    # -------------------------------------------------------------------------

    @property
    def detector(self) -> ConfigDetector:
        if self._detector is None:
            providers = {}
            for system in self.get_available_systems():
                try:
                    providers[system] = self.get_provider(system)
                except UnknownSystemError:
                    logger.debug("No provider for %s, detection skipped", system)
            self._detector = ConfigDetector(providers, self.registry)
        return self._detector

    def detect_system_config(self, system: str, project_path: Path | str) -> DeployedConfig:
        return self.detector.detect(system, project_path)

    def detect_all_system_configs(self, project_path: Path | str) -> dict[str, DeployedConfig]:
        return self.detector.detect_all(project_path)
