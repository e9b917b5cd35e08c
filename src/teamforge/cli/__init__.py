"""
CLI commands for teamforge.

This package contains all Click command definitions.
"""

from teamforge.cli.deploy import (
    deploy_cmd,
    status_cmd,
    systems_cmd,
    validate_cmd,
)
from teamforge.cli.team import team

__all__ = [
    'deploy_cmd',
    'status_cmd',
    'systems_cmd',
    'validate_cmd',
    'team',
]
