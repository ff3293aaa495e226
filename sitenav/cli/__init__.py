"""Command-line interface for maintaining the site navigation.

This package provides the `sitenav` CLI tool. It reads the contributor and
route configuration, reconciles the stored navigation with the contributed
pages and writes it back to the YAML option store.
"""

from .config import ConfigLoader
from .models import ContributorConfig, ExitCode, NavConfig, RouteConfig
from .errors import (
    CLIError,
    ConfigError,
    ConfigFilesystemError,
)

__all__ = [
    'ConfigLoader',
    'ContributorConfig',
    'ExitCode',
    'NavConfig',
    'RouteConfig',
    'CLIError',
    'ConfigError',
    'ConfigFilesystemError',
]
