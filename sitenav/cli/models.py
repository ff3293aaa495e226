"""Data models for CLI operations.

This module defines all data models used by the CLI module.
All models use dataclasses for clean, type-safe data structures,
following the patterns established in sitenav/navigation/models.py.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    - SUCCESS (0): Operation completed successfully
    - GENERAL_ERROR (1): Unexpected failure or settings store failure
    - CONFIG_ERROR (2): Configuration file missing or invalid
    - VALIDATION_ERROR (3): A contributed or stored page is invalid

    Example:
        >>> exit_code = ExitCode.SUCCESS
        >>> sys.exit(exit_code)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    CONFIG_ERROR = 2
    VALIDATION_ERROR = 3


@dataclass
class RouteConfig:
    """A named route template declared in the configuration.

    Attributes:
        name: Route name referenced by route pages
        template: Path template with :name placeholders
        defaults: Default placeholder values
    """
    name: str
    template: str
    defaults: Dict[str, str] = field(default_factory=dict)


@dataclass
class ContributorConfig:
    """Pages a contributor (plugin) adds to a filter.

    Attributes:
        name: Contributor name, used in logs
        filter: Name of the filter the pages are contributed to
        priority: Filter priority (lower runs first)
        pages: Page descriptors appended to the filter value
    """
    name: str
    filter: str
    priority: int = 10
    pages: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class NavConfig:
    """Top-level configuration of the sitenav tool.

    Attributes:
        settings_file: Path of the YAML option store
        base_url: Prefix for assembled route hrefs
        routes: Extra named routes
        contributors: Page contributions registered as filters
    """
    settings_file: str = ".sitenav/settings.yaml"
    base_url: str = ""
    routes: List[RouteConfig] = field(default_factory=list)
    contributors: List[ContributorConfig] = field(default_factory=list)
