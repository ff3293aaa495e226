"""YAML configuration loading and validation.

This module handles loading and saving the sitenav configuration file and
turning it into the collaborators a Navigation needs: a Router with the
declared routes and a FilterRegistry with one callback per contributor.

Configuration file structure:
    settings_file: .sitenav/settings.yaml
    base_url: ""
    routes:
      - name: item-show
        template: /items/show/:id
    contributors:
      - name: SimplePages
        filter: public_navigation_main
        priority: 10
        pages:
          - label: About
            uri: /about
"""

import copy
import logging
import os
from typing import Any, Callable, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from sitenav.filters import DEFAULT_PRIORITY, FilterRegistry
from sitenav.navigation import Navigation, NavigationValidationError, Router

from .errors import ConfigError, ConfigFilesystemError
from .models import ContributorConfig, NavConfig, RouteConfig

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Handles configuration file loading, validation, and saving.

    Paths can be overridden from the environment (or a .env file):
        SITENAV_CONFIG: path of the configuration file
        SITENAV_SETTINGS_FILE: path of the YAML option store
    """

    DEFAULT_CONFIG_DIR = '.sitenav'
    DEFAULT_CONFIG_PATH = '.sitenav/config.yaml'

    CONFIG_ENV_VAR = 'SITENAV_CONFIG'
    SETTINGS_FILE_ENV_VAR = 'SITENAV_SETTINGS_FILE'

    # Required fields for each route and contributor entry
    REQUIRED_ROUTE_FIELDS = {'name', 'template'}
    REQUIRED_CONTRIBUTOR_FIELDS = {'name', 'pages'}

    # Default values for optional fields
    DEFAULTS = {
        'settings_file': '.sitenav/settings.yaml',
        'base_url': '',
    }

    @classmethod
    def resolve_config_path(cls, config_path: Optional[str] = None) -> str:
        """Return the configuration path to use.

        An explicit path wins, then SITENAV_CONFIG, then the default path.
        """
        load_dotenv()
        if config_path:
            return config_path
        return os.getenv(cls.CONFIG_ENV_VAR) or cls.DEFAULT_CONFIG_PATH

    @classmethod
    def load_or_default(cls, config_path: str) -> NavConfig:
        """Load a configuration, or return the defaults if the file does not exist."""
        if not os.path.exists(config_path):
            logger.info(f"No configuration at {config_path}, using defaults")
            return cls._apply_env_overrides(NavConfig())
        return cls.load(config_path)

    @classmethod
    def load(cls, config_path: str) -> NavConfig:
        """Load and parse configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            NavConfig object with parsed configuration

        Raises:
            ConfigFilesystemError: If file cannot be read
            ConfigError: If configuration is invalid or malformed
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise ConfigFilesystemError(
                config_path,
                'read',
                'Configuration file not found'
            )
        except PermissionError:
            raise ConfigFilesystemError(
                config_path,
                'read',
                'Permission denied'
            )
        except OSError as e:
            raise ConfigFilesystemError(
                config_path,
                'read',
                str(e)
            )

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Invalid YAML syntax: {str(e)}"
            )

        # An empty file is a configuration without routes or contributors
        if config_dict is None:
            config_dict = {}

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        config = cls._parse_config(config_dict)
        logger.debug(
            f"Loaded configuration from {config_path}: {len(config.routes)} route(s), "
            f"{len(config.contributors)} contributor(s)"
        )
        return cls._apply_env_overrides(config)

    @classmethod
    def save(cls, config_path: str, config: NavConfig) -> None:
        """Save configuration to a YAML file.

        Args:
            config_path: Path to the YAML configuration file
            config: NavConfig object to save

        Raises:
            ConfigFilesystemError: If file cannot be written
        """
        routes_list = []
        for route in config.routes:
            route_dict: Dict[str, Any] = {
                'name': route.name,
                'template': route.template,
            }
            if route.defaults:
                route_dict['defaults'] = dict(route.defaults)
            routes_list.append(route_dict)

        contributors_list = []
        for contributor in config.contributors:
            contributors_list.append({
                'name': contributor.name,
                'filter': contributor.filter,
                'priority': contributor.priority,
                'pages': contributor.pages,
            })

        config_dict = {
            'settings_file': config.settings_file,
            'base_url': config.base_url,
            'routes': routes_list,
            'contributors': contributors_list,
        }

        yaml_str = yaml.safe_dump(
            config_dict,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )

        config_dir = os.path.dirname(config_path)
        if config_dir:
            try:
                os.makedirs(config_dir, exist_ok=True)
            except OSError as e:
                raise ConfigFilesystemError(
                    config_dir,
                    'create_directory',
                    str(e)
                )

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
        except PermissionError:
            raise ConfigFilesystemError(
                config_path,
                'write',
                'Permission denied'
            )
        except OSError as e:
            raise ConfigFilesystemError(
                config_path,
                'write',
                str(e)
            )

    @classmethod
    def build_router(cls, config: NavConfig) -> Router:
        """Create a Router holding the configured base URL and routes.

        Raises:
            ConfigError: If a route is invalid
        """
        router = Router(base_url=config.base_url)
        for i, route in enumerate(config.routes):
            try:
                router.add_route(route.name, route.template, route.defaults)
            except NavigationValidationError as e:
                raise ConfigError(str(e), f'routes[{i}]')
        return router

    @classmethod
    def build_filters(cls, config: NavConfig) -> FilterRegistry:
        """Create a FilterRegistry with one callback per contributor.

        Each callback appends a copy of the contributor's pages to the
        filter value.
        """
        filters = FilterRegistry()
        for contributor in config.contributors:
            filters.add_filter(
                contributor.filter,
                cls._contributor_callback(contributor),
                contributor.priority
            )
        return filters

    @staticmethod
    def _contributor_callback(contributor: ContributorConfig) -> Callable[[List[Any]], List[Any]]:
        def add_contributed_pages(pages: List[Any]) -> List[Any]:
            logger.debug(f"Contributor '{contributor.name}' adds {len(contributor.pages)} page(s)")
            return list(pages) + copy.deepcopy(contributor.pages)

        add_contributed_pages.__qualname__ = f"contributor[{contributor.name}]"
        return add_contributed_pages

    @classmethod
    def _apply_env_overrides(cls, config: NavConfig) -> NavConfig:
        settings_file = os.getenv(cls.SETTINGS_FILE_ENV_VAR)
        if settings_file:
            config.settings_file = settings_file
        return config

    @classmethod
    def _parse_config(cls, config_dict: Dict[str, Any]) -> NavConfig:
        """Parse and validate configuration dictionary.

        Args:
            config_dict: Raw configuration dictionary from YAML

        Returns:
            Validated NavConfig object

        Raises:
            ConfigError: If configuration is invalid
        """
        settings_file = config_dict.get('settings_file', cls.DEFAULTS['settings_file'])
        base_url = config_dict.get('base_url', cls.DEFAULTS['base_url'])

        if not isinstance(settings_file, str) or not settings_file.strip():
            raise ConfigError(
                "Field 'settings_file' must be a non-empty string",
                'settings_file'
            )
        if base_url is None:
            base_url = ''
        if not isinstance(base_url, str):
            raise ConfigError(
                f"Field 'base_url' must be a string, got {type(base_url).__name__}",
                'base_url'
            )

        return NavConfig(
            settings_file=settings_file.strip(),
            base_url=base_url.strip(),
            routes=cls._parse_routes(config_dict.get('routes')),
            contributors=cls._parse_contributors(config_dict.get('contributors')),
        )

    @classmethod
    def _parse_routes(cls, routes_raw: Any) -> List[RouteConfig]:
        if routes_raw is None:
            return []
        if not isinstance(routes_raw, list):
            raise ConfigError("Field 'routes' must be a list", 'routes')

        routes = []
        for i, route_dict in enumerate(routes_raw):
            if not isinstance(route_dict, dict):
                raise ConfigError(
                    f"Route configuration at index {i} must be a dictionary",
                    f'routes[{i}]'
                )

            missing_fields = cls.REQUIRED_ROUTE_FIELDS - set(route_dict.keys())
            if missing_fields:
                raise ConfigError(
                    f"Missing required fields in route {i}: {', '.join(sorted(missing_fields))}",
                    f'routes[{i}]'
                )

            defaults = route_dict.get('defaults') or {}
            if not isinstance(defaults, dict):
                raise ConfigError(
                    f"Field 'defaults' in route {i} must be a dictionary",
                    f'routes[{i}].defaults'
                )

            name = str(route_dict['name']).strip()
            template = str(route_dict['template']).strip()
            if not name:
                raise ConfigError(
                    f"Field 'name' in route {i} cannot be empty",
                    f'routes[{i}].name'
                )
            if not template:
                raise ConfigError(
                    f"Field 'template' in route {i} cannot be empty",
                    f'routes[{i}].template'
                )

            routes.append(RouteConfig(
                name=name,
                template=template,
                defaults={str(k): str(v) for k, v in defaults.items()}
            ))

        return routes

    @classmethod
    def _parse_contributors(cls, contributors_raw: Any) -> List[ContributorConfig]:
        if contributors_raw is None:
            return []
        if not isinstance(contributors_raw, list):
            raise ConfigError("Field 'contributors' must be a list", 'contributors')

        contributors = []
        for i, contributor_dict in enumerate(contributors_raw):
            if not isinstance(contributor_dict, dict):
                raise ConfigError(
                    f"Contributor configuration at index {i} must be a dictionary",
                    f'contributors[{i}]'
                )

            missing_fields = cls.REQUIRED_CONTRIBUTOR_FIELDS - set(contributor_dict.keys())
            if missing_fields:
                raise ConfigError(
                    f"Missing required fields in contributor {i}: {', '.join(sorted(missing_fields))}",
                    f'contributors[{i}]'
                )

            name = str(contributor_dict['name']).strip()
            if not name:
                raise ConfigError(
                    f"Field 'name' in contributor {i} cannot be empty",
                    f'contributors[{i}].name'
                )

            filter_name = contributor_dict.get('filter') or Navigation.PUBLIC_NAVIGATION_MAIN_FILTER_NAME

            priority = contributor_dict.get('priority', DEFAULT_PRIORITY)
            if isinstance(priority, bool) or not isinstance(priority, int):
                raise ConfigError(
                    f"Field 'priority' in contributor {i} must be an integer",
                    f'contributors[{i}].priority'
                )

            pages = contributor_dict['pages']
            if not isinstance(pages, list):
                raise ConfigError(
                    f"Field 'pages' in contributor {i} must be a list",
                    f'contributors[{i}].pages'
                )
            for j, page in enumerate(pages):
                if not isinstance(page, dict):
                    raise ConfigError(
                        f"Page at index {j} of contributor {i} must be a dictionary",
                        f'contributors[{i}].pages[{j}]'
                    )

            contributors.append(ContributorConfig(
                name=name,
                filter=str(filter_name),
                priority=priority,
                pages=pages,
            ))

        return contributors
