"""Unit tests for cli.config.ConfigLoader module."""

import pytest

from sitenav.cli import ConfigError, ConfigFilesystemError, ConfigLoader, ContributorConfig, NavConfig, RouteConfig
from sitenav.navigation import Navigation, RouteTarget

FULL_CONFIG = """
settings_file: data/settings.yaml
base_url: /omeka
routes:
  - name: item-show
    template: /items/show/:id
  - name: exhibit
    template: /exhibits/:slug
    defaults:
      slug: all
contributors:
  - name: SimplePages
    priority: 5
    pages:
      - label: About
        uri: /about
  - name: Footer
    filter: footer_navigation
    pages:
      - label: Privacy
        uri: /privacy
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv(ConfigLoader.CONFIG_ENV_VAR, raising=False)
    monkeypatch.delenv(ConfigLoader.SETTINGS_FILE_ENV_VAR, raising=False)


class TestConfigLoaderLoad:
    """Test cases for ConfigLoader.load() method."""

    def test_load_full_config(self, tmp_path):
        """Load a configuration with routes and contributors."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(FULL_CONFIG)

        config = ConfigLoader.load(str(config_file))

        assert isinstance(config, NavConfig)
        assert config.settings_file == 'data/settings.yaml'
        assert config.base_url == '/omeka'
        assert config.routes[0] == RouteConfig(name='item-show', template='/items/show/:id')
        assert config.routes[1].defaults == {'slug': 'all'}
        assert config.contributors[0].filter == Navigation.PUBLIC_NAVIGATION_MAIN_FILTER_NAME
        assert config.contributors[0].priority == 5
        assert config.contributors[1].filter == 'footer_navigation'
        assert config.contributors[1].priority == 10
        assert config.contributors[1].pages == [{'label': 'Privacy', 'uri': '/privacy'}]

    def test_load_empty_file_uses_defaults(self, tmp_path):
        """An empty file is a configuration with default values."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        config = ConfigLoader.load(str(config_file))

        assert config == NavConfig()

    def test_load_missing_file_raises(self, tmp_path):
        """A missing file is a filesystem error."""
        with pytest.raises(ConfigFilesystemError) as exc_info:
            ConfigLoader.load(str(tmp_path / "missing.yaml"))

        assert 'Configuration file not found' in str(exc_info.value)

    def test_load_invalid_yaml_raises(self, tmp_path):
        """Malformed YAML is a configuration error."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("routes: [unclosed")

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader.load(str(config_file))

        assert 'Invalid YAML syntax' in str(exc_info.value)

    def test_load_non_dict_raises(self, tmp_path):
        """The top level must be a mapping."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- one\n- two\n")

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader.load(str(config_file))

        assert 'must be a YAML dictionary' in str(exc_info.value)

    def test_settings_file_env_override(self, tmp_path, monkeypatch):
        """SITENAV_SETTINGS_FILE replaces the configured settings file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(FULL_CONFIG)
        monkeypatch.setenv(ConfigLoader.SETTINGS_FILE_ENV_VAR, str(tmp_path / "env.yaml"))

        config = ConfigLoader.load(str(config_file))

        assert config.settings_file == str(tmp_path / "env.yaml")


class TestConfigLoaderValidation:
    """Test cases for configuration validation errors."""

    @pytest.mark.parametrize('content, field', [
        ("settings_file: ''\n", 'settings_file'),
        ("base_url: 3\n", 'base_url'),
        ("routes: item-show\n", 'routes'),
        ("routes:\n  - name: item-show\n", 'routes[0]'),
        ("routes:\n  - name: x\n    template: /x\n    defaults: [a]\n", 'routes[0].defaults'),
        ("contributors:\n  - pages: []\n", 'contributors[0]'),
        ("contributors:\n  - name: Blog\n    pages: /blog\n", 'contributors[0].pages'),
        ("contributors:\n  - name: Blog\n    priority: high\n    pages: []\n", 'contributors[0].priority'),
        ("contributors:\n  - name: Blog\n    priority: true\n    pages: []\n", 'contributors[0].priority'),
        ("contributors:\n  - name: Blog\n    pages: [/blog]\n", 'contributors[0].pages[0]'),
    ])
    def test_invalid_field(self, tmp_path, content, field):
        """Invalid values are reported with the offending field."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(content)

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader.load(str(config_file))

        assert exc_info.value.config_field == field


class TestConfigLoaderPaths:
    """Test cases for resolve_config_path() and load_or_default()."""

    def test_explicit_path_wins(self, monkeypatch):
        """An explicit path beats the environment."""
        monkeypatch.setenv(ConfigLoader.CONFIG_ENV_VAR, 'env.yaml')

        assert ConfigLoader.resolve_config_path('explicit.yaml') == 'explicit.yaml'

    def test_env_path(self, monkeypatch):
        """SITENAV_CONFIG is used when no path is given."""
        monkeypatch.setenv(ConfigLoader.CONFIG_ENV_VAR, 'env.yaml')

        assert ConfigLoader.resolve_config_path() == 'env.yaml'

    def test_default_path(self):
        """Without overrides the default path is used."""
        assert ConfigLoader.resolve_config_path() == '.sitenav/config.yaml'

    def test_load_or_default_missing_file(self, tmp_path):
        """A missing file gives the default configuration."""
        config = ConfigLoader.load_or_default(str(tmp_path / "missing.yaml"))

        assert config == NavConfig()


class TestConfigLoaderSave:
    """Test cases for ConfigLoader.save() method."""

    def test_save_then_load(self, tmp_path):
        """A saved configuration loads back equal."""
        config = NavConfig(
            settings_file='settings.yaml',
            base_url='/omeka',
            routes=[RouteConfig(name='item-show', template='/items/show/:id', defaults={'id': '1'})],
            contributors=[ContributorConfig(
                name='SimplePages',
                filter='public_navigation_main',
                priority=3,
                pages=[{'label': 'About', 'uri': '/about'}],
            )],
        )
        config_path = tmp_path / "nested" / "config.yaml"

        ConfigLoader.save(str(config_path), config)

        assert ConfigLoader.load(str(config_path)) == config


class TestConfigLoaderBuild:
    """Test cases for build_router() and build_filters()."""

    def test_build_router(self):
        """Configured routes and base URL reach the router."""
        config = NavConfig(base_url='/omeka', routes=[RouteConfig(name='item-show', template='/items/show/:id')])

        router = ConfigLoader.build_router(config)

        assert router.assemble(RouteTarget(route='item-show', params={'id': '3'})) == '/omeka/items/show/3'

    def test_build_router_invalid_route(self):
        """Router errors become configuration errors."""
        config = NavConfig(routes=[RouteConfig(name='broken', template='')])

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader.build_router(config)

        assert exc_info.value.config_field == 'routes[0]'

    def test_build_filters(self):
        """Each contributor appends its pages to its filter."""
        config = NavConfig(contributors=[
            ContributorConfig(name='Late', filter='main', priority=20, pages=[{'label': 'B', 'uri': '/b'}]),
            ContributorConfig(name='Early', filter='main', priority=1, pages=[{'label': 'A', 'uri': '/a'}]),
        ])

        filters = ConfigLoader.build_filters(config)

        assert filters.apply_filters('main', []) == [{'label': 'A', 'uri': '/a'}, {'label': 'B', 'uri': '/b'}]

    def test_contributed_pages_are_copies(self):
        """Changing a filter result does not change the configuration."""
        contributor = ContributorConfig(name='Blog', filter='main', pages=[{'label': 'Blog', 'uri': '/blog'}])
        filters = ConfigLoader.build_filters(NavConfig(contributors=[contributor]))

        result = filters.apply_filters('main', [])
        result[0]['label'] = 'Changed'

        assert contributor.pages[0]['label'] == 'Blog'
