"""Unit tests for settings.store module."""

import os

import pytest
import yaml

from sitenav.settings import MemoryOptionStore, SettingsFormatError, YamlOptionStore


class TestMemoryOptionStore:
    """Test cases for MemoryOptionStore."""

    def test_get_missing_returns_none(self):
        """Unknown options read as None."""
        assert MemoryOptionStore().get('public_navigation_main') is None

    def test_set_get_delete(self):
        """Values can be stored, read and deleted."""
        store = MemoryOptionStore()

        store.set('public_navigation_main', '[]')
        assert store.get('public_navigation_main') == '[]'

        store.delete('public_navigation_main')
        assert store.get('public_navigation_main') is None

    def test_initial_options_are_copied(self):
        """The initial mapping is not shared with the store."""
        initial = {'a': '1'}
        store = MemoryOptionStore(initial)

        store.set('a', '2')

        assert initial == {'a': '1'}


class TestYamlOptionStore:
    """Test cases for YamlOptionStore."""

    def test_missing_file_reads_empty(self, tmp_path):
        """A store without a file has no options."""
        store = YamlOptionStore(str(tmp_path / 'settings.yaml'))

        assert store.get('public_navigation_main') is None

    def test_empty_file_reads_empty(self, tmp_path):
        """An empty file has no options."""
        settings_file = tmp_path / 'settings.yaml'
        settings_file.write_text('')

        assert YamlOptionStore(str(settings_file)).get('public_navigation_main') is None

    def test_set_creates_directories_and_file(self, tmp_path):
        """Saving creates missing parent directories."""
        settings_file = tmp_path / '.sitenav' / 'settings.yaml'
        store = YamlOptionStore(str(settings_file))

        store.set('public_navigation_main', '[{"label": "About"}]')

        assert os.path.exists(settings_file)
        assert yaml.safe_load(settings_file.read_text()) == {
            'public_navigation_main': '[{"label": "About"}]'
        }

    def test_set_keeps_other_options(self, tmp_path):
        """Saving one option keeps the others."""
        store = YamlOptionStore(str(tmp_path / 'settings.yaml'))
        store.set('footer_navigation', '[]')

        store.set('public_navigation_main', '[{"label": "About"}]')

        assert store.get('footer_navigation') == '[]'
        assert store.get('public_navigation_main') == '[{"label": "About"}]'

    def test_last_writer_wins(self, tmp_path):
        """Two stores on one file see the latest write."""
        path = str(tmp_path / 'settings.yaml')
        first = YamlOptionStore(path)
        second = YamlOptionStore(path)

        first.set('public_navigation_main', 'one')
        second.set('public_navigation_main', 'two')

        assert first.get('public_navigation_main') == 'two'

    def test_delete(self, tmp_path):
        """Deleted options read as None."""
        store = YamlOptionStore(str(tmp_path / 'settings.yaml'))
        store.set('public_navigation_main', '[]')

        store.delete('public_navigation_main')

        assert store.get('public_navigation_main') is None

    def test_invalid_yaml_raises(self, tmp_path):
        """Malformed YAML is a format error."""
        settings_file = tmp_path / 'settings.yaml'
        settings_file.write_text('public_navigation_main: [unclosed')

        with pytest.raises(SettingsFormatError) as exc_info:
            YamlOptionStore(str(settings_file)).get('public_navigation_main')

        assert 'Invalid YAML syntax' in str(exc_info.value)

    def test_non_mapping_raises(self, tmp_path):
        """The settings file must hold a mapping."""
        settings_file = tmp_path / 'settings.yaml'
        settings_file.write_text('- one\n- two\n')

        with pytest.raises(SettingsFormatError) as exc_info:
            YamlOptionStore(str(settings_file)).get('public_navigation_main')

        assert 'must be a YAML dictionary' in str(exc_info.value)

    def test_non_string_value_raises(self, tmp_path):
        """Option values must be strings."""
        settings_file = tmp_path / 'settings.yaml'
        settings_file.write_text('public_navigation_main:\n  - label: About\n')

        with pytest.raises(SettingsFormatError) as exc_info:
            YamlOptionStore(str(settings_file)).get('public_navigation_main')

        assert exc_info.value.option_name == 'public_navigation_main'
