"""Option store implementations.

Option values are opaque strings. There is no locking: when two writers
save the same option, the last one wins.
"""

import logging
import os
from typing import Dict, Optional, Protocol

import yaml

from .errors import SettingsFilesystemError, SettingsFormatError

logger = logging.getLogger(__name__)


class OptionStore(Protocol):
    """Interface of a key/value settings store."""

    def get(self, name: str) -> Optional[str]:
        ...

    def set(self, name: str, value: str) -> None:
        ...


class MemoryOptionStore:
    """Option store kept in a dictionary.

    Example:
        >>> store = MemoryOptionStore()
        >>> store.set('public_navigation_main', '[]')
        >>> store.get('public_navigation_main')
        '[]'
    """

    def __init__(self, options: Optional[Dict[str, str]] = None):
        self._options: Dict[str, str] = dict(options or {})

    def get(self, name: str) -> Optional[str]:
        return self._options.get(name)

    def set(self, name: str, value: str) -> None:
        self._options[name] = value

    def delete(self, name: str) -> None:
        self._options.pop(name, None)


class YamlOptionStore:
    """Option store backed by a YAML mapping file.

    The file maps option names to string values:

        public_navigation_main: '[{"label": "Browse Items", ...}]'

    A missing or empty file reads as a store without options. Every get
    re-reads the file and every set rewrites it.
    """

    def __init__(self, path: str):
        """Initialize the store.

        Args:
            path: Path to the YAML settings file
        """
        self.path = str(path)

    def get(self, name: str) -> Optional[str]:
        """Return the value of an option, or None if it is not set.

        Raises:
            SettingsFilesystemError: If the file cannot be read
            SettingsFormatError: If the file is not a valid YAML mapping
        """
        value = self._load().get(name)
        if value is None:
            return None
        if not isinstance(value, str):
            raise SettingsFormatError(
                f"Value must be a string, got {type(value).__name__}",
                name
            )
        return value

    def set(self, name: str, value: str) -> None:
        """Store the value of an option.

        Raises:
            SettingsFilesystemError: If the file cannot be read or written
            SettingsFormatError: If the existing file is not a valid YAML mapping
        """
        options = self._load()
        options[name] = value
        self._save(options)
        logger.debug(f"Saved option '{name}' to {self.path}")

    def delete(self, name: str) -> None:
        options = self._load()
        if options.pop(name, None) is not None:
            self._save(options)

    def _load(self) -> Dict[str, object]:
        # Missing settings file is normal before the first save
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            return {}
        except PermissionError:
            raise SettingsFilesystemError(self.path, 'read', 'Permission denied')
        except OSError as e:
            raise SettingsFilesystemError(self.path, 'read', str(e))

        if not content.strip():
            return {}

        try:
            options = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise SettingsFormatError(f"Invalid YAML syntax in {self.path}: {str(e)}")

        if options is None:
            return {}

        if not isinstance(options, dict):
            raise SettingsFormatError(
                f"Settings file must be a YAML dictionary, got {type(options).__name__}"
            )

        return options

    def _save(self, options: Dict[str, object]) -> None:
        yaml_str = yaml.safe_dump(
            options,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )

        settings_dir = os.path.dirname(self.path)
        if settings_dir:
            try:
                os.makedirs(settings_dir, exist_ok=True)
            except OSError as e:
                raise SettingsFilesystemError(settings_dir, 'create_directory', str(e))

        try:
            with open(self.path, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
        except PermissionError:
            raise SettingsFilesystemError(self.path, 'write', 'Permission denied')
        except OSError as e:
            raise SettingsFilesystemError(self.path, 'write', str(e))
