"""Key/value option stores.

A navigation is persisted as a single JSON string under an option name. The
stores here provide the get/set interface the navigation needs.
"""

from .errors import SettingsError, SettingsFilesystemError, SettingsFormatError
from .store import MemoryOptionStore, OptionStore, YamlOptionStore

__all__ = [
    'MemoryOptionStore',
    'OptionStore',
    'YamlOptionStore',
    'SettingsError',
    'SettingsFilesystemError',
    'SettingsFormatError',
]
