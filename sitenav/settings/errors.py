"""Typed exception hierarchy for option store errors.

This module defines all custom exceptions raised by the option stores.
All exceptions inherit from SettingsError so callers can catch any storage
failure in one place.
"""

from typing import Optional

from sitenav.errors import NavError


class SettingsError(NavError):
    """Base exception for all option store errors."""
    pass


class SettingsFormatError(SettingsError):
    """Raised when the stored options are invalid or malformed."""

    def __init__(self, message: str, option_name: Optional[str] = None):
        if option_name:
            full_message = f"Settings error for option '{option_name}': {message}"
        else:
            full_message = f"Settings error: {message}"
        super().__init__(full_message)
        self.option_name = option_name
        self.original_message = message


class SettingsFilesystemError(SettingsError):
    """Raised when the settings file cannot be read or written."""

    def __init__(self, file_path: str, operation: str, reason: Optional[str] = None):
        message = f"Settings file operation '{operation}' failed for {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason
