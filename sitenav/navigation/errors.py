"""Typed exception hierarchy for navigation tree errors.

This module defines the exceptions raised while normalizing, adding, merging
and pruning navigation pages. Structural problems with page descriptors are
validation errors; misuse of the merge API by the caller is a usage error.
"""

from typing import Optional

from sitenav.errors import NavError


class NavigationError(NavError):
    """Base exception for all navigation errors."""
    pass


class NavigationValidationError(NavigationError):
    """Raised when a page descriptor cannot be turned into a valid page."""

    def __init__(self, message: str, label: Optional[str] = None):
        if label:
            full_message = f"Invalid page '{label}': {message}"
        else:
            full_message = message
        super().__init__(full_message)
        self.label = label
        self.original_message = message


class NavigationUsageError(NavigationError):
    """Raised when a navigation operation is called with broken preconditions.

    This always signals a programming error in the caller, for example merging
    a page that was never normalized.
    """
    pass
