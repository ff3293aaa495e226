"""Plugin-contributed navigation menus for a content-management site."""

from .errors import NavError

__version__ = "0.1.0"

__all__ = ['NavError', '__version__']
