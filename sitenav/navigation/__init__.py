"""Navigation library for plugin-contributed site menus.

This package keeps the site navigation as a tree of pages identified by the
uid of their href. It merges the pages that contributors provide through a
filter into the stored tree, prunes pages they stopped providing, and
persists the tree as JSON in an option store.
"""

from .errors import NavigationError, NavigationUsageError, NavigationValidationError
from .href_resolver import Router, RouteDefinition, canonicalize_uri
from .models import FilterSyncResult, Page, PageKind, PageNode, RouteTarget, UriTarget
from .navigation import ROOT_ID, Navigation
from .normalizer import PageNormalizer

__all__ = [
    'Navigation',
    'ROOT_ID',
    'Page',
    'PageKind',
    'PageNode',
    'RouteTarget',
    'UriTarget',
    'FilterSyncResult',
    'Router',
    'RouteDefinition',
    'canonicalize_uri',
    'PageNormalizer',
    'NavigationError',
    'NavigationUsageError',
    'NavigationValidationError',
]
