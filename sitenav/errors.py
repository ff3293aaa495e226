"""Base exception for the sitenav package.

Every subpackage defines its own typed exceptions on top of NavError so that
callers can catch any application-level failure with a single except clause.
"""


class NavError(Exception):
    """Base exception for all sitenav errors.

    Use this to catch any application-level error from the navigation tool.
    """
    pass
