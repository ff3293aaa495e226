"""Filter (extension point) registry.

Contributors such as plugins register callbacks against a filter name. The
navigation passes its seed list of page descriptors through the callbacks of
a filter to learn which pages currently want to exist.
"""

from .errors import FilterError
from .registry import DEFAULT_PRIORITY, FilterRegistry

__all__ = [
    'DEFAULT_PRIORITY',
    'FilterError',
    'FilterRegistry',
]
