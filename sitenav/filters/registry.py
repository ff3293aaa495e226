"""Registry of named filters.

A filter is an ordered chain of callbacks. Applying a filter passes a value
through every callback registered for its name; each callback receives the
value returned by the previous one and returns the new value.

There is no module-level registry. Whoever builds a navigation owns a
FilterRegistry and hands it over explicitly.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .errors import FilterError

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 10

FilterCallback = Callable[..., Any]


@dataclass
class _RegisteredFilter:
    callback: FilterCallback
    priority: int
    sequence: int


def _callback_name(callback: FilterCallback) -> str:
    return getattr(callback, '__qualname__', None) or repr(callback)


class FilterRegistry:
    """Maps filter names to ordered lists of callbacks.

    Callbacks run in ascending priority. Callbacks sharing a priority run in
    registration order.

    Example:
        >>> filters = FilterRegistry()
        >>> filters.add_filter('public_navigation_main',
        ...                    lambda pages: pages + [{'label': 'About', 'uri': '/about'}])
        >>> filters.apply_filters('public_navigation_main', [])
        [{'label': 'About', 'uri': '/about'}]
    """

    def __init__(self):
        self._filters: Dict[str, List[_RegisteredFilter]] = {}
        self._sequence = 0

    def add_filter(
        self,
        name: str,
        callback: FilterCallback,
        priority: int = DEFAULT_PRIORITY
    ) -> None:
        """Register a callback for a filter.

        Args:
            name: Filter name
            callback: Callable taking the current value (plus keyword
                      arguments passed to apply_filters) and returning the new value
            priority: Lower priorities run first

        Raises:
            TypeError: If callback is not callable
        """
        if not callable(callback):
            raise TypeError(f"Filter callback for '{name}' must be callable")

        self._sequence += 1
        entries = self._filters.setdefault(name, [])
        entries.append(_RegisteredFilter(callback, priority, self._sequence))
        entries.sort(key=lambda entry: (entry.priority, entry.sequence))
        logger.debug(
            f"Registered filter '{name}' callback {_callback_name(callback)} "
            f"(priority {priority})"
        )

    def remove_filter(self, name: str, callback: FilterCallback) -> bool:
        """Unregister a callback.

        Returns:
            True if the callback was registered for the filter
        """
        entries = self._filters.get(name, [])
        remaining = [entry for entry in entries if entry.callback is not callback]
        if len(remaining) == len(entries):
            return False

        if remaining:
            self._filters[name] = remaining
        else:
            del self._filters[name]
        return True

    def clear_filters(self, name: Optional[str] = None) -> None:
        """Remove every callback of one filter, or of all filters."""
        if name is None:
            self._filters.clear()
        else:
            self._filters.pop(name, None)

    def has_filter(self, name: str) -> bool:
        return bool(self._filters.get(name))

    def get_filters(self, name: str) -> List[FilterCallback]:
        """Return the callbacks of a filter in the order they run."""
        return [entry.callback for entry in self._filters.get(name, [])]

    def apply_filters(self, name: str, value: Any, **args: Any) -> Any:
        """Pass a value through every callback of a filter.

        Args:
            name: Filter name
            value: Initial value
            **args: Extra keyword arguments handed to every callback

        Returns:
            The value returned by the last callback (the initial value if no
            callback is registered)

        Raises:
            FilterError: If a callback raises
        """
        for entry in list(self._filters.get(name, [])):
            try:
                value = entry.callback(value, **args)
            except Exception as e:
                logger.error(f"Filter '{name}' callback {_callback_name(entry.callback)} failed: {e}")
                raise FilterError(name, _callback_name(entry.callback), str(e)) from e

        return value
