"""Typed exceptions for filter registry errors."""

from sitenav.errors import NavError


class FilterError(NavError):
    """Raised when a registered filter callback fails.

    The original exception is chained as __cause__.
    """

    def __init__(self, filter_name: str, callback_name: str, reason: str):
        super().__init__(
            f"Filter '{filter_name}' callback {callback_name} failed: {reason}"
        )
        self.filter_name = filter_name
        self.callback_name = callback_name
        self.reason = reason
