"""Unit tests for filters.registry module."""

import pytest

from sitenav.filters import DEFAULT_PRIORITY, FilterError, FilterRegistry


def append(value):
    def callback(items):
        return items + [value]
    return callback


class TestApplyFilters:
    """Test cases for FilterRegistry.apply_filters()."""

    def test_no_callbacks_returns_value(self):
        """A filter without callbacks returns the initial value."""
        filters = FilterRegistry()
        value = ['seed']

        assert filters.apply_filters('main', value) is value

    def test_callbacks_chain_values(self):
        """Each callback receives the previous callback's result."""
        filters = FilterRegistry()
        filters.add_filter('main', append('a'))
        filters.add_filter('main', append('b'))

        assert filters.apply_filters('main', []) == ['a', 'b']

    def test_priority_orders_callbacks(self):
        """Lower priorities run first regardless of registration order."""
        filters = FilterRegistry()
        filters.add_filter('main', append('late'), priority=20)
        filters.add_filter('main', append('early'), priority=5)
        filters.add_filter('main', append('default'))

        assert filters.apply_filters('main', []) == ['early', 'default', 'late']

    def test_equal_priority_keeps_registration_order(self):
        """Callbacks sharing a priority run in registration order."""
        filters = FilterRegistry()
        for name in ('first', 'second', 'third'):
            filters.add_filter('main', append(name), priority=DEFAULT_PRIORITY)

        assert filters.apply_filters('main', []) == ['first', 'second', 'third']

    def test_keyword_arguments_passed_to_callbacks(self):
        """Extra keyword arguments reach every callback."""
        filters = FilterRegistry()
        filters.add_filter('main', lambda items, suffix: items + [f"a{suffix}"])
        filters.add_filter('main', lambda items, suffix: items + [f"b{suffix}"])

        assert filters.apply_filters('main', [], suffix='!') == ['a!', 'b!']

    def test_filters_are_independent(self):
        """Callbacks only run for their own filter name."""
        filters = FilterRegistry()
        filters.add_filter('main', append('main'))
        filters.add_filter('footer', append('footer'))

        assert filters.apply_filters('footer', []) == ['footer']

    def test_callback_error_is_wrapped(self):
        """A failing callback raises FilterError chained to the original."""
        filters = FilterRegistry()

        def broken(items):
            raise ValueError('bad page')

        filters.add_filter('main', broken)

        with pytest.raises(FilterError) as exc_info:
            filters.apply_filters('main', [])

        assert exc_info.value.filter_name == 'main'
        assert 'broken' in exc_info.value.callback_name
        assert isinstance(exc_info.value.__cause__, ValueError)


class TestRegistration:
    """Test cases for adding and removing callbacks."""

    def test_non_callable_rejected(self):
        """Only callables can be registered."""
        filters = FilterRegistry()

        with pytest.raises(TypeError):
            filters.add_filter('main', 'not callable')

    def test_has_and_get_filters(self):
        """Registered callbacks are reported in run order."""
        filters = FilterRegistry()
        late = append('late')
        early = append('early')
        filters.add_filter('main', late, priority=20)
        filters.add_filter('main', early, priority=1)

        assert filters.has_filter('main') is True
        assert filters.has_filter('footer') is False
        assert filters.get_filters('main') == [early, late]

    def test_remove_filter(self):
        """A removed callback no longer runs."""
        filters = FilterRegistry()
        callback = append('a')
        filters.add_filter('main', callback)

        assert filters.remove_filter('main', callback) is True
        assert filters.remove_filter('main', callback) is False
        assert filters.has_filter('main') is False
        assert filters.apply_filters('main', []) == []

    def test_clear_one_filter(self):
        """clear_filters with a name only clears that filter."""
        filters = FilterRegistry()
        filters.add_filter('main', append('a'))
        filters.add_filter('footer', append('b'))

        filters.clear_filters('main')

        assert filters.has_filter('main') is False
        assert filters.has_filter('footer') is True

    def test_clear_all_filters(self):
        """clear_filters without a name clears everything."""
        filters = FilterRegistry()
        filters.add_filter('main', append('a'))
        filters.add_filter('footer', append('b'))

        filters.clear_filters()

        assert filters.has_filter('main') is False
        assert filters.has_filter('footer') is False

    def test_registries_do_not_share_state(self):
        """Two registries are independent."""
        first = FilterRegistry()
        second = FilterRegistry()
        first.add_filter('main', append('a'))

        assert second.has_filter('main') is False
