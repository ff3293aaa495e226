"""Page normalization.

Normalization turns a raw page descriptor into a detached Page tree in which
every page has a resolved kind, a canonical href, a uid and the requested
option values. Descriptors may be Page objects or plain mappings such as the
ones contributed by filters or stored as JSON.
"""

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any, Callable, Dict, Optional, Set

from .errors import NavigationValidationError
from .href_resolver import DEFAULT_ROUTE_NAME, Router, canonicalize_uri
from .models import Page, PageKind, RouteTarget, UriTarget

logger = logging.getLogger(__name__)

# Descriptor keys that map onto Page fields rather than custom properties
PAGE_KEYS = {
    'label', 'type', 'uri', 'route', 'controller', 'action', 'params',
    'visible', 'can_delete', 'order', 'uid', 'href', 'pages',
}

# Keys whose presence marks a descriptor as a route page
ROUTE_KEYS = ('route', 'controller', 'action', 'params')

# Accepted values of the 'type' key, including class names found in
# navigations stored by older releases
TYPE_ALIASES = {
    'route': PageKind.ROUTE,
    'mvc': PageKind.ROUTE,
    'zend_navigation_page_mvc': PageKind.ROUTE,
    'uri': PageKind.URI,
    'zend_navigation_page_uri': PageKind.URI,
    'omeka_navigation_page_uri': PageKind.URI,
}

SELF_PARENT_MESSAGE = 'A page cannot have itself as a parent'


def _to_bool(value: Any, key: str, label: Optional[str], default: bool = True) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ('1', 'true', 'yes', 'on'):
            return True
        if lowered in ('0', 'false', 'no', 'off', ''):
            return False
    raise NavigationValidationError(
        f"Field '{key}' must be a boolean, got {type(value).__name__}", label
    )


def _to_order(value: Any, label: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise NavigationValidationError("Field 'order' must be an integer, got bool", label)
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip('-').isdigit():
        return int(value.strip())
    raise NavigationValidationError(
        f"Field 'order' must be an integer, got {type(value).__name__}", label
    )


class PageNormalizer:
    """Normalizes page descriptors into detached Page trees.

    Example:
        >>> normalizer = PageNormalizer(Router(), uid_factory=lambda href: href)
        >>> page = normalizer.normalize({'label': 'Browse Items',
        ...                              'controller': 'items', 'action': 'browse'})
        >>> page.uid
        '/items/browse'
    """

    def __init__(self, router: Router, uid_factory: Callable[[str], str]):
        """Initialize the normalizer.

        Args:
            router: Router used to resolve hrefs
            uid_factory: Callable mapping a canonical href to a uid
        """
        self.router = router
        self.uid_factory = uid_factory

    def normalize(
        self,
        page: Any,
        page_options: Optional[Dict[str, Any]] = None
    ) -> Page:
        """Normalize a page descriptor and all of its subpages.

        Args:
            page: A Page or a mapping descriptor
            page_options: Values applied to every page of the subtree,
                          e.g. {'can_delete': False}

        Returns:
            A new, fully normalized Page tree

        Raises:
            NavigationValidationError: If the page refers to itself or does
                not resolve to a route or URI page
        """
        return self._normalize_recursive(page, dict(page_options or {}), set())

    def _normalize_recursive(
        self,
        page: Any,
        page_options: Dict[str, Any],
        ancestors: Set[int]
    ) -> Page:
        if id(page) in ancestors:
            raise NavigationValidationError(SELF_PARENT_MESSAGE)

        if isinstance(page, Page):
            normalized = replace(page, properties=dict(page.properties), pages=[])
            sub_pages = list(page.pages)
        elif isinstance(page, Mapping):
            normalized, sub_pages = self._page_from_mapping(page)
        else:
            raise NavigationValidationError(
                'Invalid argument: page must resolve to a route page or a URI page, '
                f'got {type(page).__name__}'
            )

        if isinstance(normalized.target, UriTarget):
            normalized.target = UriTarget(uri=canonicalize_uri(normalized.target.uri))
        elif isinstance(normalized.target, RouteTarget):
            if normalized.target.route is None:
                normalized.target = replace(normalized.target, route=DEFAULT_ROUTE_NAME)
        else:
            raise NavigationValidationError(
                'Invalid argument: page must resolve to a route page or a URI page',
                normalized.label
            )

        self._apply_options(normalized, page_options)

        normalized.href = self.router.resolve_href(normalized.target)
        normalized.uid = self.uid_factory(normalized.href)

        child_ancestors = ancestors | {id(page)}
        normalized.pages = [
            self._normalize_recursive(sub_page, page_options, child_ancestors)
            for sub_page in sub_pages
        ]

        logger.debug(
            f"Normalized page '{normalized.label}' ({normalized.kind.value}) "
            f"uid={normalized.uid} with {len(normalized.pages)} subpage(s)"
        )
        return normalized

    def _page_from_mapping(self, descriptor: Mapping):
        label = descriptor.get('label')
        label = '' if label is None else str(label)
        kind = self._resolve_kind(descriptor, label)

        if kind is PageKind.URI:
            target = UriTarget(uri=descriptor.get('uri') or '')
        else:
            params = descriptor.get('params') or {}
            if not isinstance(params, Mapping):
                raise NavigationValidationError(
                    f"Field 'params' must be a mapping, got {type(params).__name__}", label
                )
            target = RouteTarget(
                route=descriptor.get('route') or None,
                controller=descriptor.get('controller'),
                action=descriptor.get('action'),
                params={str(k): str(v) for k, v in params.items()},
            )

        sub_pages = descriptor.get('pages') or []
        if not isinstance(sub_pages, (list, tuple)):
            raise NavigationValidationError(
                f"Field 'pages' must be a list, got {type(sub_pages).__name__}", label
            )

        page = Page(
            label=label,
            target=target,
            visible=_to_bool(descriptor.get('visible', True), 'visible', label),
            can_delete=_to_bool(descriptor.get('can_delete', True), 'can_delete', label),
            order=_to_order(descriptor.get('order'), label),
            properties={k: v for k, v in descriptor.items() if k not in PAGE_KEYS},
        )
        return page, list(sub_pages)

    def _resolve_kind(self, descriptor: Mapping, label: str) -> PageKind:
        page_type = descriptor.get('type')
        if page_type:
            kind = TYPE_ALIASES.get(str(page_type).lower())
            if kind is None:
                raise NavigationValidationError(f"Unknown page type '{page_type}'", label)
            return kind

        if any(descriptor.get(key) is not None for key in ROUTE_KEYS):
            return PageKind.ROUTE
        if 'uri' in descriptor:
            return PageKind.URI

        raise NavigationValidationError(
            'Invalid argument: unable to determine the page type, '
            'a page needs a uri or a route/controller/action',
            label or None
        )

    def _apply_options(self, page: Page, page_options: Dict[str, Any]) -> None:
        for key, value in page_options.items():
            if key == 'label':
                page.label = '' if value is None else str(value)
            elif key in ('visible', 'can_delete'):
                setattr(page, key, _to_bool(value, key, page.label))
            elif key == 'order':
                page.order = _to_order(value, page.label)
            else:
                page.properties[key] = value
