"""Href resolution for navigation pages.

Route pages are turned into hrefs by assembling a named route template,
URI pages by canonicalizing the URI. Both are deterministic: the same target
always resolves to the same href, which is what page identity relies on.

Route templates use ``:name`` placeholders and an optional trailing ``*``
that appends any remaining params as ``/key/value`` pairs:

    /:controller/:action/*      (the "default" route)
    /items/show/:id
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote, urlsplit, urlunsplit

from .errors import NavigationValidationError
from .models import PageTarget, RouteTarget, UriTarget

logger = logging.getLogger(__name__)

DEFAULT_ROUTE_NAME = 'default'
DEFAULT_ROUTE_TEMPLATE = '/:controller/:action/*'
DEFAULT_ROUTE_DEFAULTS = {'controller': 'index', 'action': 'index'}

# Ports implied by the scheme, dropped from canonical URIs
DEFAULT_PORTS = {'http': 80, 'https': 443}

_REPEATED_SLASHES = re.compile(r'/{2,}')


@dataclass
class RouteDefinition:
    """A named route template.

    Attributes:
        name: Route name referenced by pages
        template: Path template with ``:name`` placeholders
        defaults: Values used when a placeholder is not supplied
    """
    name: str
    template: str
    defaults: Dict[str, str] = field(default_factory=dict)


def canonicalize_uri(uri: Optional[str]) -> str:
    """Return the canonical form of a URI.

    Absolute URIs get a lower-case scheme and host, no default port and at
    least a ``/`` path. Repeated slashes in the path collapse to one. Query
    strings and fragments are kept as given.

    Args:
        uri: The URI to canonicalize (None is treated as empty)

    Returns:
        The canonical URI string
    """
    if uri is None:
        return ''

    uri = str(uri).strip()
    if not uri:
        return ''

    parts = urlsplit(uri)
    scheme = parts.scheme.lower()
    path = _REPEATED_SLASHES.sub('/', parts.path)

    netloc = parts.netloc
    if netloc:
        host = (parts.hostname or '').lower()
        if ':' in host:
            host = f"[{host}]"
        userinfo = ''
        if '@' in netloc:
            userinfo = netloc.rsplit('@', 1)[0] + '@'
        try:
            port = parts.port
        except ValueError:
            raise NavigationValidationError(f"Invalid port in URI '{uri}'")
        if port is not None and DEFAULT_PORTS.get(scheme) != port:
            host = f"{host}:{port}"
        netloc = userinfo + host
        if not path:
            path = '/'

    return urlunsplit((scheme, netloc, path, parts.query, parts.fragment))


class Router:
    """Table of named routes used to assemble hrefs for route pages.

    A "default" route is always present. It maps controller and action onto
    ``/controller/action`` and drops trailing segments that equal their
    default value, so ``items/index`` becomes ``/items`` and ``index/index``
    becomes ``/``.

    Example:
        >>> router = Router()
        >>> router.add_route('item-show', '/items/show/:id')
        >>> router.assemble(RouteTarget(route='item-show', params={'id': '7'}))
        '/items/show/7'
    """

    def __init__(self, base_url: str = ''):
        """Initialize the router.

        Args:
            base_url: Prefix for every assembled route href (e.g. "/omeka")
        """
        self.base_url = (base_url or '').rstrip('/')
        self._routes: Dict[str, RouteDefinition] = {}
        self.add_route(DEFAULT_ROUTE_NAME, DEFAULT_ROUTE_TEMPLATE, DEFAULT_ROUTE_DEFAULTS)

    def add_route(
        self,
        name: str,
        template: str,
        defaults: Optional[Dict[str, str]] = None
    ) -> None:
        """Register (or replace) a named route.

        Args:
            name: Route name
            template: Path template
            defaults: Default placeholder values

        Raises:
            NavigationValidationError: If name or template is empty
        """
        if not name or not str(name).strip():
            raise NavigationValidationError("Route name cannot be empty")
        if not template or not str(template).strip():
            raise NavigationValidationError(f"Route '{name}' has an empty template")

        self._routes[name] = RouteDefinition(
            name=name,
            template=template,
            defaults={k: str(v) for k, v in (defaults or {}).items()}
        )
        logger.debug(f"Registered route '{name}': {template}")

    def has_route(self, name: str) -> bool:
        return name in self._routes

    def get_route(self, name: str) -> Optional[RouteDefinition]:
        return self._routes.get(name)

    def assemble(self, target: RouteTarget) -> str:
        """Assemble the href for a route target.

        Args:
            target: Route target (a None route means the default route)

        Returns:
            The assembled href

        Raises:
            NavigationValidationError: If the route is unknown or a
                placeholder has no value
        """
        route_name = target.route or DEFAULT_ROUTE_NAME
        route = self._routes.get(route_name)
        if route is None:
            raise NavigationValidationError(f"Route '{route_name}' is not defined")

        values: Dict[str, str] = dict(route.defaults)
        values.update({k: str(v) for k, v in target.params.items()})
        if target.controller is not None:
            values['controller'] = target.controller
        if target.action is not None:
            values['action'] = target.action

        # (segment value, whether it equals its placeholder default)
        segments: List[Tuple[str, bool]] = []
        consumed = {'controller', 'action'}
        wildcard = False

        for part in route.template.strip('/').split('/'):
            if not part:
                continue
            if part == '*':
                wildcard = True
                continue
            if part.startswith(':'):
                key = part[1:]
                value = values.get(key)
                if value is None or value == '':
                    raise NavigationValidationError(
                        f"Route '{route_name}' requires a value for '{key}'"
                    )
                consumed.add(key)
                segments.append((value, route.defaults.get(key) == value))
            else:
                segments.append((part, False))

        extras: List[Tuple[str, str]] = []
        if wildcard:
            extras = sorted(
                (k, str(v)) for k, v in target.params.items() if k not in consumed
            )

        if not extras:
            while segments and segments[-1][1]:
                segments.pop()

        parts = [quote(value, safe='') for value, _ in segments]
        for key, value in extras:
            parts.extend((quote(key, safe=''), quote(value, safe='')))

        return f"{self.base_url}/{'/'.join(parts)}"

    def resolve_href(self, target: PageTarget) -> str:
        """Return the href of any page target.

        Args:
            target: Route or URI target

        Returns:
            The resolved href
        """
        if isinstance(target, UriTarget):
            return canonicalize_uri(target.uri)
        return self.assemble(target)
