"""Data models for navigation pages.

This module defines all data models used by the navigation library.
All models use dataclasses for clean, type-safe data structures.

A page points either at an internal route or at a URI. The two kinds are
modelled as separate target types so the kind is decided once, during
normalization, and carried with the page afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class PageKind(str, Enum):
    """The two supported kinds of navigation page."""
    ROUTE = "route"
    URI = "uri"


@dataclass(frozen=True)
class RouteTarget:
    """Link target expressed as a named route plus controller and action.

    Attributes:
        route: Name of the route used to assemble the href (None until normalized)
        controller: Controller segment (None uses the route default)
        action: Action segment (None uses the route default)
        params: Extra route parameters
    """
    route: Optional[str] = None
    controller: Optional[str] = None
    action: Optional[str] = None
    params: Dict[str, str] = field(default_factory=dict)

    @property
    def kind(self) -> PageKind:
        return PageKind.ROUTE


@dataclass(frozen=True)
class UriTarget:
    """Link target expressed as a URI.

    Attributes:
        uri: The URI, canonical once the page has been normalized
    """
    uri: str = ""

    @property
    def kind(self) -> PageKind:
        return PageKind.URI


PageTarget = Union[RouteTarget, UriTarget]


@dataclass
class Page:
    """A detached navigation page and its subpages.

    Pages are built from plugin-supplied descriptors, normalized, and then
    copied into a Navigation. A Page does not belong to any navigation.

    Attributes:
        label: Text shown for the link
        target: Where the page links to
        visible: Whether the page is shown in menus
        can_delete: Whether the page may be removed by hand. Pages installed
                    by a filter are marked False and expire automatically.
        order: Sort position among siblings (None keeps insertion order)
        uid: Identity key derived from the href (None until normalized)
        href: Resolved link (None until normalized)
        properties: Custom key/values carried through serialization
        pages: Ordered child pages
    """
    label: str
    target: PageTarget
    visible: bool = True
    can_delete: bool = True
    order: Optional[int] = None
    uid: Optional[str] = None
    href: Optional[str] = None
    properties: Dict[str, Any] = field(default_factory=dict)
    pages: List['Page'] = field(default_factory=list)

    @property
    def kind(self) -> PageKind:
        return self.target.kind


@dataclass(eq=False)
class PageNode:
    """A page stored in a navigation arena.

    Nodes reference their parent and children by node id only. The root of
    the navigation is not a node; top-level pages have parent_id ROOT_ID.
    Nodes compare by identity.

    Attributes:
        node_id: Id of the node within its navigation
        label: Text shown for the link
        target: Where the page links to
        uid: Identity key derived from the href
        href: Resolved link
        visible: Whether the page is shown in menus
        can_delete: Whether the page may be removed by hand
        order: Sort position among siblings
        properties: Custom key/values
        parent_id: Id of the parent node (ROOT_ID for top-level pages)
        child_ids: Ids of the child nodes in insertion order
    """
    node_id: int
    label: str
    target: PageTarget
    uid: str
    href: str
    visible: bool = True
    can_delete: bool = True
    order: Optional[int] = None
    properties: Dict[str, Any] = field(default_factory=dict)
    parent_id: Optional[int] = None
    child_ids: List[int] = field(default_factory=list)

    @property
    def kind(self) -> PageKind:
        return self.target.kind


@dataclass
class FilterSyncResult:
    """Result of reconciling a navigation with a filter.

    Attributes:
        filter_name: Name of the filter that was applied
        added_uids: Uids of pages that were new to the navigation
        pruned_uids: Uids of expired pages that were removed
    """
    filter_name: str
    added_uids: List[str] = field(default_factory=list)
    pruned_uids: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added_uids or self.pruned_uids)
