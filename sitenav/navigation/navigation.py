"""Navigation tree with merge and prune support.

This module implements the Navigation class, the persistent menu of the
site. Pages are kept in an arena keyed by node id; parents and children refer
to each other by id only, so a node can never sit under two parents.

Contributors (plugins) declare the pages they want through a filter on every
run. The navigation reconciles itself with that declaration:

1. Build a scratch navigation from the filter (create_navigation_from_filter)
2. Prune filter-installed pages the filter no longer returns
   (get_expired_pages_from_nav, prune_pages)
3. Merge the scratch navigation in by uid (merge_navigation)

Pages are matched by uid, which is derived from the resolved href. Existing
pages are never moved or edited by a merge, so manual customizations
survive repeated reconciliation.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from sitenav.filters import FilterRegistry
from sitenav.settings import OptionStore

from .errors import NavigationUsageError, NavigationValidationError
from .href_resolver import Router
from .models import FilterSyncResult, Page, PageNode, RouteTarget, UriTarget
from .normalizer import SELF_PARENT_MESSAGE, PageNormalizer

logger = logging.getLogger(__name__)

# Id of the navigation itself when used as a container
ROOT_ID = 0

Container = Union['Navigation', PageNode, None]


class Navigation:
    """The site navigation: an ordered tree of pages identified by uid.

    The navigation itself is the root container. Methods that take a
    container accept None or the navigation for the root, or a PageNode
    belonging to this navigation.

    Example:
        >>> nav = Navigation(filters=filters)
        >>> nav.load_as_option('public_navigation_main', store)
        >>> nav.add_pages_from_filter()
        >>> nav.save_as_option('public_navigation_main', store)
    """

    PUBLIC_NAVIGATION_MAIN_OPTION_NAME = 'public_navigation_main'
    PUBLIC_NAVIGATION_MAIN_FILTER_NAME = 'public_navigation_main'

    def __init__(
        self,
        pages: Optional[Iterable[Any]] = None,
        router: Optional[Router] = None,
        filters: Optional[FilterRegistry] = None
    ):
        """Create a navigation.

        Args:
            pages: Optional pages to add (see add_pages)
            router: Router used to resolve route hrefs
            filters: Filter registry used by the filter operations
        """
        self.router = router if router is not None else Router()
        self.filters = filters if filters is not None else FilterRegistry()
        self._normalizer = PageNormalizer(self.router, self.create_page_uid)
        self._nodes: Dict[int, PageNode] = {}
        self._root_child_ids: List[int] = []
        self._next_node_id = ROOT_ID + 1

        if pages is not None:
            self.add_pages(pages)

    # ------------------------------------------------------------------
    # Container access

    def __iter__(self) -> Iterator[PageNode]:
        return iter(self.get_pages())

    def __len__(self) -> int:
        return len(self._root_child_ids)

    def count(self) -> int:
        """Return the number of top-level pages."""
        return len(self._root_child_ids)

    def get_pages(self, container: Container = None) -> List[PageNode]:
        """Return the direct children of a container in display order.

        Children are sorted by order; a child without an order sorts at its
        insertion position.
        """
        container_id = self._container_id(container)
        child_ids = self._child_ids(container_id)
        positioned = [
            (index if self._nodes[node_id].order is None else self._nodes[node_id].order, index)
            for index, node_id in enumerate(child_ids)
        ]
        positioned.sort()
        return [self._nodes[child_ids[index]] for _, index in positioned]

    def iter_pages(self, container: Container = None) -> Iterator[PageNode]:
        """Iterate over all descendants of a container, parents first."""
        for page in self.get_pages(container):
            yield page
            yield from self.iter_pages(page)

    def get_parent(self, page: PageNode) -> Optional[PageNode]:
        """Return the parent node of a page, or None for top-level pages."""
        self._require_node(page)
        if page.parent_id == ROOT_ID:
            return None
        return self._nodes[page.parent_id]

    def has_page(self, page: Any, recursive: bool = True) -> bool:
        """Check whether a node belongs to this navigation.

        Args:
            page: The node to look for
            recursive: If False, only top-level pages count
        """
        if not isinstance(page, PageNode) or self._nodes.get(page.node_id) is not page:
            return False
        return recursive or page.parent_id == ROOT_ID

    def find_one_by(self, field: str, value: Any) -> Optional[PageNode]:
        """Return the first page (pre-order) whose field equals value."""
        for page in self.iter_pages():
            if self._page_value(page, field) == value:
                return page
        return None

    def find_all_by(self, field: str, value: Any) -> List[PageNode]:
        """Return every page (pre-order) whose field equals value."""
        return [page for page in self.iter_pages() if self._page_value(page, field) == value]

    def remove_pages(self) -> 'Navigation':
        """Remove every page."""
        self._nodes.clear()
        self._root_child_ids = []
        return self

    def export_page(self, page: PageNode) -> Page:
        """Copy a node and its subpages out of the navigation as a detached Page."""
        self._require_node(page)
        return Page(
            label=page.label,
            target=page.target,
            visible=page.visible,
            can_delete=page.can_delete,
            order=page.order,
            uid=page.uid,
            href=page.href,
            properties=dict(page.properties),
            pages=[self.export_page(child) for child in self.get_pages(page)],
        )

    # ------------------------------------------------------------------
    # Identity and normalization

    def create_page_uid(self, href: str) -> str:
        """Return the uid of a page with the given href.

        The uid decides whether two pages are the same page.
        """
        return href

    def normalize_page(
        self,
        page: Any,
        page_options: Optional[Dict[str, Any]] = None
    ) -> Page:
        """Normalize a page and its subpages so it can be added.

        Args:
            page: A Page, a PageNode of this navigation or a mapping descriptor
            page_options: Values set on every page and subpage

        Returns:
            A new normalized Page tree with uids assigned

        Raises:
            NavigationValidationError: If a page or subpage is invalid
        """
        if page is self:
            raise NavigationValidationError(SELF_PARENT_MESSAGE)

        if isinstance(page, PageNode):
            if not self.has_page(page):
                raise NavigationUsageError(
                    'A page node can only be normalized by the navigation that holds it; '
                    'use export_page() on its navigation first.'
                )
            page = self.export_page(page)

        return self._normalizer.normalize(page, page_options)

    # ------------------------------------------------------------------
    # Adding pages

    def add_page(self, page: Any) -> 'Navigation':
        """Add a page and its subpages to the top level.

        The page is normalized first. If a top-level page already has the
        same uid the call does nothing. Deeper pages with the same uid do not
        prevent the add.

        Args:
            page: Page or descriptor to add

        Returns:
            The navigation (fluent interface)

        Raises:
            NavigationValidationError: If the page is invalid
        """
        self._add_top_level_page(self.normalize_page(page))
        return self

    def add_pages(self, pages: Iterable[Any]) -> 'Navigation':
        """Add several pages with add_page, in order.

        Every page is normalized before the first one is attached, so an
        invalid page leaves the navigation unchanged.
        """
        for page in self._normalize_pages(pages):
            self._add_top_level_page(page)
        return self

    def set_pages(self, pages: Iterable[Any]) -> 'Navigation':
        """Replace every page with the given pages.

        The current pages are kept if any of the new pages is invalid.
        """
        normalized = self._normalize_pages(pages)
        self.remove_pages()
        for page in normalized:
            self._add_top_level_page(page)
        return self

    def _normalize_pages(self, pages: Iterable[Any]) -> List[Page]:
        if isinstance(pages, Navigation):
            pages = [pages.export_page(page) for page in pages.get_pages()]
        elif isinstance(pages, (str, bytes, Mapping)):
            raise NavigationValidationError(
                f"Invalid argument: pages must be a list, got {type(pages).__name__}"
            )
        return [self.normalize_page(page) for page in pages]

    def _add_top_level_page(self, page: Page) -> None:
        if self.get_child_by_uid(page.uid) is None:
            self._attach(page, ROOT_ID)
        else:
            logger.debug(f"Top-level page {page.uid} already exists, not adding '{page.label}'")

    def base_add_page(self, page: Any) -> 'Navigation':
        """Add a page to the top level without the uid check.

        Used to fill scratch navigations that must keep every contributed
        page in the order it was given.
        """
        if not isinstance(page, Page) or page.uid is None:
            page = self.normalize_page(page)
        self._attach(page, ROOT_ID)
        return self

    def add_page_to_container(self, page: Any, container: Container) -> Container:
        """Add a page under a container after normalizing it.

        For the root this is add_page. For any other container the page is
        only added if no page anywhere in the navigation has its uid.

        Args:
            page: Page or descriptor to add
            container: Target container

        Returns:
            The container
        """
        if container is None or container is self:
            return self.add_page(page)

        container_id = self._container_id(container)
        page = self.normalize_page(page)

        if self.get_page_by_uid(page.uid) is None:
            self._attach(page, container_id)
        else:
            logger.debug(f"Page {page.uid} already exists in the navigation, not adding '{page.label}'")

        return container

    def get_child_by_uid(self, uid: str, container: Container = None) -> Optional[PageNode]:
        """Return the direct child of a container with the given uid, or None."""
        for page in self.get_pages(container):
            if page.uid == uid:
                return page
        return None

    def get_page_by_uid(self, uid: str, container: Container = None) -> Optional[PageNode]:
        """Return the first descendant of a container with the given uid, or None.

        The search is pre-order: a page is checked before its subpages.
        """
        for page in self.iter_pages(container):
            if page.uid == uid:
                return page
        return None

    # ------------------------------------------------------------------
    # Filters

    def create_navigation_from_filter(self, filter_name: str = '') -> 'Navigation':
        """Create a navigation from the pages a filter currently provides.

        The main filter is seeded with the Browse Items and Browse
        Collections pages. Every page returned by the filter is marked as not
        deletable and added in the order the filter returned it.

        Args:
            filter_name: Name of the filter (defaults to the main navigation filter)

        Returns:
            A new navigation sharing this navigation's router and filters

        Raises:
            NavigationValidationError: If the filter returns invalid pages
            FilterError: If a filter callback fails
        """
        if not filter_name:
            filter_name = self.PUBLIC_NAVIGATION_MAIN_FILTER_NAME

        filter_nav = self.__class__(router=self.router, filters=self.filters)

        page_links: List[Any] = []
        if filter_name == self.PUBLIC_NAVIGATION_MAIN_FILTER_NAME:
            page_links = [
                Page(
                    label='Browse Items',
                    target=RouteTarget(controller='items', action='browse'),
                    visible=True,
                ),
                Page(
                    label='Browse Collections',
                    target=RouteTarget(controller='collections', action='browse'),
                    visible=True,
                ),
            ]

        page_links = self.filters.apply_filters(filter_name, page_links)

        if not isinstance(page_links, (list, tuple)):
            raise NavigationValidationError(
                f"Filter '{filter_name}' must return a list of pages, "
                f"got {type(page_links).__name__}"
            )

        for page_link in page_links:
            page = self.normalize_page(page_link, {'can_delete': False})
            filter_nav.base_add_page(page)

        logger.debug(f"Filter '{filter_name}' provided {filter_nav.count()} top-level page(s)")
        return filter_nav

    def add_pages_from_filter(self, filter_name: str = '') -> FilterSyncResult:
        """Reconcile the navigation with the pages a filter provides.

        Pages installed by the filter that it no longer provides are pruned,
        then the filter's pages are merged in.

        Args:
            filter_name: Name of the filter (defaults to the main navigation filter)

        Returns:
            FilterSyncResult listing added and pruned uids

        Raises:
            NavigationValidationError: If the filter returns invalid pages
            FilterError: If a filter callback fails
        """
        if not filter_name:
            filter_name = self.PUBLIC_NAVIGATION_MAIN_FILTER_NAME

        result = FilterSyncResult(filter_name=filter_name)
        filter_nav = self.create_navigation_from_filter(filter_name)

        expired_pages = self.get_expired_pages_from_nav(filter_nav)
        for page in expired_pages:
            if self.prune_page(page):
                result.pruned_uids.append(page.uid)

        existing_uids = {page.uid for page in self.iter_pages()}
        self.merge_navigation(filter_nav)
        for page in self.iter_pages():
            if page.uid not in existing_uids and page.uid not in result.added_uids:
                result.added_uids.append(page.uid)

        logger.info(
            f"Applied filter '{filter_name}': {len(result.added_uids)} page(s) added, "
            f"{len(result.pruned_uids)} page(s) pruned"
        )
        return result

    # ------------------------------------------------------------------
    # Merging

    def merge_page(self, page: Page, parent_container: Container = None) -> PageNode:
        """Merge a normalized page and its subpages into the navigation.

        A page whose uid is not in the navigation yet is appended to
        parent_container. A page whose uid exists is left as it is. Either
        way the subpages are then merged under the matching node.

        Args:
            page: A normalized page (uid set)
            parent_container: Suggested container for a new page. It must be
                the navigation or one of its pages.

        Returns:
            The node the page was merged into

        Raises:
            NavigationUsageError: If the page has no uid or the parent
                container is not part of the navigation
        """
        if not isinstance(page, Page) or not page.uid:
            raise NavigationUsageError('The page must be normalized and have a valid uid.')

        # Subpages are merged separately once the page has a node
        child_pages = list(page.pages)
        page = replace(page, pages=[])

        old_page = self.get_page_by_uid(page.uid)
        if old_page is None:
            if parent_container is not None and parent_container is not self \
                    and not self.has_page(parent_container, True):
                raise NavigationUsageError(
                    'The parent container must either be the navigation object '
                    'or a descendant subpage of the navigation object.'
                )

            container_id = self._container_id(parent_container)
            page.order = self._get_next_page_order_in_container(container_id)
            parent_page = self._attach(page, container_id)
            logger.debug(f"Merged new page {page.uid} at order {page.order}")
        else:
            parent_page = old_page

        for child_page in child_pages:
            self.merge_page(child_page, parent_page)

        return parent_page

    def merge_navigation(self, nav: 'Navigation') -> None:
        """Merge every top-level page of another navigation into this one."""
        for page in nav.get_pages():
            self.merge_page(nav.export_page(page))

    def _get_next_page_order_in_container(self, container_id: int) -> int:
        """Return the order that places a new page after every existing child.

        This is one more than the highest order among the children (a child
        without an order counts its position), or 0 for an empty container.
        """
        child_ids = self._child_ids(container_id)
        if not child_ids:
            return 0

        last_order = max(
            index if self._nodes[node_id].order is None else self._nodes[node_id].order
            for index, node_id in enumerate(child_ids)
        )
        return last_order + 1

    # ------------------------------------------------------------------
    # Expiry and pruning

    def get_other_pages(self, exclude_page_uids: Iterable[str]) -> List[PageNode]:
        """Return every page whose uid is not in exclude_page_uids (pre-order)."""
        excluded = set(exclude_page_uids)
        return [page for page in self.iter_pages() if page.uid not in excluded]

    def get_expired_pages_from_nav(self, exclude_nav: 'Navigation') -> List[PageNode]:
        """Return the expired pages of this navigation.

        Every page of exclude_nav is still wanted. Of the remaining pages only
        those installed by a filter (can_delete is False) expire; pages added
        by hand never do.
        """
        non_expired_page_uids = {page.uid for page in exclude_nav.iter_pages()}
        expired_pages = [
            page for page in self.get_other_pages(non_expired_page_uids)
            if not page.can_delete
        ]
        logger.debug(f"Found {len(expired_pages)} expired page(s)")
        return expired_pages

    def prune_pages(self, pages: Iterable[PageNode]) -> None:
        """Prune several pages. See prune_page."""
        for page in list(pages):
            self.prune_page(page)

    def prune_page(self, page: PageNode) -> bool:
        """Remove a page, moving its subpages up to its parent.

        Returns:
            True if the page was found and removed
        """
        removed = self.remove_page_recursive(page, None, True)
        if removed:
            logger.info(f"Pruned page '{page.label}' ({page.uid})")
        return removed

    def remove_page_recursive(
        self,
        page: PageNode,
        parent_container: Container = None,
        reattach: bool = False
    ) -> bool:
        """Remove a page from a container or any of its descendants.

        The page is matched by identity, not by uid. When reattach is True the
        subpages of the removed page are appended to the container it was
        removed from, each taking that container's next order. Otherwise the
        whole subtree is dropped.

        Args:
            page: The node to remove
            parent_container: Where to start searching (defaults to the root)
            reattach: Whether to keep the subpages of the removed page

        Returns:
            True if the page was removed anywhere under the container
        """
        container_id = self._container_id(parent_container)
        removed = False

        if self.has_page(page) and page.parent_id == container_id:
            child_pages = self.get_pages(page)
            self._detach(page)

            if reattach:
                for child_page in child_pages:
                    self._reattach_page(child_page, container_id)
                page.child_ids = []
                del self._nodes[page.node_id]
            else:
                self._drop_subtree(page)

            removed = True

        for sub_page in self.get_pages(container_id):
            removed = self.remove_page_recursive(page, sub_page, reattach) or removed

        return removed

    def _reattach_page(self, page: PageNode, container_id: int) -> None:
        """Move an orphaned page under a container.

        If the container already has a direct child with the same uid, the
        orphan's subpages are merged into that child and the orphan is dropped.
        """
        self._detach(page)

        sibling = self.get_child_by_uid(page.uid, container_id)
        if sibling is None:
            page.order = self._get_next_page_order_in_container(container_id)
            self._link(page, container_id)
            return

        orphan = self.export_page(page)
        self._drop_subtree(page)
        for sub_page in orphan.pages:
            self.merge_page(sub_page, sibling)
        logger.debug(f"Merged orphaned page {orphan.uid} into its existing sibling")

    # ------------------------------------------------------------------
    # Serialization and persistence

    def to_list(self) -> List[Dict[str, Any]]:
        """Export the navigation as a list of page dictionaries."""
        return [self._page_to_dict(page) for page in self.get_pages()]

    def to_json(self) -> str:
        return json.dumps(self.to_list())

    def save_as_option(self, option_name: str, store: OptionStore) -> None:
        """Save the navigation in an option store.

        Args:
            option_name: The name of the option
            store: The option store
        """
        store.set(option_name, self.to_json())
        logger.info(f"Saved navigation with {self.count()} top-level page(s) as option '{option_name}'")

    def load_as_option(self, option_name: str, store: OptionStore) -> 'Navigation':
        """Load the navigation from an option store.

        A missing, undecodable or empty value leaves the navigation as it is.

        Args:
            option_name: The name of the option
            store: The option store

        Raises:
            NavigationValidationError: If a stored page is invalid
        """
        value = store.get(option_name)
        if not value:
            logger.debug(f"No stored navigation for option '{option_name}'")
            return self

        try:
            nav_pages = json.loads(value)
        except (TypeError, ValueError) as e:
            logger.warning(f"Ignoring undecodable navigation in option '{option_name}': {e}")
            return self

        if not nav_pages or not isinstance(nav_pages, list):
            logger.warning(f"Ignoring stored navigation for option '{option_name}': not a list of pages")
            return self

        self.set_pages(nav_pages)
        logger.debug(f"Loaded navigation with {self.count()} top-level page(s) from option '{option_name}'")
        return self

    @classmethod
    def get_navigation_option_value_for_install(
        cls,
        option_name: str,
        filters: Optional[FilterRegistry] = None,
        router: Optional[Router] = None
    ) -> str:
        """Return the option value of a navigation at installation time.

        Args:
            option_name: The option name of a stored navigation
            filters: Filter registry whose contributors provide the pages
            router: Router used to resolve route hrefs

        Returns:
            The JSON value of the default navigation, or an empty string if
            the option is unknown or the navigation is empty
        """
        nav = cls(router=router, filters=filters)
        if option_name == cls.PUBLIC_NAVIGATION_MAIN_OPTION_NAME:
            nav.add_pages_from_filter(cls.PUBLIC_NAVIGATION_MAIN_FILTER_NAME)

        if nav.count():
            return nav.to_json()
        return ''

    def _page_to_dict(self, page: PageNode) -> Dict[str, Any]:
        page_dict: Dict[str, Any] = {
            'label': page.label,
            'type': page.kind.value,
            'visible': page.visible,
            'can_delete': page.can_delete,
            'order': page.order,
            'uid': page.uid,
        }

        if isinstance(page.target, UriTarget):
            page_dict['uri'] = page.target.uri
        else:
            page_dict['route'] = page.target.route
            page_dict['controller'] = page.target.controller
            page_dict['action'] = page.target.action
            page_dict['params'] = dict(page.target.params)

        for key, value in page.properties.items():
            page_dict.setdefault(key, value)

        page_dict['pages'] = [self._page_to_dict(child) for child in self.get_pages(page)]
        return page_dict

    # ------------------------------------------------------------------
    # Arena bookkeeping

    def _container_id(self, container: Container) -> int:
        if container is None or container is self or container == ROOT_ID:
            return ROOT_ID
        if isinstance(container, int) and not isinstance(container, bool) and container in self._nodes:
            return container
        self._require_node(container)
        return container.node_id

    def _require_node(self, page: Any) -> None:
        if not self.has_page(page):
            raise NavigationUsageError('The container must be this navigation or one of its pages.')

    def _child_ids(self, container_id: int) -> List[int]:
        if container_id == ROOT_ID:
            return self._root_child_ids
        return self._nodes[container_id].child_ids

    def _attach(self, page: Page, container_id: int) -> PageNode:
        node = PageNode(
            node_id=self._next_node_id,
            label=page.label,
            target=page.target,
            uid=page.uid,
            href=page.href if page.href is not None else page.uid,
            visible=page.visible,
            can_delete=page.can_delete,
            order=page.order,
            properties=dict(page.properties),
        )
        self._next_node_id += 1
        self._nodes[node.node_id] = node
        self._link(node, container_id)

        for sub_page in page.pages:
            self._attach(sub_page, node.node_id)

        return node

    def _link(self, node: PageNode, container_id: int) -> None:
        node.parent_id = container_id
        self._child_ids(container_id).append(node.node_id)

    def _detach(self, node: PageNode) -> None:
        if node.parent_id is not None:
            siblings = self._child_ids(node.parent_id)
            if node.node_id in siblings:
                siblings.remove(node.node_id)
        node.parent_id = None

    def _drop_subtree(self, node: PageNode) -> None:
        for child_id in list(node.child_ids):
            self._drop_subtree(self._nodes[child_id])
        node.child_ids = []
        node.parent_id = None
        self._nodes.pop(node.node_id, None)

    @staticmethod
    def _page_value(page: PageNode, field: str) -> Any:
        if field in ('route', 'controller', 'action', 'params') and isinstance(page.target, RouteTarget):
            return getattr(page.target, field)
        if field == 'uri' and isinstance(page.target, UriTarget):
            return page.target.uri
        if hasattr(page, field):
            return getattr(page, field)
        return page.properties.get(field)
