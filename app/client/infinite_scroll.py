"""
Incremental paging of the game catalog
"""
from dataclasses import dataclass, field
import logging
import threading
from typing import Any, Dict, List, Optional

from client.api_client import ApiError
from constants import DEFAULT_PAGE_SIZE

logger = logging.getLogger("main")


@dataclass
class InfiniteListState:
    items: List[Any] = field(default_factory=list)
    page: int = 1
    has_more: bool = False
    is_loading: bool = False
    error: Optional[Exception] = None


class InfiniteList:
    """
    Appends successive pages for one set of filters.

    `fetch_page(page, filters)` returns `(items, has_more)`. A failed load
    stops paging for the current filters; reset() starts over. Errors other
    than ApiError are recorded the same way and then re-raised. Results
    that arrive after reset() or close() are discarded.
    """

    def __init__(self, fetch_page, filters=None, initial_items=None):
        self.fetch_page = fetch_page
        self.filters = dict(filters or {})
        initial_items = list(initial_items or [])
        self.state = InfiniteListState(items=initial_items, has_more=bool(initial_items))
        self._generation = 0
        self._closed = False
        self._lock = threading.Lock()

    def load_more(self):
        """Fetch the next page. Returns True when items were appended."""
        with self._lock:
            if self._closed or self.state.is_loading or not self.state.has_more:
                return False
            self.state.is_loading = True
            generation = self._generation
            next_page = self.state.page + 1
            filters = dict(self.filters)

        try:
            items, has_more = self.fetch_page(next_page, filters)
            items = list(items)
        except Exception as e:
            with self._lock:
                if generation == self._generation:
                    logger.warning(f"Loading page {next_page} failed: {e}")
                    self.state.error = e
                    self.state.has_more = False
                    self.state.is_loading = False
            if not isinstance(e, ApiError):
                raise
            return False

        with self._lock:
            if generation != self._generation:
                logger.debug(f"Discarding stale page {next_page}")
                return False
            self.state.items.extend(items)
            self.state.page = next_page
            self.state.has_more = bool(has_more)
            self.state.is_loading = False
            self.state.error = None
        return True

    def reset(self, filters=None, initial_items=None):
        """Start over for new filters with a fresh first page"""
        initial_items = list(initial_items or [])
        with self._lock:
            self._generation += 1
            self.filters = dict(filters or {})
            self.state = InfiniteListState(items=initial_items, has_more=bool(initial_items))

    def close(self):
        with self._lock:
            self._generation += 1
            self._closed = True
            self.state.is_loading = False


def catalog_fetcher(api, limit=DEFAULT_PAGE_SIZE):
    """fetch_page callable for InfiniteList backed by ApiClient.get_games"""

    def fetch_page(page, filters: Dict[str, Any]):
        data = api.get_games(
            page=page, limit=limit, search=filters.get("search"), categories=filters.get("categories")
        )
        return data.get("games", []), data.get("pagination", {}).get("hasMore", False)

    return fetch_page
