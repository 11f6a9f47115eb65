"""Shopper behavior tracking.

Keeps per-product view counts and dwell time, a bounded log of recent search
queries, and the list of purchased products. Scoring reads an immutable
snapshot of this state.
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Tuple

# Configure module logger
logger = logging.getLogger(__name__)

# Oldest searches are evicted once the log grows past this size
MAX_SEARCH_HISTORY = 50


@dataclass(frozen=True)
class BehaviorSnapshot:
    """Point-in-time read of every behavior signal.

    Attributes:
        views: Product id to view count.
        dwell_millis: Product id to accumulated dwell time in milliseconds.
        searches: Lower-cased queries, oldest first.
        purchases: Purchased product ids, in purchase order.
    """

    views: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    dwell_millis: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    searches: Tuple[str, ...] = ()
    purchases: Tuple[str, ...] = ()

    def views_for(self, product_id: str) -> int:
        return self.views.get(product_id, 0)

    def dwell_for(self, product_id: str) -> int:
        return self.dwell_millis.get(product_id, 0)

    @property
    def is_empty(self) -> bool:
        return not (self.views or self.dwell_millis or self.searches or self.purchases)


class BehaviorStore:
    """Mutable store of the current shopper's signals.

    Unknown product ids are accepted; the store never validates against the
    catalog. Counters only grow until ``clear`` is called.
    """

    def __init__(self, max_searches: int = MAX_SEARCH_HISTORY):
        self.max_searches = max_searches
        self._lock = threading.Lock()
        self._views: Dict[str, int] = {}
        self._dwell: Dict[str, int] = {}
        self._searches: deque = deque(maxlen=max_searches)
        self._purchases: list = []

    def record_view(self, product_id: str) -> None:
        """Increment the view count of a product by one."""
        with self._lock:
            self._views[product_id] = self._views.get(product_id, 0) + 1
            count = self._views[product_id]
        logger.debug(f"Recorded view of product {product_id} (views={count})")

    def record_dwell(self, product_id: str, millis: int) -> None:
        """Add dwell time for a product.

        Negative durations are ignored rather than rejected.

        Args:
            product_id: Product the shopper looked at.
            millis: Time spent on the product, in milliseconds.
        """
        if millis < 0:
            logger.debug(f"Ignoring negative dwell of {millis}ms for product {product_id}")
            return

        with self._lock:
            self._dwell[product_id] = self._dwell.get(product_id, 0) + int(millis)

    def record_search(self, query: str) -> None:
        """Append a lower-cased query, evicting the oldest past the limit."""
        with self._lock:
            self._searches.append(query.lower())
        logger.debug(f"Recorded search '{query.lower()}'")

    def record_purchase(self, product_id: str) -> None:
        with self._lock:
            self._purchases.append(product_id)

    def snapshot(self) -> BehaviorSnapshot:
        """Return an immutable, internally consistent copy of all signals."""
        with self._lock:
            return BehaviorSnapshot(
                views=MappingProxyType(dict(self._views)),
                dwell_millis=MappingProxyType(dict(self._dwell)),
                searches=tuple(self._searches),
                purchases=tuple(self._purchases),
            )

    def clear(self) -> None:
        """Reset every signal."""
        with self._lock:
            self._views.clear()
            self._dwell.clear()
            self._searches.clear()
            self._purchases.clear()
        logger.info("Cleared behavior store")
