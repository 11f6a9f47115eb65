"""Behavior-based recommendation scoring.

Ranks catalog products with an additive, explainable score built from the
shopper's views, dwell time and searches plus each product's rating and review
count. Scores are only meaningful as a ranking; no normalization is applied.
"""

import logging
from typing import List, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from src.personalization.behavior import BehaviorSnapshot, BehaviorStore
from src.personalization.models import Product

# Configure module logger
logger = logging.getLogger(__name__)

# Score weights
VIEW_WEIGHT = 2
DWELL_DIVISOR = 1000  # milliseconds to seconds
SEARCH_MATCH_BONUS = 5
RATING_WEIGHT = 2
DEFAULT_LIMIT = 5

Behavior = Union[BehaviorStore, BehaviorSnapshot]


def as_snapshot(behavior: Behavior) -> BehaviorSnapshot:
    if isinstance(behavior, BehaviorStore):
        return behavior.snapshot()
    return behavior


def matches_search(product: Product, searches: Sequence[str]) -> bool:
    """Check whether any search term is a substring of the product's text.

    The name, category and each tag are compared lower-cased.
    """
    if not searches:
        return False

    fields = [product.name.lower(), product.category.lower()]
    fields.extend(tag.lower() for tag in product.tags)
    return any(term in text for term in searches for text in fields)


class RecommendationScorer:
    """Scores and ranks catalog products for the current shopper."""

    def _components(
        self,
        catalog: Sequence[Product],
        snapshot: BehaviorSnapshot,
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """Compute the per-product score terms in catalog order.

        Returns:
            A tuple of arrays (view term, dwell term, search term, quality term,
            total score).
        """
        views = np.array([snapshot.views_for(p.id) for p in catalog], dtype=np.float64)
        dwell = np.array([snapshot.dwell_for(p.id) for p in catalog], dtype=np.float64)
        search_hit = np.array(
            [matches_search(p, snapshot.searches) for p in catalog], dtype=bool
        )
        rating = np.array([p.rating for p in catalog], dtype=np.float64)
        reviews = np.array([p.reviews for p in catalog], dtype=np.float64)

        view_term = views * VIEW_WEIGHT
        dwell_term = dwell / DWELL_DIVISOR
        search_term = np.where(search_hit, float(SEARCH_MATCH_BONUS), 0.0)
        rating_term = rating * RATING_WEIGHT
        review_term = np.log(reviews + 1)

        # Same term order as the documented formula
        total = view_term + dwell_term + search_term + rating_term + review_term
        return view_term, dwell_term, search_term, rating_term + review_term, total

    def _ranking(self, total: np.ndarray) -> np.ndarray:
        # Stable sort keeps catalog order between equal scores
        return np.argsort(-total, kind="stable")

    def score(self, catalog: Sequence[Product], behavior: Behavior) -> List[Tuple[Product, float]]:
        """Score every catalog product.

        Args:
            catalog: Current catalog snapshot.
            behavior: Behavior store or snapshot to read signals from.

        Returns:
            (product, score) pairs sorted by descending score. Ties keep their
            catalog order.
        """
        catalog = list(catalog)
        if not catalog:
            return []

        snapshot = as_snapshot(behavior)
        *_, total = self._components(catalog, snapshot)
        order = self._ranking(total)
        return [(catalog[int(idx)], float(total[idx])) for idx in order]

    def recommend(
        self,
        catalog: Sequence[Product],
        behavior: Behavior,
        limit: int = DEFAULT_LIMIT,
    ) -> List[Product]:
        """Return the top ``limit`` products for the shopper."""
        if limit <= 0:
            return []

        scored = self.score(catalog, behavior)
        recommendations = [product for product, _ in scored[:limit]]

        logger.debug(
            "Computed recommendations",
            extra={
                "num_candidates": len(scored),
                "num_recommendations": len(recommendations),
                "limit": limit,
            },
        )
        return recommendations

    def explain(self, catalog: Sequence[Product], behavior: Behavior) -> pd.DataFrame:
        """Break every product's score down into its terms.

        Returns:
            DataFrame with columns product_id, views, dwell, search, quality and
            score, ordered like ``score``.
        """
        columns = ["product_id", "views", "dwell", "search", "quality", "score"]
        catalog = list(catalog)
        if not catalog:
            return pd.DataFrame(columns=columns)

        snapshot = as_snapshot(behavior)
        view_term, dwell_term, search_term, quality, total = self._components(catalog, snapshot)
        order = self._ranking(total)

        breakdown = pd.DataFrame(
            {
                "product_id": [p.id for p in catalog],
                "views": view_term,
                "dwell": dwell_term,
                "search": search_term,
                "quality": quality,
                "score": total,
            },
            columns=columns,
        )
        return breakdown.iloc[order].reset_index(drop=True)
