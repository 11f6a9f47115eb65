"""Shopping pattern analysis.

Summarizes what the shopper has shown interest in: favorite categories and
brands, the price range of products they looked at or bought, and how many
purchases they made.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import pandas as pd

from src.personalization.models import Product
from src.personalization.scoring import DWELL_DIVISOR, VIEW_WEIGHT, Behavior, as_snapshot

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 2


@dataclass(frozen=True)
class ShoppingPatterns:
    favorite_categories: List[str] = field(default_factory=list)
    preferred_brands: List[str] = field(default_factory=list)
    spending_range: Optional[str] = None
    purchase_count: int = 0


def analyze_shopping_patterns(
    catalog: Sequence[Product],
    behavior: Behavior,
    top_n: int = DEFAULT_TOP_N,
) -> ShoppingPatterns:
    """Summarize the shopper's interests against the catalog.

    Interest in a product is ``views * 2 + dwell seconds`` (the behavioral part
    of the recommendation score). Categories and brands are ranked by summed
    interest, ties broken by first appearance in the catalog. Purchased
    products count toward the spending range even when never viewed.

    Args:
        catalog: Current catalog snapshot.
        behavior: Behavior store or snapshot.
        top_n: Number of categories and brands to report.

    Returns:
        ShoppingPatterns for the shopper. Everything is empty for a fresh
        session.
    """
    snapshot = as_snapshot(behavior)
    purchases = set(snapshot.purchases)

    if not catalog:
        return ShoppingPatterns(purchase_count=len(snapshot.purchases))

    df = pd.DataFrame(
        {
            "category": [p.category for p in catalog],
            "brand": [p.brand for p in catalog],
            "price": [p.price for p in catalog],
            "interest": [
                snapshot.views_for(p.id) * VIEW_WEIGHT + snapshot.dwell_for(p.id) / DWELL_DIVISOR
                for p in catalog
            ],
            "purchased": [p.id in purchases for p in catalog],
        }
    )

    interested = df[df["interest"] > 0]
    favorite_categories = _rank(interested, "category", top_n)
    preferred_brands = _rank(interested, "brand", top_n)

    engaged = df[(df["interest"] > 0) | df["purchased"]]
    spending_range = None
    if not engaged.empty:
        spending_range = f"${engaged['price'].min():.0f}-${engaged['price'].max():.0f}"

    logger.debug(
        "Analyzed shopping patterns",
        extra={"num_engaged": len(engaged), "num_purchases": len(snapshot.purchases)},
    )

    return ShoppingPatterns(
        favorite_categories=favorite_categories,
        preferred_brands=preferred_brands,
        spending_range=spending_range,
        purchase_count=len(snapshot.purchases),
    )


def _rank(df: pd.DataFrame, column: str, top_n: int) -> List[str]:
    if df.empty:
        return []
    totals = df.groupby(column, sort=False)["interest"].sum()
    ranked = totals.sort_values(ascending=False, kind="stable")
    return [str(label) for label in ranked.index[:top_n]]
