"""Recommendation and behavior tracking endpoints.

This module exposes the engine's ranked recommendations and accepts the
behavior events (views, dwell time, searches, purchases) that feed them.
"""

import logging
import time
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel, Field

from src.api.deps import get_engine, get_metrics
from src.api.metrics import MetricsService
from src.personalization.engine import (
    DwellRecorded,
    EngineFacade,
    ProductViewed,
    PurchaseCompleted,
    SearchPerformed,
    TrackEvent,
)

# Configure module logger
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(
    prefix="/recommend",
    tags=["recommendations"],
)


class ProductOut(BaseModel):
    id: str
    name: str
    category: str
    brand: str
    price: float
    rating: float
    reviews: int
    in_stock: bool


class RecommendationResponse(BaseModel):
    """Response model for recommendation requests.

    Attributes:
        products: Recommended products, best first.
        scores: Per-product score breakdown, only when explain=true.
    """

    products: List[ProductOut] = Field(..., description="Recommended products, best first")
    scores: Optional[List[Dict[str, Any]]] = Field(
        default=None, description="Score breakdown per product"
    )


class EventRequest(BaseModel):
    """A behavior event reported by the app."""

    type: Literal["view", "dwell", "search", "purchase"]
    product_id: Optional[str] = None
    millis: int = 0
    query: Optional[str] = None


def to_event(request: EventRequest) -> TrackEvent:
    """Convert an API event payload into an engine event.

    Raises:
        ValueError: If a field required by the event type is missing.
    """
    if request.type == "search":
        if request.query is None:
            raise ValueError("search events require 'query'")
        return SearchPerformed(request.query)

    if request.product_id is None:
        raise ValueError(f"{request.type} events require 'product_id'")
    if request.type == "view":
        return ProductViewed(request.product_id)
    if request.type == "dwell":
        return DwellRecorded(request.product_id, request.millis)
    return PurchaseCompleted(request.product_id)


@router.get("", response_model=RecommendationResponse)
def get_recommendations(
    request: Request,
    limit: Optional[int] = Query(default=None, ge=0, le=100),
    explain: bool = False,
    engine: EngineFacade = Depends(get_engine),
    metrics: MetricsService = Depends(get_metrics),
) -> RecommendationResponse:
    """Get product recommendations for the current shopper.

    Args:
        limit: Maximum number of products to return. Defaults to the
            configured recommendation_limit.
        explain: Include the score breakdown of the returned products.

    Returns:
        RecommendationResponse with the ranked products.

    Example:
        GET /recommend?limit=3&explain=true
    """
    start_time = time.time()
    if limit is None:
        limit = request.app.state.settings.recommendation_limit
    products = engine.recommend(limit)

    scores = None
    if explain:
        breakdown = engine.explain().head(len(products))
        scores = breakdown.to_dict(orient="records")

    metrics.record_recommendation((time.time() - start_time) * 1000)
    logger.info(f"Returned {len(products)} recommendations, limit={limit}")

    return RecommendationResponse(
        products=[ProductOut(**p.to_dict()) for p in products],
        scores=scores,
    )


@router.post("/events", status_code=status.HTTP_202_ACCEPTED)
def track_event(
    request: EventRequest,
    engine: EngineFacade = Depends(get_engine),
) -> Dict[str, str]:
    """Record one behavior event."""
    try:
        event = to_event(request)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    engine.track(event)
    return {"status": "accepted"}
