"""Engine facade used by the surrounding application.

Screens call a single object: ``track`` for behavior events, ``recommend`` for
ranked products, ``send`` for assistant replies, plus ``history`` and ``clear``
for the conversation. Collaborators are passed in explicitly so each engine owns
its own state.
"""

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd

from src.personalization.behavior import BehaviorStore
from src.personalization.conversation import ConversationLog
from src.personalization.exceptions import (
    InvalidMessageError,
    PersistenceError,
    UnsupportedEventError,
)
from src.personalization.insights import ShoppingPatterns, analyze_shopping_patterns
from src.personalization.intents import IntentRouter, RoutedReply
from src.personalization.models import CartLine, Message, Product, Role, ScanResult
from src.personalization.recognition import MockRecognizer
from src.personalization.scoring import DEFAULT_LIMIT, RecommendationScorer
from src.personalization.storage import InMemoryStore, KeyValueStore

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_MIN_SCAN_CONFIDENCE = 0.5

CatalogProvider = Callable[[], Sequence[Product]]
CartProvider = Callable[[], Union[Sequence[CartLine], Awaitable[Sequence[CartLine]]]]


@dataclass(frozen=True)
class ProductViewed:
    product_id: str


@dataclass(frozen=True)
class DwellRecorded:
    product_id: str
    millis: int


@dataclass(frozen=True)
class SearchPerformed:
    query: str


@dataclass(frozen=True)
class PurchaseCompleted:
    product_id: str


@dataclass(frozen=True)
class ProductScanned:
    result: ScanResult


TrackEvent = Union[ProductViewed, DwellRecorded, SearchPerformed, PurchaseCompleted, ProductScanned]


def _empty_cart() -> Sequence[CartLine]:
    return ()


class EngineFacade:
    """Single entry point to the personalization engine.

    Args:
        catalog: Returns the current catalog snapshot when called.
        behavior: Behavior store owned by this engine.
        store: Key-value store for the conversation history.
        cart: Returns the cart snapshot; may be sync or async.
        scorer: Recommendation scorer.
        router: Intent router. Defaults to the standard intents sharing
            ``scorer``.
        recognizer: Optional product recognizer used by ``scan``.
        min_scan_confidence: Scans below this confidence are not tracked.
        clock: Source of message timestamps.
    """

    def __init__(
        self,
        catalog: CatalogProvider,
        behavior: Optional[BehaviorStore] = None,
        store: Optional[KeyValueStore] = None,
        cart: CartProvider = _empty_cart,
        scorer: Optional[RecommendationScorer] = None,
        router: Optional[IntentRouter] = None,
        recognizer: Optional[MockRecognizer] = None,
        min_scan_confidence: float = DEFAULT_MIN_SCAN_CONFIDENCE,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.catalog = catalog
        self.behavior = behavior or BehaviorStore()
        self.cart = cart
        self.scorer = scorer or RecommendationScorer()
        self.router = router or IntentRouter.default(self.scorer)
        self.recognizer = recognizer
        self.min_scan_confidence = min_scan_confidence
        self.conversation = ConversationLog(store or InMemoryStore(), clock=clock)
        self._lock = asyncio.Lock()

        self._handlers: Dict[type, Callable] = {
            ProductViewed: lambda e: self.behavior.record_view(e.product_id),
            DwellRecorded: lambda e: self.behavior.record_dwell(e.product_id, e.millis),
            SearchPerformed: lambda e: self.behavior.record_search(e.query),
            PurchaseCompleted: lambda e: self.behavior.record_purchase(e.product_id),
            ProductScanned: self._track_scan,
        }

    # Behavior

    def track(self, event: TrackEvent) -> None:
        """Apply one behavior event to the behavior store.

        Raises:
            UnsupportedEventError: If the event type has no handler.
        """
        handler = self._handlers.get(type(event))
        if handler is None:
            raise UnsupportedEventError(event)
        handler(event)

    def _track_scan(self, event: ProductScanned) -> None:
        result = event.result
        if result.product_id is None:
            return
        if result.confidence < self.min_scan_confidence:
            logger.debug(
                f"Ignoring scan of {result.product_id} with confidence {result.confidence:.2f}"
            )
            return
        self.behavior.record_view(result.product_id)

    async def scan(self, image_data: str) -> Optional[ScanResult]:
        """Recognize a product from an image and track it as a view.

        Raises:
            RuntimeError: If the engine was built without a recognizer.
        """
        if self.recognizer is None:
            raise RuntimeError("No recognizer configured")

        result = await self.recognizer.recognize(image_data)
        if result is not None:
            self.track(ProductScanned(result))
        return result

    # Recommendations

    def recommend(self, limit: int = DEFAULT_LIMIT) -> List[Product]:
        return self.scorer.recommend(self.catalog(), self.behavior, limit)

    def explain(self) -> pd.DataFrame:
        return self.scorer.explain(self.catalog(), self.behavior)

    def insights(self) -> ShoppingPatterns:
        return analyze_shopping_patterns(self.catalog(), self.behavior)

    # Conversation

    async def _cart_snapshot(self) -> Sequence[CartLine]:
        cart = self.cart()
        if inspect.isawaitable(cart):
            cart = await cart
        return list(cart)

    async def respond(self, text: str) -> RoutedReply:
        """Handle a chat message and report which intent answered it.

        Routes the message, then appends the user message and the reply together
        and persists the whole conversation once. If the cart provider or routing
        fails, the conversation is left unchanged.

        Raises:
            InvalidMessageError: If ``text`` is empty or whitespace only.
            PersistenceError: If the history write fails. Both messages remain
                in memory and ``details["reply"]`` carries the reply text.
        """
        if not text or not text.strip():
            raise InvalidMessageError(text)

        async with self._lock:
            start_time = time.time()
            cart = await self._cart_snapshot()
            reply = self.router.resolve(text, self.catalog(), self.behavior, cart)

            self.conversation.append(Role.USER, text)
            self.conversation.append(Role.ASSISTANT, reply.text)

            try:
                await self.conversation.flush()
            except PersistenceError as e:
                logger.error(
                    "Failed to persist conversation",
                    extra={"intent": reply.intent, "error": str(e)},
                )
                e.details["reply"] = reply.text
                e.details["intent"] = reply.intent
                raise

            logger.info(
                "Message handled",
                extra={
                    "intent": reply.intent,
                    "history_size": len(self.conversation),
                    "duration_ms": round((time.time() - start_time) * 1000, 2),
                },
            )
            return reply

    async def send(self, text: str) -> str:
        """Handle a chat message and return the reply text."""
        reply = await self.respond(text)
        return reply.text

    def history(self) -> Tuple[Message, ...]:
        return self.conversation.messages

    async def load(self) -> List[Message]:
        """Restore the conversation from the store."""
        return await self.conversation.load()

    async def clear(self) -> None:
        """Empty the conversation and persist the empty state."""
        async with self._lock:
            await self.conversation.clear()
