"""Keyword intent routing for the shopping assistant.

Inbound messages are matched against an ordered list of intents and the first
match produces the reply. Matching is case-insensitive substring matching on the
raw message: there is no tokenization, stemming or negation handling, so
"don't recommend anything" still resolves to the recommendation intent.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from src.personalization.behavior import BehaviorStore
from src.personalization.models import CartLine, Product
from src.personalization.scoring import RecommendationScorer

# Configure module logger
logger = logging.getLogger(__name__)

# First "$<ASCII digits>" in the message; later amounts are ignored
PRICE_PATTERN = re.compile(r"\$([0-9]+)")

RECOMMENDATION_COUNT = 3

FALLBACK_REPLY = (
    "I'm here to help you find the perfect products! You can ask me for "
    "recommendations, search for specific items, compare products, or get help "
    "with your cart."
)


@dataclass(frozen=True)
class RoutingContext:
    """Everything a reply may be computed from."""

    message: str
    catalog: Sequence[Product]
    behavior: BehaviorStore
    cart: Sequence[CartLine]

    @property
    def lowered(self) -> str:
        return self.message.lower()


@dataclass(frozen=True)
class Intent:
    """A named (predicate, handler) pair.

    Attributes:
        name: Identifier reported with the reply.
        matches: Predicate over the routing context.
        respond: Builds the reply text for a matched context.
    """

    name: str
    matches: Callable[[RoutingContext], bool]
    respond: Callable[[RoutingContext], str]


@dataclass(frozen=True)
class RoutedReply:
    intent: str
    text: str


def contains_any(*keywords: str) -> Callable[[RoutingContext], bool]:
    """Build a predicate matching messages that contain any keyword."""

    def predicate(context: RoutingContext) -> bool:
        lowered = context.lowered
        return any(keyword in lowered for keyword in keywords)

    return predicate


def extract_price(message: str) -> Optional[int]:
    """Return the first ``$<digits>`` amount in a message, if any."""
    match = PRICE_PATTERN.search(message)
    if match is None:
        return None
    return int(match.group(1))


class CategoryPriceIntent:
    """Lists products of one category at or under a dollar amount.

    Matches when the message names the category, says "under" or "<", and
    carries a parseable ``$<digits>`` amount. Messages without a parseable
    amount do not match, so routing continues with the next intent.
    """

    def __init__(self, category: str = "Electronics"):
        self.category = category
        self.name = f"{category.lower()}_price"

    def matches(self, context: RoutingContext) -> bool:
        lowered = context.lowered
        if self.category.lower() not in lowered:
            return False
        if "under" not in lowered and "<" not in lowered:
            return False
        if "$" not in lowered:
            return False
        return extract_price(context.message) is not None

    def respond(self, context: RoutingContext) -> str:
        max_price = extract_price(context.message)
        label = self.category.lower()
        matching = [
            p
            for p in context.catalog
            if p.category.lower() == label and p.price <= max_price
        ]

        if not matching:
            return (
                f"Sorry, I couldn't find any {label} under ${max_price}. "
                "Try increasing your budget or check our other categories."
            )

        product_list = "\n".join(
            f"• {p.name} - ${p.price:.2f} ({p.brand})" for p in matching
        )
        return (
            f"Here are {label} under ${max_price}:\n\n{product_list}\n\n"
            "Tap any product name to view details!"
        )

    def as_intent(self) -> Intent:
        return Intent(name=self.name, matches=self.matches, respond=self.respond)


def _recommendation_reply(scorer: RecommendationScorer) -> Callable[[RoutingContext], str]:
    def respond(context: RoutingContext) -> str:
        recommendations = scorer.recommend(
            context.catalog, context.behavior, RECOMMENDATION_COUNT
        )
        if recommendations:
            names = ", ".join(p.name for p in recommendations)
            return (
                f"Based on your preferences, I recommend: {names}. "
                "Would you like to see details for any of these?"
            )
        return (
            "I'd be happy to recommend products! Could you tell me what category "
            "you're interested in?"
        )

    return respond


def _search_reply(context: RoutingContext) -> str:
    # Only logged for future scoring; no search runs here
    context.behavior.record_search(context.message)
    return "I'll help you search for products. What are you looking for?"


def _cart_reply(context: RoutingContext) -> str:
    item_count = sum(line.quantity for line in context.cart)
    return (
        f"You have {item_count} items in your cart. Would you like to proceed to "
        "checkout or continue shopping?"
    )


def default_intents(scorer: Optional[RecommendationScorer] = None) -> List[Intent]:
    """Build the standard intent list in evaluation order."""
    scorer = scorer or RecommendationScorer()
    return [
        CategoryPriceIntent("Electronics").as_intent(),
        Intent(
            name="recommend",
            matches=contains_any("recommend", "suggest"),
            respond=_recommendation_reply(scorer),
        ),
        Intent(
            name="search",
            matches=contains_any("search", "find"),
            respond=_search_reply,
        ),
        Intent(
            name="budget",
            matches=contains_any("price", "budget"),
            respond=lambda context: (
                "I can help you find products within your budget. "
                "What's your price range?"
            ),
        ),
        Intent(
            name="compare",
            matches=contains_any("compare"),
            respond=lambda context: (
                "I can help you compare products. Which items would you like to compare?"
            ),
        ),
        Intent(
            name="cart",
            matches=contains_any("cart", "checkout"),
            respond=_cart_reply,
        ),
    ]


class IntentRouter:
    """Routes messages through an ordered intent list; first match wins.

    The order of ``intents`` is the routing policy. When nothing matches the
    fallback reply describing the assistant's capabilities is returned.
    """

    FALLBACK_INTENT = "fallback"

    def __init__(self, intents: Optional[Sequence[Intent]] = None):
        self.intents: List[Intent] = list(intents) if intents is not None else default_intents()

    @classmethod
    def default(cls, scorer: Optional[RecommendationScorer] = None) -> "IntentRouter":
        return cls(default_intents(scorer))

    def resolve(
        self,
        message: str,
        catalog: Sequence[Product],
        behavior: BehaviorStore,
        cart: Sequence[CartLine] = (),
    ) -> RoutedReply:
        """Classify a message and build its reply.

        Args:
            message: Raw, non-empty message text.
            catalog: Current catalog snapshot.
            behavior: Behavior store; the search intent writes to it.
            cart: Cart snapshot used by the cart intent.

        Returns:
            RoutedReply with the matched intent name and reply text.
        """
        context = RoutingContext(
            message=message,
            catalog=list(catalog),
            behavior=behavior,
            cart=list(cart),
        )

        for intent in self.intents:
            if intent.matches(context):
                logger.info("Message routed", extra={"intent": intent.name})
                return RoutedReply(intent=intent.name, text=intent.respond(context))

        logger.info("Message routed", extra={"intent": self.FALLBACK_INTENT})
        return RoutedReply(intent=self.FALLBACK_INTENT, text=FALLBACK_REPLY)

    def route(
        self,
        message: str,
        catalog: Sequence[Product],
        behavior: BehaviorStore,
        cart: Sequence[CartLine] = (),
    ) -> str:
        """Return only the reply text for a message."""
        return self.resolve(message, catalog, behavior, cart).text
