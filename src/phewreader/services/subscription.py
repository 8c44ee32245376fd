"""Subscription tiers and the entitlement checks gated features rely on."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, Optional

from phewreader.errors import SubscriptionRequiredError
from phewreader.library.encoding import days_from_now_iso
from phewreader.library.models import FREE_FEATURES, UserSubscription

if TYPE_CHECKING:
    from phewreader.explore.recommendations import RecommendedBook
    from phewreader.library.database import Database

log = logging.getLogger(__name__)

Feature = Literal["ai", "natural_tts", "free_books"]

SUBSCRIPTION_DAYS = 30


@dataclass(frozen=True)
class SubscriptionTier:
    id: str
    name: str
    price: float  # USD per month
    features: tuple[str, ...]
    books_per_month: int
    has_ai: bool
    has_natural_tts: bool
    color: str


TIERS: tuple[SubscriptionTier, ...] = (
    SubscriptionTier(
        id="free",
        name="Free",
        price=0,
        features=tuple(FREE_FEATURES),
        books_per_month=0,
        has_ai=False,
        has_natural_tts=False,
        color="#6B7280",
    ),
    SubscriptionTier(
        id="basic",
        name="Basic",
        price=5,
        features=("Everything in Free", "AI explanations", "1 free book/month", "Natural TTS"),
        books_per_month=1,
        has_ai=True,
        has_natural_tts=True,
        color="#3B82F6",
    ),
    SubscriptionTier(
        id="premium",
        name="Premium",
        price=8,
        features=(
            "Everything in Basic",
            "2 free books/month",
            "Priority AI responses",
            "Advanced search",
        ),
        books_per_month=2,
        has_ai=True,
        has_natural_tts=True,
        color="#8B5CF6",
    ),
    SubscriptionTier(
        id="pro",
        name="Pro",
        price=10,
        features=(
            "Everything in Premium",
            "5 free books/month",
            "Unlimited AI chat",
            "Early access features",
        ),
        books_per_month=5,
        has_ai=True,
        has_natural_tts=True,
        color="#F59E0B",
    ),
)


def get_tier(tier_id: str) -> Optional[SubscriptionTier]:
    return next((t for t in TIERS if t.id == tier_id), None)


def can_access_feature(tier_id: str, feature: Feature) -> bool:
    tier = get_tier(tier_id)
    if tier is None:
        return False
    if feature == "ai":
        return tier.has_ai
    if feature == "natural_tts":
        return tier.has_natural_tts
    if feature == "free_books":
        return tier.books_per_month > 0
    return False


def require_ai(subscription: UserSubscription) -> None:
    if not subscription.has_ai:
        raise SubscriptionRequiredError("ai")


def require_voice(subscription: UserSubscription, natural: bool) -> None:
    """Robotic voice is always allowed; natural voice needs the entitlement."""
    if natural and not subscription.has_natural_tts:
        raise SubscriptionRequiredError("natural_tts")


def can_get_free(subscription: UserSubscription, book: "RecommendedBook") -> bool:
    return book.is_available_in_archive and subscription.books_per_month > 0


class SubscriptionService:
    """Reads and replaces the singleton subscription record."""

    def __init__(self, db: "Database") -> None:
        self._db = db

    def current(self) -> UserSubscription:
        return self._db.get_subscription()

    def upgrade(self, tier_id: str) -> UserSubscription:
        tier = get_tier(tier_id)
        if tier is None or tier.price <= 0:
            raise ValueError(f"Cannot upgrade to tier: {tier_id!r}")
        log.info("Upgrading subscription to %s", tier.id)
        return self._apply(tier, expires_at=days_from_now_iso(SUBSCRIPTION_DAYS))

    def cancel(self) -> UserSubscription:
        log.info("Cancelling subscription")
        return self._apply(TIERS[0], expires_at=None)

    def _apply(self, tier: SubscriptionTier, expires_at: Optional[str]) -> UserSubscription:
        return self._db.update_subscription(
            tier=tier.id,
            price=tier.price,
            features=list(tier.features),
            books_per_month=tier.books_per_month,
            has_ai=tier.has_ai,
            has_natural_tts=tier.has_natural_tts,
            expires_at=expires_at,
        )
