"""Exception types raised by the Phew Reader core."""

from __future__ import annotations


class PhewReaderError(Exception):
    """Base exception for Phew Reader."""

    def __init__(self, detail: str = "An error occurred") -> None:
        self.detail = detail
        super().__init__(detail)


class StoreNotInitializedError(PhewReaderError):
    """Raised when the store is used before init() completed."""

    def __init__(self, detail: str = "Database not initialized") -> None:
        super().__init__(detail)


class MissingRecordError(PhewReaderError):
    """Raised when a seeded singleton row (subscription, settings) is absent."""

    def __init__(self, table: str) -> None:
        self.table = table
        super().__init__(f"Required record missing from {table}")


class SubscriptionRequiredError(PhewReaderError):
    """Raised when a feature is requested without the entitlement for it."""

    MESSAGES = {
        "ai": (
            "AI features require a paid subscription. Upgrade to Basic ($5/month) "
            "or higher to access AI explanations and summaries."
        ),
        "natural_tts": (
            "Natural TTS requires a paid subscription. "
            "Upgrade to Basic ($5/month) or higher."
        ),
    }

    def __init__(self, feature: str) -> None:
        self.feature = feature
        super().__init__(
            self.MESSAGES.get(feature, f"{feature} requires a paid subscription")
        )
