"""Text-to-speech adapter: entitlement checks and the "is speaking" state."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, Optional

from phewreader.services.subscription import require_voice

if TYPE_CHECKING:
    from phewreader.services.subscription import SubscriptionService

log = logging.getLogger(__name__)


class SpeechEngine(ABC):
    """Platform speech backend."""

    @abstractmethod
    def speak(self, text: str, natural: bool, on_done: Callable[[], None]) -> None:
        """Start speaking ``text``; call ``on_done`` when the utterance ends."""

    @abstractmethod
    def stop(self) -> None: ...

    def pause(self) -> None:
        pass

    def resume(self) -> None:
        pass


class SpeechService:
    def __init__(
        self, engine: Optional[SpeechEngine], subscriptions: "SubscriptionService"
    ) -> None:
        self._engine = engine
        self._subscriptions = subscriptions
        self._speaking = False

    @property
    def is_speaking(self) -> bool:
        return self._speaking

    def _require_engine(self) -> SpeechEngine:
        if self._engine is None:
            raise RuntimeError("No speech engine configured")
        return self._engine

    def speak(self, text: str, use_natural_voice: bool = False) -> None:
        """Speak ``text``. Natural voice without entitlement raises SubscriptionRequiredError."""
        require_voice(self._subscriptions.current(), use_natural_voice)
        engine = self._require_engine()
        if self._speaking:
            self.stop()

        self._speaking = True
        try:
            engine.speak(text, use_natural_voice, self._on_done)
        except Exception:
            self._speaking = False
            raise

    def _on_done(self) -> None:
        self._speaking = False

    def stop(self) -> None:
        self._require_engine().stop()
        self._speaking = False

    def pause(self) -> None:
        self._require_engine().pause()

    def resume(self) -> None:
        self._require_engine().resume()
