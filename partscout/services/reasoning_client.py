"""Rate-limit-aware wrapper around the reasoning service."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from partscout.models.parts import ChatMessage
from partscout.services.throttle import RequestThrottle

if TYPE_CHECKING:
    from partscout.agents.base import ReasoningService

logger = logging.getLogger(__name__)


class ReasoningServiceError(RuntimeError):
    """Raised by a reasoning service for non-retryable failures."""


class RateLimited(ReasoningServiceError):
    """Raised by a reasoning service when the provider throttles a call."""

    def __init__(self, message: str = "Rate limited", retry_after_seconds: float | None = None):
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


class ReasoningUnavailable(RuntimeError):
    """Raised when a reasoning call cannot be completed."""


class ReasoningClient:
    """Bounded-retry client shared by every pipeline stage."""

    def __init__(
        self,
        service: ReasoningService,
        throttle: RequestThrottle | None = None,
        max_attempts: int = 3,
        json_mode: bool = True,
    ) -> None:
        self._service = service
        self.throttle = throttle or RequestThrottle()
        self.max_attempts = max(1, max_attempts)
        self.json_mode = json_mode

    async def complete(self, prompt: str, system_prompt: str | None = None) -> str:
        """Run one reasoning call with rate-limit retries.

        Args:
            prompt: User prompt.
            system_prompt: Optional system prompt.

        Returns:
            Raw response text.

        Raises:
            ReasoningUnavailable: On any non-rate-limit error or once attempts run out.
        """

        messages: list[ChatMessage] = []
        if system_prompt:
            messages.append(ChatMessage(role="system", content=system_prompt))
        messages.append(ChatMessage(role="user", content=prompt))

        for attempt in range(1, self.max_attempts + 1):
            start = time.perf_counter()
            try:
                text = await self._service.complete(messages, json_mode=self.json_mode)
            except RateLimited as exc:
                if attempt >= self.max_attempts:
                    raise ReasoningUnavailable(
                        f"Reasoning service still rate limited after {attempt} attempts"
                    ) from exc
                waited = await self.throttle.backoff(exc.retry_after_seconds)
                logger.warning(
                    "Rate limited, waited %.1fs before retry %d/%d",
                    waited,
                    attempt,
                    self.max_attempts,
                )
                continue
            except ReasoningServiceError as exc:
                raise ReasoningUnavailable(f"Reasoning service error: {exc}") from exc
            except Exception as exc:  # noqa: BLE001
                logger.exception("Reasoning service raised an unexpected error")
                raise ReasoningUnavailable(f"Reasoning service failed: {exc}") from exc

            logger.info(
                "Reasoning call completed (attempt %d, %.2fs, %d chars)",
                attempt,
                time.perf_counter() - start,
                len(text),
            )
            await self.throttle.cooldown()
            return text

        raise ReasoningUnavailable("Failed after retries")
