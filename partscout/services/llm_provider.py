"""Groq-backed reasoning service built on pydantic-ai."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

from pydantic_ai import Agent
from pydantic_ai.exceptions import AgentRunError, ModelHTTPError
from pydantic_ai.models import Model
from pydantic_ai.models.groq import GroqModel
from pydantic_ai.providers.groq import GroqProvider
from pydantic_ai.settings import ModelSettings

from partscout.models.parts import ChatMessage
from partscout.services.reasoning_client import RateLimited, ReasoningServiceError
from partscout.services.usage_tracker import UsageTracker

_RETRY_IN_PATTERN = re.compile(r"try again in\s+(?:(\d+)m)?\s*([\d.]+)\s*s", re.IGNORECASE)


def parse_retry_after(body: object) -> float | None:
    """Read a retry delay from a provider error body.

    Args:
        body: Parsed error body or raw text.

    Returns:
        Seconds to wait, or None when the body carries no hint.
    """

    if body is None:
        return None
    if isinstance(body, Mapping):
        for key in ("retry_after_seconds", "retry_after"):
            value = body.get(key)
            if isinstance(value, int | float) and not isinstance(value, bool):
                return float(value)
        for key in ("error", "message"):
            if key in body:
                found = parse_retry_after(body[key])
                if found is not None:
                    return found
        return None
    match = _RETRY_IN_PATTERN.search(str(body))
    if not match:
        return None
    minutes = int(match.group(1) or 0)
    return minutes * 60 + float(match.group(2))


class PydanticAIReasoningService:
    """Reasoning service that sends chat messages through a pydantic-ai agent."""

    def __init__(
        self,
        model_name: str,
        api_key: str,
        temperature: float = 0.7,
        usage_tracker: UsageTracker | None = None,
        model: Model | None = None,
    ) -> None:
        if model is None:
            if not api_key:
                raise ReasoningServiceError("GROQ_API_KEY is not configured")
            model = GroqModel(model_name, provider=GroqProvider(api_key=api_key))
        self.model_name = model_name
        self._model = model
        self._temperature = temperature
        self._usage_tracker = usage_tracker

    def _build_agent(self, system_prompt: str) -> Agent:
        return Agent(
            model=self._model,
            output_type=str,
            system_prompt=system_prompt or (),
        )

    async def complete(self, messages: Sequence[ChatMessage], json_mode: bool = False) -> str:
        """Send messages and return the raw response text."""

        system_prompt = "\n\n".join(m.content for m in messages if m.role == "system")
        user_prompt = "\n\n".join(m.content for m in messages if m.role != "system")

        model_settings = ModelSettings(temperature=self._temperature)
        if json_mode:
            model_settings["extra_body"] = {"response_format": {"type": "json_object"}}

        agent = self._build_agent(system_prompt)
        try:
            result = await agent.run(user_prompt, model_settings=model_settings)
        except ModelHTTPError as exc:
            if exc.status_code == 429:
                if self._usage_tracker is not None:
                    await self._usage_tracker.add_rate_limit()
                raise RateLimited(
                    f"{self.model_name} rate limited",
                    retry_after_seconds=parse_retry_after(exc.body),
                ) from exc
            raise ReasoningServiceError(
                f"{self.model_name} returned HTTP {exc.status_code}"
            ) from exc
        except AgentRunError as exc:
            raise ReasoningServiceError(f"{self.model_name} run failed: {exc}") from exc
        except Exception as exc:  # noqa: BLE001
            raise ReasoningServiceError(f"{self.model_name} call failed: {exc}") from exc

        if self._usage_tracker is not None:
            await self._usage_tracker.add(result.usage())
        return str(result.output or "")
