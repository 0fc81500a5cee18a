import pytest
from pydantic_ai.exceptions import ModelHTTPError
from pydantic_ai.messages import ModelMessage, ModelResponse
from pydantic_ai.models.function import AgentInfo, FunctionModel
from pydantic_ai.models.test import TestModel

from partscout.models.parts import ChatMessage
from partscout.services.llm_provider import PydanticAIReasoningService, parse_retry_after
from partscout.services.reasoning_client import RateLimited, ReasoningServiceError
from partscout.services.usage_tracker import UsageTracker


def test_parse_retry_after_reads_explicit_field() -> None:
    assert parse_retry_after({"retry_after_seconds": 7}) == 7.0
    assert parse_retry_after({"error": {"retry_after": 2.5}}) == 2.5


def test_parse_retry_after_reads_groq_message() -> None:
    body = {
        "error": {
            "message": "Rate limit reached for model. Please try again in 1m3.5s.",
            "code": "rate_limit_exceeded",
        }
    }
    assert parse_retry_after(body) == pytest.approx(63.5)
    assert parse_retry_after("Please try again in 4.2s") == pytest.approx(4.2)


def test_parse_retry_after_without_hint() -> None:
    assert parse_retry_after(None) is None
    assert parse_retry_after({"error": {"message": "slow down"}}) is None


def test_service_requires_api_key_without_model() -> None:
    with pytest.raises(ReasoningServiceError):
        PydanticAIReasoningService(model_name="llama-3.1-8b-instant", api_key="")


@pytest.mark.asyncio
async def test_service_returns_text_and_tracks_usage() -> None:
    tracker = UsageTracker()
    service = PydanticAIReasoningService(
        model_name="test",
        api_key="",
        usage_tracker=tracker,
        model=TestModel(custom_output_text='{"categories": []}'),
    )

    text = await service.complete(
        [
            ChatMessage(role="system", content="You are an engineer."),
            ChatMessage(role="user", content="List categories as JSON."),
        ],
        json_mode=True,
    )

    assert text == '{"categories": []}'
    snapshot = await tracker.snapshot()
    assert snapshot.requests == 1


@pytest.mark.asyncio
async def test_service_maps_http_429_to_rate_limited() -> None:
    def _raise(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        raise ModelHTTPError(
            status_code=429,
            model_name="test",
            body={"error": {"message": "Please try again in 3s"}},
        )

    tracker = UsageTracker()
    service = PydanticAIReasoningService(
        model_name="test", api_key="", usage_tracker=tracker, model=FunctionModel(_raise)
    )

    with pytest.raises(RateLimited) as exc_info:
        await service.complete([ChatMessage(role="user", content="hi")])
    assert exc_info.value.retry_after_seconds == 3.0
    assert (await tracker.snapshot()).rate_limited == 1


@pytest.mark.asyncio
async def test_service_maps_other_http_errors() -> None:
    def _raise(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        raise ModelHTTPError(status_code=500, model_name="test", body=None)

    service = PydanticAIReasoningService(
        model_name="test", api_key="", model=FunctionModel(_raise)
    )

    with pytest.raises(ReasoningServiceError) as exc_info:
        await service.complete([ChatMessage(role="user", content="hi")])
    assert not isinstance(exc_info.value, RateLimited)
