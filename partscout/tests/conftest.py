from collections.abc import Sequence

import pytest

from partscout.agents.base import AgentDeps
from partscout.models.parts import CatalogProduct, ChatMessage, SearchResponse, SearchSnippet
from partscout.services.digikey_client import AuthFailed, CatalogUnavailable
from partscout.services.reasoning_client import ReasoningClient
from partscout.services.reporter import RunTrace
from partscout.services.tavily_client import SearchUnavailable
from partscout.services.throttle import RequestThrottle


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class RoutedReasoningService:
    """Answers by matching a substring of the user prompt."""

    def __init__(self, routes: Sequence[tuple[str, object]], default: object = "") -> None:
        self.routes = list(routes)
        self.default = default
        self.calls: list[list[ChatMessage]] = []

    async def complete(self, messages: Sequence[ChatMessage], json_mode: bool = False) -> str:
        self.calls.append(list(messages))
        prompt = messages[-1].content
        answer = self.default
        for needle, response in self.routes:
            if needle in prompt:
                answer = response
                break
        if isinstance(answer, Exception):
            raise answer
        return str(answer)

    def prompts(self) -> list[str]:
        return [call[-1].content for call in self.calls]


class StubSearchService:
    def __init__(self, failing: set[str] | None = None, snippets_per_query: int = 2) -> None:
        self.failing = failing or set()
        self.snippets_per_query = snippets_per_query
        self.queries: list[str] = []

    async def search(self, query: str) -> SearchResponse:
        self.queries.append(query)
        if query in self.failing:
            raise SearchUnavailable(f"boom: {query}")
        return SearchResponse(
            answer=f"answer for {query}",
            results=[
                SearchSnippet(title=f"{query} #{idx}", content=f"content {idx}")
                for idx in range(self.snippets_per_query)
            ],
        )


class StubCatalogService:
    def __init__(
        self,
        products: dict[str, list[CatalogProduct]] | None = None,
        failing: set[str] | None = None,
        auth_error: bool = False,
    ) -> None:
        self.products = products or {}
        self.failing = failing or set()
        self.auth_error = auth_error
        self.lookups: list[tuple[str, str]] = []

    async def authenticate(self, client_id: str, client_secret: str) -> str:
        if self.auth_error:
            raise AuthFailed("invalid client")
        return f"token-{client_id}"

    async def lookup(self, token: str, keyword: str) -> list[CatalogProduct]:
        self.lookups.append((token, keyword))
        if keyword in self.failing:
            raise CatalogUnavailable("catalog down")
        return self.products.get(keyword, [])


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def throttle(recording_sleep: RecordingSleep) -> RequestThrottle:
    return RequestThrottle(cooldown_seconds=2.0, default_wait_seconds=5.0, sleep=recording_sleep)


@pytest.fixture
def trace() -> RunTrace:
    return RunTrace()


@pytest.fixture
def make_reasoning(throttle: RequestThrottle):
    def _make(
        routes: Sequence[tuple[str, object]], default: object = ""
    ) -> tuple[ReasoningClient, RoutedReasoningService]:
        service = RoutedReasoningService(routes, default=default)
        return ReasoningClient(service, throttle=throttle, max_attempts=3), service

    return _make


@pytest.fixture
def make_deps(make_reasoning):
    def _make(
        routes: Sequence[tuple[str, object]],
        search: StubSearchService | None = None,
        catalog: StubCatalogService | None = None,
    ) -> AgentDeps:
        reasoning, _ = make_reasoning(routes)
        return AgentDeps(
            reasoning=reasoning,
            search=search or StubSearchService(),
            catalog=catalog or StubCatalogService(),
            catalog_client_id="client",
            catalog_client_secret="secret",
        )

    return _make


@pytest.fixture
def make_search():
    return StubSearchService


@pytest.fixture
def make_catalog():
    return StubCatalogService
