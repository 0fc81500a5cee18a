"""Shared interfaces and helpers for pipeline stages."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from partscout.models.parts import CatalogProduct, ChatMessage, SearchResponse
from partscout.services.reasoning_client import ReasoningClient
from partscout.services.usage_tracker import UsageTracker

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
ItemT = TypeVar("ItemT")


class ReasoningService(Protocol):
    """Text-completion provider."""

    async def complete(self, messages: Sequence[ChatMessage], json_mode: bool = False) -> str: ...


class SearchService(Protocol):
    """Web-search provider."""

    async def search(self, query: str) -> SearchResponse: ...


class CatalogService(Protocol):
    """Authoritative parts catalog."""

    async def authenticate(self, client_id: str, client_secret: str) -> str: ...

    async def lookup(self, token: str, keyword: str) -> list[CatalogProduct]: ...


@dataclass
class AgentDeps:
    """Dependencies passed to every pipeline stage."""

    reasoning: ReasoningClient
    search: SearchService
    catalog: CatalogService
    catalog_client_id: str
    catalog_client_secret: str
    usage_tracker: UsageTracker = field(default_factory=UsageTracker)
    max_queries_per_category: int = 3
    max_results_per_query: int = 5


def dedupe_by_name(items: Iterable[ItemT], key: Callable[[ItemT], str]) -> list[ItemT]:
    """Collapse items whose key matches case-insensitively; first one wins.

    Args:
        items: Items in priority order.
        key: Returns the merge key for an item.

    Returns:
        Unique items, original casing and order preserved.
    """

    seen: set[str] = set()
    unique: list[ItemT] = []
    for item in items:
        normalized = key(item).strip().lower()
        if normalized in seen:
            continue
        seen.add(normalized)
        unique.append(item)
    return unique


def parse_records(raw_items: object, model: type[ModelT], label: str) -> list[ModelT]:
    """Validate a list of untrusted dicts, dropping entries that do not fit.

    Args:
        raw_items: Parsed JSON expected to be a list.
        model: Record model to validate against.
        label: Name used in log messages.

    Returns:
        Valid records in input order.
    """

    if not isinstance(raw_items, list):
        if raw_items is not None:
            logger.warning("Expected a list of %s, got %s", label, type(raw_items).__name__)
        return []

    records: list[ModelT] = []
    for index, item in enumerate(raw_items):
        try:
            records.append(model.model_validate(item))
        except ValidationError as exc:
            logger.warning("Dropping invalid %s at index %d: %s", label, index, exc.errors()[:1])
    return records
