"""Pydantic models for the parts-list pipeline."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from partscout.services.usage_tracker import UsageSnapshot


def _coerce_str_list(value: object) -> object:
    if value is None:
        return []
    if isinstance(value, str):
        text = value.strip()
        return [text] if text else []
    if isinstance(value, Mapping):
        return [f"{key}: {item}" for key, item in value.items()]
    if isinstance(value, list | tuple):
        items: list[str] = []
        for item in value:
            if item is None:
                continue
            if isinstance(item, Mapping):
                items.extend(f"{key}: {entry}" for key, entry in item.items())
                continue
            text = str(item).strip()
            if text:
                items.append(text)
        return items
    return value


def _coerce_text(value: object) -> object:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, int | float):
        return str(value)
    return value


def _coerce_required_text(value: object) -> object:
    if value is None:
        return ""
    return _coerce_text(value)


StrList = Annotated[list[str], BeforeValidator(_coerce_str_list)]
Text = Annotated[str, BeforeValidator(_coerce_required_text)]
OptionalText = Annotated[str | None, BeforeValidator(_coerce_text)]


class CamelModel(BaseModel):
    """Base model that speaks camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class ChatMessage(CamelModel):
    """Single message sent to the reasoning service."""

    role: Literal["system", "user", "assistant"]
    content: str


class Category(CamelModel):
    """Component category identified from the project description."""

    name: Text = Field(min_length=1)
    specifications: StrList = Field(default_factory=list)
    constraints: StrList = Field(default_factory=list)


class RequirementsData(CamelModel):
    """Requirement analysis output."""

    categories: list[Category] = Field(default_factory=list)


class SearchPlanItem(CamelModel):
    """Planned search queries for one category."""

    category: Text = Field(min_length=1)
    queries: StrList = Field(default_factory=list)


class SearchSnippet(CamelModel):
    """Single ranked search hit."""

    title: Text = ""
    content: Text = ""
    url: OptionalText = None


class SearchResponse(CamelModel):
    """Search service response for one query."""

    answer: OptionalText = None
    results: list[SearchSnippet] = Field(default_factory=list)


class SearchResult(CamelModel):
    """Collected evidence for one executed query."""

    query: str
    snippets: list[SearchSnippet] = Field(default_factory=list)
    answer: str | None = None


class VendorLink(CamelModel):
    """Vendor listing for a component option."""

    name: Text = ""
    url: Text = ""
    price: OptionalText = None


class ComponentOption(CamelModel):
    """One candidate part for a component."""

    name: Text = Field(min_length=1)
    specifications: StrList = Field(default_factory=list)
    pros: StrList = Field(default_factory=list)
    cons: StrList = Field(default_factory=list)
    datasheet_link: OptionalText = None
    vendor_links: list[VendorLink] | None = None
    photo_url: OptionalText = None


class Component(CamelModel):
    """Functional component with candidate options."""

    name: Text = Field(min_length=1)
    options: list[ComponentOption] = Field(default_factory=list)


class CategoryParts(CamelModel):
    """Components grouped under one category."""

    name: str
    components: list[Component] = Field(default_factory=list)


class PartsList(CamelModel):
    """Full candidate universe produced by synthesis."""

    categories: list[CategoryParts] = Field(default_factory=list)

    def component_count(self) -> int:
        return sum(len(category.components) for category in self.categories)


class FinalPart(CamelModel):
    """Selected option for one component."""

    category: Text = ""
    component: Text = Field(min_length=1)
    selected_option: ComponentOption
    compatibility_notes: Text = ""


class FinalList(CamelModel):
    """Compatible final selection."""

    final_parts: list[FinalPart] = Field(default_factory=list)
    total_estimated_cost: Text = ""
    compatibility_summary: Text = ""

    @classmethod
    def empty(cls) -> FinalList:
        return cls(final_parts=[], total_estimated_cost="", compatibility_summary="")


class AgentStep(CamelModel):
    """Trace entry emitted at the start of a stage."""

    step: str
    reasoning: str | None = None
    search_queries: list[str] | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class CatalogProduct(CamelModel):
    """Best catalog match for a keyword lookup."""

    name: str = ""
    datasheet_url: str | None = None
    photo_url: str | None = None
    product_url: str | None = None
    unit_price: float | None = None


class AgentRunResult(CamelModel):
    """Final output of a pipeline run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    steps: list[AgentStep]
    parts_list: PartsList
    final_list: FinalList
    usage: UsageSnapshot | None = Field(default=None, exclude=True)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the camelCase response shape."""

        return self.model_dump(mode="json", by_alias=True)
