"""Schemas for search provider results."""

from pydantic import BaseModel, ConfigDict, Field


class SearchResult(BaseModel):
    """One organic search hit. Providers differ on which of url/link and snippet/description they fill."""

    model_config = ConfigDict(extra="ignore")

    title: str = ""
    link: str | None = None
    url: str | None = None
    snippet: str | None = None
    description: str | None = None
    extra_snippets: list[str] = Field(default_factory=list)
