"""Input schemas for the MCP tools. Field descriptions are surfaced through tools/list."""

from pydantic import BaseModel, Field


class SearchInput(BaseModel):
    query: str = Field(..., description="Search query")


class BrowseInput(BaseModel):
    url: str = Field(..., description="The URL to browse")
    query: str = Field("", description="Specific question or summary request")


class MultiSearchInput(BaseModel):
    queries: list[str] = Field(..., description="A list of search queries")


class MultiBrowseInput(BaseModel):
    urls: list[str] = Field(..., description="A list of URLs to browse")
    query: str = Field("", description="Specific question or summary request")
