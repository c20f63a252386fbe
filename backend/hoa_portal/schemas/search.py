"""Global search schemas."""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel

SearchResultType = Literal["association", "property", "resident", "lead", "invoice", "vendor"]


class SearchResult(BaseModel):
    id: UUID
    title: str
    subtitle: str
    type: SearchResultType
    path: str
    matched_field: str


class SearchResponse(BaseModel):
    query: str
    total: int
    results: list[SearchResult]
    suggestions: list[str] = []
