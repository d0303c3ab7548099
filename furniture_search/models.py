"""Pydantic models for pipeline diagnostics and request/response payloads."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class ClassifiedTokens(BaseModel):
    primary: List[str] = Field(default_factory=list)
    modifiers: List[str] = Field(default_factory=list)
    stopWords: List[str] = Field(default_factory=list)
    regular: List[str] = Field(default_factory=list)


class Numerics(BaseModel):
    seater: Optional[int] = None
    size: Optional[int] = None
    sizeUnit: Optional[str] = None

    def is_empty(self) -> bool:
        return self.seater is None and self.size is None


class Intent(BaseModel):
    primaryType: Optional[str] = None
    confidence: float = 0.0


class SearchStage(str, Enum):
    """Which rung of the fallback ladder produced the products."""

    STRICT = "strict"
    RELAXED = "relaxed"
    FALLBACK = "fallback"
    POPULARITY = "popularity"


class SearchResult(BaseModel):
    ok: bool = True
    query: str = ""
    normalized: str = ""
    classified: ClassifiedTokens = Field(default_factory=ClassifiedTokens)
    intent: Intent = Field(default_factory=Intent)
    numerics: Numerics = Field(default_factory=Numerics)
    primaryType: Optional[str] = None
    products: List[Dict[str, Any]] = Field(default_factory=list)
    page: int = 1
    pageSize: int = 24
    total: int = 0
    hasMore: bool = False
    totalPages: int = 0
    fallback: bool = False
    noResults: bool = False
    stage: Optional[SearchStage] = None
    error: Optional[str] = None


class SearchRequest(BaseModel):
    q: str = Field("", description="Search query string")
    page: Union[int, str, None] = Field(None, description="1-based page number")
    pageSize: Union[int, str, None] = Field(None, description="Results per page (1-60)")


class SearchResponse(SearchResult):
    fromCache: bool = False
    cacheHits: Optional[int] = None
    didYouMean: List[str] = Field(default_factory=list)


class SuggestionSet(BaseModel):
    type: str
    suggestions: List[str] = Field(default_factory=list)


class DidYouMean(BaseModel):
    suggestions: List[str] = Field(default_factory=list)
    isFallback: bool = False


class SuggestionPayload(BaseModel):
    queries: List[str] = Field(default_factory=list)
    products: List[Dict[str, Any]] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    trending: List[str] = Field(default_factory=list)


class SuggestResponse(BaseModel):
    ok: bool = True
    suggestions: SuggestionPayload = Field(default_factory=SuggestionPayload)
    fromCache: bool = False
    type: str = "instant"
    error: Optional[str] = None
