"""
Search Data Models

Request-scoped values exchanged between the search adapter, the index
maintenance utility and the search service client.

Index field names
-----------------
Documents are stored under the SharePoint-style field names used by the
index schema (see `indexers/schema.py`). `SearchDocument` keeps readable
attribute names and converts to and from the wire shape explicitly.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------
# Index Field Names (Authoritative)
# ---------------------------------------------------------------------

FIELD_ID = "id"
FIELD_TITLE = "metadata_spo_item_name"
FIELD_SOURCE_URI = "metadata_spo_item_weburi"
FIELD_CONTENT = "content"
FIELD_DISPLAY_TITLE = "metadata_spo_item_title"
FIELD_CONTENT_VECTOR = "content_vector"

DEFAULT_SELECTED_FIELDS: List[str] = [
    FIELD_ID,
    FIELD_TITLE,
    FIELD_SOURCE_URI,
    FIELD_CONTENT,
]

SEARCHABLE_FIELDS: List[str] = [
    FIELD_TITLE,
    FIELD_CONTENT,
    FIELD_DISPLAY_TITLE,
]


class SearchMode(str, Enum):
    KEYWORD = "keyword"
    SEMANTIC = "semantic"
    VECTOR = "vector"
    HYBRID = "hybrid"


# ---------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------

class SearchDocument(BaseModel):
    """
    A single document stored in the search index.

    `id` is the index key; re-upserting a document with an existing id
    replaces the stored fields.
    """

    id: str = Field(..., min_length=1)
    title: str = ""
    source_uri: Optional[str] = None
    content: str = ""
    display_title: str = ""
    content_vector: Optional[List[float]] = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    def to_index_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            FIELD_ID: self.id,
            FIELD_TITLE: self.title,
            FIELD_SOURCE_URI: self.source_uri,
            FIELD_CONTENT: self.content,
            FIELD_DISPLAY_TITLE: self.display_title,
        }
        if self.content_vector is not None:
            payload[FIELD_CONTENT_VECTOR] = list(self.content_vector)
        return payload

    @classmethod
    def from_index_payload(cls, payload: Dict[str, Any]) -> "SearchDocument":
        """
        Build a document from a search result row.

        Rows only carry the selected fields, so everything except the key
        falls back to an empty value. Search metadata (`@search.*`) is ignored.
        """
        return cls(
            id=str(payload.get(FIELD_ID) or ""),
            title=payload.get(FIELD_TITLE) or "",
            source_uri=payload.get(FIELD_SOURCE_URI) or None,
            content=payload.get(FIELD_CONTENT) or "",
            display_title=payload.get(FIELD_DISPLAY_TITLE) or "",
        )


class SearchHit(BaseModel):
    """One ranked result, in the order the search service returned it."""

    document: SearchDocument
    score: float = 0.0
    reranker_score: Optional[float] = None

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------
# Query / Render Contracts
# ---------------------------------------------------------------------

class QueryRequest(BaseModel):
    """One retrieval request, built per user turn."""

    query_text: str
    mode: SearchMode = SearchMode.SEMANTIC
    selected_fields: List[str] = Field(
        default_factory=lambda: list(DEFAULT_SELECTED_FIELDS)
    )
    token_budget: int = Field(..., ge=0)

    model_config = ConfigDict(extra="forbid")


class RenderedContext(BaseModel):
    """
    Prompt-ready text produced from search results.

    `token_count` never exceeds the budget the context was rendered for.
    `truncated` is True whenever at least one result was left out because
    of the budget.
    """

    text: str
    token_count: int = Field(default=0, ge=0)
    truncated: bool = False

    model_config = ConfigDict(extra="forbid")


class UpsertResult(BaseModel):
    """Outcome of a mergeOrUpload batch."""

    succeeded: List[str] = Field(default_factory=list)
    failed: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")
