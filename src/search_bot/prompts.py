"""
Prompt Templates and Prompt Manager

Named system-prompt templates plus the registry of data sources whose
rendered output is injected into them at generation time.

A template names the data sources it wants; each is asked for context under
the template's token budget and the results are substituted into the
`{context}` placeholder, one section per data source.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Protocol

from .search.models import RenderedContext
from .search.tokenizer import Tokenizer


CHAT_SYSTEM_PROMPT = """You are a helpful assistant that answers questions using the company's document library.

Answer using only the documents provided below. When a document includes a
"Read more here" link, include the link in your answer. If the documents do
not contain the answer, say that you could not find it.

Documents:
{context}
"""


class DataSource(Protocol):
    name: str

    async def render_data(
        self,
        state: Mapping[str, Any],
        tokenizer: Tokenizer,
        max_tokens: int,
    ) -> RenderedContext:
        ...


@dataclass(frozen=True)
class PromptTemplate:
    name: str
    text: str
    data_sources: List[str] = field(default_factory=list)
    max_context_tokens: int = 1500


class PromptManager:
    """Registry of prompt templates and data sources."""

    def __init__(self, tokenizer: Tokenizer) -> None:
        self._tokenizer = tokenizer
        self._templates: Dict[str, PromptTemplate] = {}
        self._data_sources: Dict[str, DataSource] = {}

    def add_prompt(self, template: PromptTemplate) -> None:
        self._templates[template.name] = template

    def add_data_source(self, data_source: DataSource) -> None:
        if data_source.name in self._data_sources:
            raise ValueError(f"Data source '{data_source.name}' already registered")
        self._data_sources[data_source.name] = data_source

    def get_data_source(self, name: str) -> DataSource:
        try:
            return self._data_sources[name]
        except KeyError:
            raise KeyError(f"Unknown data source '{name}'") from None

    def get_prompt(self, name: str) -> PromptTemplate:
        try:
            return self._templates[name]
        except KeyError:
            raise KeyError(f"Unknown prompt '{name}'") from None

    async def render_data_source(
        self,
        name: str,
        state: Mapping[str, Any],
        max_tokens: int,
    ) -> RenderedContext:
        return await self.get_data_source(name).render_data(state, self._tokenizer, max_tokens)

    async def render_prompt(self, name: str, state: Mapping[str, Any]) -> str:
        """
        Render a template's system prompt for the current turn.

        The template's token budget is shared by its data sources in
        registration order; each receives whatever the previous ones left.
        """
        template = self.get_prompt(name)
        remaining = template.max_context_tokens
        sections: List[str] = []

        for source_name in template.data_sources:
            source = self.get_data_source(source_name)
            rendered = await source.render_data(state, self._tokenizer, remaining)
            remaining = max(0, remaining - rendered.token_count)
            if rendered.text:
                sections.append(rendered.text)

        return template.text.format(context="\n".join(sections).strip())
