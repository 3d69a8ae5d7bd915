"""
Component wiring.

Builds the bot from explicit config structs and exposes it to routes through
`app.state`; there are no module-level client singletons.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from ..bot.application import BotApplication
from ..bot.planner import ActionPlanner
from ..config import Settings
from ..core.errors import ConfigurationError
from ..embeddings.embedder import Embedder
from ..llm.client import LLMClient
from ..prompts import CHAT_SYSTEM_PROMPT, PromptManager, PromptTemplate
from ..search.data_source import AzureSearchDataSource
from ..search.models import SearchMode
from ..search.tokenizer import TiktokenTokenizer
from ..sessions.store import SessionStore


def build_data_source(settings: Settings) -> AzureSearchDataSource:
    """
    Build the retrieval adapter for the configured mode.

    The index only has a vector field when SEARCH_VECTOR_DIMENSIONS is set,
    so vector mode requires it and hybrid mode falls back to text-only
    queries without it.
    """
    vectors_enabled = settings.search_vector_dimensions is not None
    if settings.search_mode is SearchMode.VECTOR and not vectors_enabled:
        raise ConfigurationError("SEARCH_VECTOR_DIMENSIONS")

    embedder: Optional[Embedder] = None
    if vectors_enabled and settings.search_mode in (SearchMode.VECTOR, SearchMode.HYBRID):
        embedder = Embedder(settings.embedding_config())

    return AzureSearchDataSource(
        settings.search_config(),
        name=settings.search_data_source_name,
        mode=settings.search_mode,
        embedder=embedder,
        vector_k=settings.search_vector_k,
    )


def build_bot_application(settings: Settings) -> BotApplication:
    """
    Construct the full bot from settings.

    Raises
    ------
    ConfigurationError
        If any search, embedding or chat-model setting is missing.
    """
    chat_config = settings.chat_model_config()
    data_source = build_data_source(settings)

    prompts = PromptManager(TiktokenTokenizer())
    prompts.add_data_source(data_source)
    prompts.add_prompt(
        PromptTemplate(
            name="chat",
            text=CHAT_SYSTEM_PROMPT,
            data_sources=[data_source.name],
            max_context_tokens=settings.search_token_budget,
        )
    )

    planner = ActionPlanner(
        llm=LLMClient(chat_config),
        prompts=prompts,
        search_source=data_source.name,
        default_prompt="chat",
    )
    return BotApplication(planner, SessionStore(max_messages_per_session=200))


def get_bot_application(request: Request) -> BotApplication:
    return request.app.state.bot
