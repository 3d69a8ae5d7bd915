"""
Action Planner

Decides how a user turn is answered and tags the answer with its provenance:

- ResponseSource.LLM    : the chat model answered, grounded on the context
                          the registered data sources rendered into the prompt
- ResponseSource.SEARCH : the rendered search context itself is the answer
                          (search command, or blank input)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from ..api.models import ChatMessage
from ..llm.client import LLMClient
from ..prompts import PromptManager

logger = logging.getLogger("search_bot.planner")

SEARCH_COMMAND = "/search"


class ResponseSource(str, Enum):
    LLM = "llm"
    SEARCH = "search"


@dataclass(frozen=True)
class PlannerResponse:
    output: str
    source: ResponseSource


class ActionPlanner:
    """
    Parameters
    ----------
    llm : LLMClient
        Chat-completion client.

    prompts : PromptManager
        Holds the prompt templates and registered data sources.

    search_source : str
        Name of the data source answering search commands.

    default_prompt : str
        Template used for model-generated answers.

    history_turns : int
        Number of prior messages sent to the model with each turn.
    """

    def __init__(
        self,
        llm: LLMClient,
        prompts: PromptManager,
        search_source: str,
        default_prompt: str = "chat",
        history_turns: int = 10,
    ) -> None:
        self._llm = llm
        self._prompts = prompts
        self._search_source = search_source
        self._default_prompt = default_prompt
        self._history_turns = history_turns

    async def plan(
        self,
        text: str,
        history: Optional[List[ChatMessage]] = None,
    ) -> PlannerResponse:
        text = (text or "").strip()

        if not text:
            return await self._search("")

        if text == SEARCH_COMMAND or text.startswith(SEARCH_COMMAND + " "):
            return await self._search(text[len(SEARCH_COMMAND):].strip())

        system_prompt = await self._prompts.render_prompt(
            self._default_prompt,
            {"input": text},
        )

        messages: List[Dict[str, str]] = [
            {"role": m.role, "content": m.content}
            for m in (history or [])[-self._history_turns:]
        ]
        messages.append({"role": "user", "content": text})

        reply = await self._llm.chat(system_prompt, messages)
        return PlannerResponse(
            output=reply.get("content") or "",
            source=ResponseSource.LLM,
        )

    async def _search(self, query: str) -> PlannerResponse:
        budget = self._prompts.get_prompt(self._default_prompt).max_context_tokens
        rendered = await self._prompts.render_data_source(
            self._search_source,
            {"input": query},
            budget,
        )
        logger.debug(
            "Search answer: %d tokens, truncated=%s",
            rendered.token_count,
            rendered.truncated,
        )
        return PlannerResponse(output=rendered.text, source=ResponseSource.SEARCH)
