"""
Bot Application

Receives channel activities, asks the planner for an answer and produces
exactly one reply per message activity. The reply text carries a prefix
that depends on the answer's provenance.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ..api.models import Activity, ChatMessage, ReplyActivity
from ..sessions.store import SessionStore
from .planner import ActionPlanner, PlannerResponse, ResponseSource

logger = logging.getLogger("search_bot.bot")

LLM_PREFIX = "AI-generated response:"
SEARCH_PREFIX = "Here is the information you requested:"

OutputHandler = Callable[[PlannerResponse], str]


def format_reply(response: PlannerResponse) -> str:
    """Prefix the planner output according to where it came from."""
    if response.source is ResponseSource.LLM:
        return f"{LLM_PREFIX}\n{response.output}"
    return f"{SEARCH_PREFIX}\n{response.output}"


class BotApplication:
    def __init__(
        self,
        planner: ActionPlanner,
        storage: SessionStore,
        output_handler: OutputHandler = format_reply,
    ) -> None:
        self.planner = planner
        self.storage = storage
        self.output_handler = output_handler

    async def on_turn(self, activity: Activity) -> Optional[ReplyActivity]:
        """
        Handle one inbound activity.

        Non-message activities (conversationUpdate, typing, ...) get no reply.
        Planner failures propagate to the caller.
        """
        if activity.type != "message":
            logger.debug("Ignoring %s activity", activity.type)
            return None

        conversation_id = activity.conversation.id
        text = (activity.text or "").strip()

        history = self.storage.get_history(conversation_id)
        response = await self.planner.plan(text, history)
        reply_text = self.output_handler(response)

        if text and response.output:
            self.storage.add_messages(
                conversation_id,
                [
                    ChatMessage(role="user", content=text),
                    ChatMessage(role="assistant", content=response.output),
                ],
            )

        logger.info(
            "Replied to conversation %s (source=%s)",
            conversation_id,
            response.source.value,
        )

        return ReplyActivity(
            text=reply_text,
            reply_to_id=activity.id,
            conversation=activity.conversation,
            from_=activity.recipient,
            recipient=activity.from_,
        )
