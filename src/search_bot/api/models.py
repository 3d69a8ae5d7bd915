"""
API Models

Pydantic models for the bot channel surface and conversation history.

Inbound activities follow the Bot Framework Activity schema; only the fields
the bot reads are declared and everything else is ignored.
"""

from __future__ import annotations

from typing import Optional, Literal
from pydantic import BaseModel, Field, ConfigDict


# ---------------------------------------------------------------------
# Conversation History
# ---------------------------------------------------------------------

class ChatMessage(BaseModel):
    """
    Single message in a conversation.
    """
    role: Literal["system", "user", "assistant"]
    content: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------
# Bot Framework Activities
# ---------------------------------------------------------------------

class ChannelAccount(BaseModel):
    id: str
    name: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class ConversationAccount(BaseModel):
    id: str

    model_config = ConfigDict(extra="ignore")


class Activity(BaseModel):
    """
    Inbound activity posted by the channel.
    """
    type: str = "message"
    id: Optional[str] = None
    text: Optional[str] = None
    channel_id: Optional[str] = Field(default=None, alias="channelId")
    conversation: ConversationAccount
    from_: Optional[ChannelAccount] = Field(default=None, alias="from")
    recipient: Optional[ChannelAccount] = None

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ReplyActivity(BaseModel):
    """
    Outbound reply. Serialized with Bot Framework field names.
    """
    type: Literal["message"] = "message"
    text: str
    reply_to_id: Optional[str] = Field(default=None, alias="replyToId")
    conversation: ConversationAccount
    from_: Optional[ChannelAccount] = Field(default=None, alias="from")
    recipient: Optional[ChannelAccount] = None

    model_config = ConfigDict(extra="forbid", populate_by_name=True)
