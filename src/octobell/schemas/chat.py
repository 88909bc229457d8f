"""Chat relay payloads."""

from pydantic import BaseModel, Field

from .subscriptions import MAX_ID


class InboundMessage(BaseModel):
    """A message a user sent to the bot, as posted by the chat relay."""

    conversation_id: int = Field(ge=0, le=MAX_ID)
    text: str
    is_group: bool = False


class OutboundMessage(BaseModel):
    """A message the bot asks the chat relay to deliver."""

    conversation_id: int
    text: str
