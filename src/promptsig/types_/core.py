"""Chat message types exchanged with language model backends."""

from __future__ import annotations

from typing import Literal, Mapping, Sequence, Union

from pydantic import BaseModel, Field

from ..utilities import format_json

Role = Literal["assistant", "system", "user"]


class Message(BaseModel):
    role: Role = Field(description="The role of the message author.")
    content: str = Field(description="The contents of the message.", min_length=1)

    def __repr__(self):
        return format_json(self.model_dump())


class SystemMessage(Message):
    role: Literal["system"] = "system"


class UserMessage(Message):
    role: Literal["user"] = "user"


class AssistantMessage(Message):
    role: Literal["assistant"] = "assistant"


MESSAGE_TYPES: dict[str, type[Message]] = {
    "system": SystemMessage,
    "user": UserMessage,
    "assistant": AssistantMessage,
}

MessageLike = Union[Message, Mapping[str, str]]


def to_message(message: MessageLike) -> Message:
    """Build the role-specific message for a message or a ``{"role", "content"}`` mapping."""
    if isinstance(message, Message):
        return message
    role = message.get("role", "user")
    if role not in MESSAGE_TYPES:
        raise ValueError(f"Unsupported message role '{role}'; expected one of {list(MESSAGE_TYPES)}")
    return MESSAGE_TYPES[role](content=message.get("content", ""))


class Conversation(BaseModel):
    """Ordered messages sent to a chat model in one request."""

    messages: list[Message] = Field(description="The messages of the conversation.", min_length=1)

    def __repr__(self):
        return format_json(self.model_dump())

    @classmethod
    def from_prompt(cls, prompt: str, system: str | None = None) -> Conversation:
        """Wrap a single prompt as a user message, optionally preceded by a system message.

        Examples
        --------
        >>> Conversation.from_prompt("Capital of France?").to_messages()
        [{'role': 'user', 'content': 'Capital of France?'}]
        """
        messages: list[Message] = [SystemMessage(content=system)] if system else []
        messages.append(UserMessage(content=prompt))
        return cls(messages=messages)

    @classmethod
    def from_messages(cls, messages: Conversation | Sequence[MessageLike]) -> Conversation:
        """Normalize a conversation, or a sequence of messages and role/content mappings."""
        if isinstance(messages, Conversation):
            return messages
        return cls(messages=[to_message(m) for m in messages])

    def to_messages(self) -> list[dict[str, str]]:
        """Return the messages array used by chat APIs."""
        return self.model_dump()["messages"]
