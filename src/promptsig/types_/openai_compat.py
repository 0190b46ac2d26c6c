from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel

from aisuite.framework import ChatCompletionResponse as AISuiteChatCompletion
from openai.types.chat import ChatCompletion as OpenAIChatCompletion

logger = logging.getLogger(__name__)


# OpenAI compatibility
class ChatCompletionMessage(BaseModel, extra="ignore"):
    role: Literal["assistant", "system", "user", "tool"] = "assistant"
    content: str | None = None
    refusal: str | None = None


class ChatCompletionChoice(BaseModel, extra="ignore"):
    finish_reason: Literal["stop", "length", "tool_calls", "content_filter", "function_call"] | None = None
    message: ChatCompletionMessage


class CompletionUsage(BaseModel, extra="ignore"):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatCompletion(BaseModel, extra="ignore"):
    id: int | str | None = None
    choices: list[ChatCompletionChoice]
    usage: CompletionUsage | None = None

    @property
    def content(self) -> str:
        """Text content of the first choice, or empty string."""
        if not self.choices:
            return ""
        return self.choices[0].message.content or ""


def _model_dump(obj) -> dict | None:
    if obj is None:
        return None
    if isinstance(obj, BaseModel):
        return obj.model_dump()
    if isinstance(obj, dict):
        return obj
    return {k: v for k, v in vars(obj).items() if not k.startswith("_")}


def convert_response(response: OpenAIChatCompletion | AISuiteChatCompletion) -> ChatCompletion:
    """Unify aisuite response object types."""
    if isinstance(response, ChatCompletion):
        return response

    if isinstance(response, OpenAIChatCompletion):
        return ChatCompletion(**response.model_dump())

    choices = []
    for choice in response.choices:
        message = ChatCompletionMessage(**{k: v for k, v in _model_dump(choice.message).items() if v is not None})

        choices.append(
            ChatCompletionChoice(
                message=message,
                finish_reason=choice.finish_reason if hasattr(choice, "finish_reason") else None,
            )
        )

    usage = _model_dump(getattr(response, "usage", None))
    return ChatCompletion(
        id=response.id if hasattr(response, "id") else None,
        choices=choices,
        usage=CompletionUsage(**{k: v for k, v in usage.items() if v is not None}) if usage else None,
    )
