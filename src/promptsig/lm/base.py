"""Language model capability.

Modules only depend on the ``LanguageModel`` protocol: generate text for a prompt,
chat over an ordered list of messages, and report cumulative usage.
Implementations may be synchronous or return awaitables; modules await whatever comes back.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import json
import logging
from typing import Any, Awaitable, Protocol, Sequence, Type, Union

import json_repair
from pydantic import BaseModel, Field
from typing_extensions import runtime_checkable

from ..types_.core import Conversation, MessageLike
from ..utilities import extract_json

logger = logging.getLogger(__name__)

MessagesLike = Union[Conversation, Sequence[MessageLike]]


class LMCallOptions(BaseModel, extra="forbid"):
    """Per-call generation options; unset options are not forwarded to the backend."""

    temperature: float | None = Field(default=None, ge=0)
    max_tokens: int | None = Field(default=None, gt=0)
    top_p: float | None = Field(default=None, ge=0, le=1)
    stop: list[str] | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None

    def to_params(self) -> dict[str, Any]:
        """Return only the options that were set."""
        return self.model_dump(exclude_none=True)


class UsageStats(BaseModel):
    """Cumulative token and cost counters."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    total_cost: float = 0.0


@runtime_checkable
class LanguageModel(Protocol):
    """Protocol for language model backends."""

    def generate(self, prompt: str, options: LMCallOptions | None = None) -> str | Awaitable[str]:
        """Generate a completion for a single prompt."""
        ...

    def chat(self, messages: MessagesLike, options: LMCallOptions | None = None) -> str | Awaitable[str]:
        """Generate a completion for an ordered list of messages."""
        ...

    def get_usage(self) -> UsageStats:
        """Return cumulative usage since construction or the last reset."""
        ...

    def reset_usage(self) -> None:
        """Reset cumulative usage."""
        ...


def to_conversation(messages: MessagesLike) -> Conversation:
    """Normalize messages to a Conversation."""
    return Conversation.from_messages(messages)


class BaseLM(ABC):
    """Base for synchronous language models.

    Subclasses implement ``chat``; ``generate`` wraps the prompt as a single user message.
    Usage is accumulated with ``record_usage`` and read back as a copy.
    """

    def __init__(self):
        self._usage = UsageStats()

    @abstractmethod
    def chat(self, messages: MessagesLike, options: LMCallOptions | None = None) -> str: ...

    def generate(self, prompt: str, options: LMCallOptions | None = None) -> str:
        return self.chat(Conversation.from_prompt(prompt), options)

    def generate_structured(
        self,
        prompt: str,
        schema: Type[BaseModel] | dict[str, Any],
        options: LMCallOptions | None = None,
    ) -> BaseModel | Any:
        """Generate a JSON reply conforming to a schema.

        Parameters
        ----------
        prompt : str
            The prompt text.
        schema : Type[BaseModel] | dict[str, Any]
            A pydantic model class (the reply is validated against it) or a JSON schema dict.
        options : LMCallOptions | None, optional
            Generation options, by default None

        Returns
        -------
        BaseModel | Any
            A validated model instance, or the repaired JSON value for dict schemas.

        Raises
        ------
        pydantic.ValidationError
            If the reply does not validate against the pydantic model.
        """
        if isinstance(schema, type) and issubclass(schema, BaseModel):
            json_schema = schema.model_json_schema()
        else:
            json_schema = schema

        structured_prompt = (
            f"{prompt}\n\n"
            "Respond only with a JSON object conforming to the following JSON schema:\n"
            f"{json.dumps(json_schema, indent=2)}"
        )
        reply = self.generate(structured_prompt, options)
        data = json_repair.loads(extract_json(reply))
        logger.debug(f"Structured reply: {data}")

        if isinstance(schema, type) and issubclass(schema, BaseModel):
            return schema.model_validate(data)
        return data

    def record_usage(self, prompt_tokens: int, completion_tokens: int, cost: float = 0.0) -> None:
        self._usage = UsageStats(
            prompt_tokens=self._usage.prompt_tokens + prompt_tokens,
            completion_tokens=self._usage.completion_tokens + completion_tokens,
            total_tokens=self._usage.total_tokens + prompt_tokens + completion_tokens,
            total_cost=self._usage.total_cost + cost,
        )

    def get_usage(self) -> UsageStats:
        return self._usage.model_copy()

    def reset_usage(self) -> None:
        self._usage = UsageStats()
