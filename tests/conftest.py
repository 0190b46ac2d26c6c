from __future__ import annotations

from typing import Any, Iterable

import pytest

from promptsig import config
from promptsig.lm.base import BaseLM, LMCallOptions, MessagesLike, to_conversation


class ScriptedLM(BaseLM):
    """Language model replaying canned replies and recording every request."""

    def __init__(self, replies: Iterable[str]):
        super().__init__()
        self.replies = list(replies)
        self.prompts: list[str] = []
        self.options: list[LMCallOptions | None] = []

    def chat(self, messages: MessagesLike, options: LMCallOptions | None = None) -> str:
        conversation = to_conversation(messages)
        self.prompts.append(conversation.messages[-1].content)
        self.options.append(options)
        if not self.replies:
            raise RuntimeError("ScriptedLM ran out of replies")
        self.record_usage(prompt_tokens=10, completion_tokens=5)
        return self.replies.pop(0)


class AsyncScriptedLM:
    """Asynchronous language model satisfying the LanguageModel protocol."""

    def __init__(self, replies: Iterable[str]):
        self.lm = ScriptedLM(replies)

    @property
    def prompts(self) -> list[str]:
        return self.lm.prompts

    async def generate(self, prompt: str, options: LMCallOptions | None = None) -> str:
        return self.lm.generate(prompt, options)

    async def chat(self, messages: MessagesLike, options: LMCallOptions | None = None) -> str:
        return self.lm.chat(messages, options)

    def get_usage(self) -> Any:
        return self.lm.get_usage()

    def reset_usage(self) -> None:
        self.lm.reset_usage()


@pytest.fixture(autouse=True)
def reset_config():
    """Isolate the process-wide configuration between tests."""
    config.reset()
    yield
    config.reset()


@pytest.fixture
def scripted_lm():
    """Factory for ScriptedLM instances."""

    def _make(*replies: str) -> ScriptedLM:
        return ScriptedLM(replies)

    return _make


@pytest.fixture
def async_scripted_lm():
    """Factory for AsyncScriptedLM instances."""

    def _make(*replies: str) -> AsyncScriptedLM:
        return AsyncScriptedLM(replies)

    return _make
