"""Language model backed by an aisuite (or OpenAI-compatible) chat client."""

from __future__ import annotations

import logging
from typing import Any

from tenacity import Retrying, before_sleep_log, stop_after_attempt, wait_exponential

from aisuite import Client

from .base import BaseLM, LMCallOptions, MessagesLike, to_conversation
from ..types_.core import Conversation
from ..types_.openai_compat import ChatCompletion, CompletionUsage, convert_response

logger = logging.getLogger(__name__)


class ClientLM(BaseLM):
    """Chat completions over an aisuite Client with retries and usage accounting.

    Any client exposing ``chat.completions.create(model=..., messages=..., **params)``
    works, i.e. ``openai.OpenAI``, as long as the model identifier is accepted by it.
    Requests are synchronous; modules run them in a worker thread so concurrent modules do not block the event loop.
    """

    def __init__(
        self,
        client: Client,
        model: str,
        cost_per_1k_prompt: float = 0.0015,
        cost_per_1k_completion: float = 0.002,
        max_retries: int = 3,
        request_params: dict[str, Any] | None = None,
        retry_wait: float = 0.5,
    ):
        """Initialize the language model.

        Parameters
        ----------
        client : Client
            aisuite (or OpenAI-compatible) API client
        model : str
            Model identifier (e.g. 'openai:gpt-4o-mini')
        cost_per_1k_prompt : float, optional
            Cost per 1000 prompt tokens, by default 0.0015
        cost_per_1k_completion : float, optional
            Cost per 1000 completion tokens, by default 0.002
        max_retries : int, optional
            Maximum number of attempts per request, by default 3
        request_params : dict[str, Any] | None, optional
            Additional API parameters sent with every request, by default None
        retry_wait : float, optional
            Multiplier (seconds) for exponential backoff between attempts, by default 0.5
        """
        super().__init__()
        if max_retries < 1:
            raise ValueError("max_retries must be >= 1")

        self.client = client
        self.model = model
        self.request_params = request_params
        self.cost_per_1k_prompt = cost_per_1k_prompt
        self.cost_per_1k_completion = cost_per_1k_completion
        self.max_retries = max_retries
        self.retry_wait = retry_wait

    @property
    def model(self) -> str:
        """Get the model identifier in 'provider:name' format."""
        return self._model

    @model.setter
    def model(self, model: str):
        if not model or not isinstance(model, str):
            raise ValueError("Model must be a non-empty string")
        if ":" not in model:
            raise ValueError(
                "Model must be in format 'provider:identifier' (e.g., 'openai:gpt-4o' or 'anthropic:claude-3-5-haiku-latest')"
            )
        self._model = model

    @property
    def request_params(self) -> dict[str, Any]:
        """Request parameters used for every execution."""
        return self._request_params

    @request_params.setter
    def request_params(self, request_params: dict[str, Any] | None):
        params = dict(request_params or {})
        if "model" in params:
            raise ValueError("'model' should be set separately")
        self._request_params = params
        logger.debug(f"All API requests for {self.__class__.__name__} will use params : {self._request_params}")

    def chat(self, messages: MessagesLike, options: LMCallOptions | None = None) -> str:
        conversation = to_conversation(messages)
        params: dict[str, Any] = {**self.request_params, **(options.to_params() if options else {})}

        response = self._chat_completions_create(conversation, params)
        if response.usage is not None:
            self._record_completion_usage(response.usage)
        return response.content

    def _chat_completions_create(self, conversation: Conversation, params: dict[str, Any]) -> ChatCompletion:
        """Call the chat endpoint, retrying failed requests, and convert its response."""
        for attempt in Retrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.retry_wait, max=30),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                response = self.client.chat.completions.create(
                    model=self.model,
                    messages=conversation.to_messages(),
                    **params,
                )
        return convert_response(response)

    def _record_completion_usage(self, usage: CompletionUsage) -> None:
        cost = (
            usage.prompt_tokens / 1000 * self.cost_per_1k_prompt
            + usage.completion_tokens / 1000 * self.cost_per_1k_completion
        )
        self.record_usage(usage.prompt_tokens, usage.completion_tokens, cost)
