"""Single-shot and reasoning prediction modules."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel

from .exceptions import PredictionError
from .module import Module
from .parser import parse_output
from .prediction import Prediction
from .prompt import build_prompt
from .. import config

logger = logging.getLogger(__name__)

REASONING_SUFFIX = "Let's think step by step. Please provide your reasoning:"
ANSWER_SUFFIX = "Based on this reasoning, provide your final answer:"


class TraceEntry(BaseModel):
    """Prompt and completion of one model call."""

    prompt: str
    completion: str


class Predict(Module):
    """Render the signature into a prompt, call the model once, and parse the reply.

    Any failure while building the prompt, generating, or parsing is raised as a PredictionError.

    Examples
    --------
    >>> qa = Predict("question -> answer", lm=lm)  # doctest: +SKIP
    >>> qa(question="What is the capital of France?").answer  # doctest: +SKIP
    'Paris'
    """

    async def forward(self, **inputs: Any) -> Prediction:
        lm = self.lm
        trace: list[TraceEntry] = []
        try:
            prompt = build_prompt(self.signature, inputs)
            completion = await self.generate(lm, prompt)
            trace.append(TraceEntry(prompt=prompt, completion=completion))
            outputs = parse_output(self.signature, completion)
        except Exception as e:
            raise PredictionError(f"Prediction failed: {e}") from e

        return Prediction(outputs, trace=trace if config.get_settings().tracing else None)


class ChainOfThought(Predict):
    """Ask the model to reason step by step, then answer given that reasoning.

    Makes two model calls per invocation.
    The reasoning text is returned alongside the outputs under the ``reasoning`` key.
    """

    async def forward(self, **inputs: Any) -> Prediction:
        lm = self.lm
        trace: list[TraceEntry] = []
        try:
            reasoning_prompt = build_prompt(self.signature, inputs, suffix=REASONING_SUFFIX)
            reasoning = await self.generate(lm, reasoning_prompt)
            trace.append(TraceEntry(prompt=reasoning_prompt, completion=reasoning))

            answer_prompt = build_prompt(
                self.signature,
                inputs,
                suffix=f"Reasoning: {reasoning}\n\n{ANSWER_SUFFIX}",
            )
            completion = await self.generate(lm, answer_prompt)
            trace.append(TraceEntry(prompt=answer_prompt, completion=completion))

            outputs = parse_output(self.signature, completion)
        except Exception as e:
            raise PredictionError(f"ChainOfThought failed: {e}") from e

        outputs["reasoning"] = reasoning
        return Prediction(outputs, trace=trace if config.get_settings().tracing else None)
