"""Agentic tool-use loop.

ReAct asks the model for one step at a time.
Each reply either requests a tool (``Action:`` / ``Action Input:``), declares a
``Final Answer:``, or neither.
Tool results are appended to the transcript as observations and the model is asked for the next step,
until it produces a final answer or the step budget runs out.

Tool calls take priority over final answers in the same reply, identical tool calls are executed
only once per invocation, and tool errors are reported to the model rather than raised.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Iterable, Mapping, NamedTuple

from jinja2 import StrictUndefined, Template
from pydantic import BaseModel

from .exceptions import ConfigurationError, MaxStepsExceededError
from .module import Module
from .parser import parse_output
from .prediction import Prediction
from .signature import Signature
from .tool import Tool, ToolDefinition, normalize_tools
from .. import config
from ..lm.base import LanguageModel, LMCallOptions

logger = logging.getLogger(__name__)

ACTION_PATTERN = re.compile(r"Action:[ \t]*(.+?)[ \t]*$", re.MULTILINE)
ACTION_INPUT_PATTERN = re.compile(r"Action Input:[ \t]*(.*?)[ \t]*$", re.MULTILINE)
FINAL_ANSWER_PATTERN = re.compile(r"final answer:", re.IGNORECASE)
NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")

THOUGHT_CUE = "\n\nThought:"
REPEATED_CALL_OBSERVATION = "You have already made this tool call. Please move to the next step."

INITIAL_PROMPT = Template(
    """\
{% if instructions %}
{{ instructions }}

{% endif %}
{% if tools %}
You have access to the following tools:
{% for tool in tools %}
- {{ tool.name }}: {{ tool.description }}
{% endfor %}
{% else %}
You have no tools available.
{% endif %}

Question: {{ question }}

{% if tools %}
IMPORTANT: You MUST use the available tools to solve this question. \
Do not attempt to answer directly without using tools when tools are available for the task.

{% endif %}
CRITICAL: Take ONE action at a time. After each action, you will receive an observation. \
Do NOT plan multiple actions in advance.

Work systematically:
1. Gather all necessary data using tools
2. Perform calculations if needed
3. When you have ALL the information needed to answer the question completely, provide your Final Answer

Use this EXACT format (DO NOT generate the Observation line - it will be provided automatically):
Thought: [your reasoning about what to do next]
Action: [tool name]
Action Input: [input to the tool]

After you receive the Observation, you can then decide your next action.

When you have gathered ALL necessary information through tool usage, provide:
Thought: [reasoning that you now have everything needed]
Final Answer: [complete answer to the original question using all gathered information]
{% if output_fields %}

IMPORTANT: When providing your Final Answer, you MUST provide ALL the following fields in this EXACT format:

{% for field in output_fields %}
{{ field.name }}: [your response for {{ field.name }}]{% if not field.required %} (optional){% endif %}

{% endfor %}
{% endif %}

Begin! Remember: ONE action at a time, then decide if you need more information or can provide the final answer.""",
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)


class ToolCall(NamedTuple):
    tool: str
    input: str


class FinalAnswer(NamedTuple):
    value: Any
    text: str


class StepRecord(BaseModel):
    """What happened in one iteration of the loop."""

    step: int
    response: str
    tool: str | None = None
    tool_input: str | None = None
    repeated: bool = False
    observation: str | None = None


def extract_tool_call(response: str) -> ToolCall | None:
    """Find an ``Action:`` / ``Action Input:`` pair in a reply."""
    action = ACTION_PATTERN.search(response)
    action_input = ACTION_INPUT_PATTERN.search(response)
    if not (action and action_input):
        return None

    name = action.group(1).strip()
    if not name:
        return None
    return ToolCall(tool=name, input=action_input.group(1).strip())


def convert_answer(text: str) -> Any:
    """Interpret raw answer text as a number, then as JSON, else keep the string."""
    if NUMBER_PATTERN.match(text):
        return int(text) if INTEGER_PATTERN.match(text) else float(text)
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def extract_final_answer(response: str) -> FinalAnswer | None:
    """Find a ``Final Answer:`` in a reply.

    The answer value is the rest of the label's line, converted with ``convert_answer``.
    When the label ends its line, the text on the following lines is used instead.
    ``text`` holds everything after the label.
    A label with nothing after it is not an answer.
    """
    match = FINAL_ANSWER_PATTERN.search(response)
    if not match:
        return None

    text = response[match.end() :].strip()
    if not text:
        return None
    line = response[match.end() :].split("\n", 1)[0].strip()
    return FinalAnswer(value=convert_answer(line or text), text=text)


class ReAct(Module):
    """Reason-and-act loop over a set of tools.

    Parameters
    ----------
    signature : Signature | str
        The signature; the ``question`` input (or all inputs, as JSON) is posed to the model.
    tools : Mapping[str, ToolDefinition] | Iterable[ToolDefinition] | None, optional
        Tools the model may call, by default None
    max_steps : int | None, optional
        Maximum number of model calls, by default the configured ``max_steps`` (6)
    lm : LanguageModel | None, optional
        Language model to use, by default the configured default
    options : LMCallOptions | None, optional
        Generation options forwarded to every model call, by default None
    allow_partial : bool, optional
        Accept structured final answers that are missing required fields as long as at least one
        field was found, by default False

    Examples
    --------
    >>> agent = ReAct("question -> answer", tools={"add": add}, lm=lm)  # doctest: +SKIP
    >>> agent(question="What is 2 + 3?")  # doctest: +SKIP
    Prediction({'answer': '5', 'steps': 2})
    """

    def __init__(
        self,
        signature: Signature | str,
        tools: Mapping[str, ToolDefinition] | Iterable[ToolDefinition] | None = None,
        max_steps: int | None = None,
        lm: LanguageModel | None = None,
        options: LMCallOptions | None = None,
        allow_partial: bool = False,
    ):
        super().__init__(signature, lm=lm, options=options)
        self.tools: dict[str, Tool] = normalize_tools(tools)
        self.max_steps = max_steps if max_steps is not None else config.get_settings().max_steps
        if self.max_steps < 1:
            raise ValueError(f"max_steps must be >= 1, received {self.max_steps}")
        self.allow_partial = allow_partial

    def render_initial_prompt(self, inputs: Mapping[str, Any]) -> str:
        question = inputs.get("question") or json.dumps(dict(inputs), default=str)
        return INITIAL_PROMPT.render(
            instructions=self.signature.instructions,
            tools=list(self.tools.values()),
            question=question,
            output_fields=self.signature.output_fields if self.signature.structured else (),
        ).strip()

    async def forward(self, **inputs: Any) -> Prediction:
        lm = self.lm
        transcript = [self.render_initial_prompt(inputs)]
        seen_calls: set[str] = set()
        trace: list[StepRecord] = []

        for step in range(1, self.max_steps + 1):
            response = await self.generate(lm, "\n\n".join(transcript) + THOUGHT_CUE)
            transcript.append(f"Thought: {response}")

            call = extract_tool_call(response)
            if call is not None:
                key = f"{call.tool}:{call.input}"
                repeated = key in seen_calls
                if repeated:
                    logger.warning(f"Step {step}: repeated tool call '{key}'")
                    observation = REPEATED_CALL_OBSERVATION
                else:
                    seen_calls.add(key)
                    observation = await self.run_tool(call)

                transcript.append(f"Observation: {observation}")
                trace.append(
                    StepRecord(
                        step=step,
                        response=response,
                        tool=call.tool,
                        tool_input=call.input,
                        repeated=repeated,
                        observation=observation,
                    )
                )
                continue

            answer = extract_final_answer(response)
            if answer is not None:
                outputs, observation = self.resolve_answer(answer)
                if outputs is None:
                    logger.debug(f"Step {step}: incomplete final answer")
                    transcript.append(f"Observation: {observation}")
                    trace.append(StepRecord(step=step, response=response, observation=observation))
                    continue

                trace.append(StepRecord(step=step, response=response))
                logger.debug(f"Finished in {step} step(s)")
                return Prediction({**outputs, "steps": step}, trace=trace)

            logger.debug(f"Step {step}: no tool call or final answer")
            trace.append(StepRecord(step=step, response=response))

        logger.warning(f"Exceeded maximum steps ({self.max_steps})")
        raise MaxStepsExceededError(self.max_steps, module=self.__class__.__name__)

    async def run_tool(self, call: ToolCall) -> str:
        """Execute a tool call and return the observation text."""
        tool = self.tools.get(call.tool)
        if tool is None:
            logger.warning(f"Requested unknown tool '{call.tool}'")
            return f"Error: Tool '{call.tool}' not found. Available tools: {', '.join(self.tools)}"

        try:
            result = await tool.acall(call.input)
        except Exception as e:
            logger.warning(f"Tool '{call.tool}' failed: {e!r}")
            return f"Error - {e}"
        logger.debug(f"Tool '{call.tool}' returned: {result}")
        return result

    def resolve_answer(self, answer: FinalAnswer) -> tuple[dict[str, Any] | None, str | None]:
        """Turn a final answer into outputs, or an observation asking for the missing fields."""
        signature = self.signature
        if signature.structured and signature.output_fields:
            parsed = parse_output(signature, answer.text)
            found = [name for name, value in parsed.items() if value is not None]
            missing = [f.name for f in signature.output_fields if f.required and parsed[f.name] is None]
            if not found or (missing and not self.allow_partial):
                fields = ", ".join(missing or signature.output_names)
                return None, (
                    f"Your Final Answer needs to include structured fields: {fields}. "
                    "Please provide a Final Answer with the required format."
                )
        else:
            parsed = parse_output(signature, answer.value)

        if not any(value is not None for value in parsed.values()):
            return {"answer": answer.value}, None
        if "answer" in parsed and parsed["answer"] is None:
            parsed["answer"] = answer.value
        return parsed, None

    def dump_state(self) -> dict[str, Any]:
        state = super().dump_state()
        state["max_steps"] = self.max_steps
        state["allow_partial"] = self.allow_partial
        state["tools"] = list(self.tools)
        return state

    @classmethod
    def from_state(cls, state: dict[str, Any], **kwargs: Any) -> ReAct:
        if "tools" not in kwargs:
            raise ConfigurationError(f"Loading {cls.__name__} requires tools=; saved tools: {state.get('tools', [])}")
        kwargs.setdefault("max_steps", state.get("max_steps"))
        kwargs.setdefault("allow_partial", state.get("allow_partial", False))
        return super().from_state(state, **kwargs)
