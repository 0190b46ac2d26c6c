"""Render a Signature and concrete input values into a textual prompt.

The prompt has three parts:

1. the signature instructions, if any;
2. one ``<label> <value>`` line per input field that has a value;
3. a block telling the model which output fields to produce and in what format.

Inputs that are missing (or None) never produce a line.
Multi-step modules (i.e., ChainOfThought) reuse the same prompt and append a suffix.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .signature import Signature

logger = logging.getLogger(__name__)

RESPONSE_PLACEHOLDER = "[your response]"


def render_inputs(signature: Signature, inputs: Mapping[str, Any]) -> list[str]:
    """Render one line per provided input, in declared order."""
    lines = []
    for field in signature.input_fields:
        value = inputs.get(field.name)
        if value is None:
            continue
        lines.append(f"{field.label} {value}")
    return lines


def render_output_format(signature: Signature) -> str:
    """Render the instructions describing the expected output fields."""
    fields = signature.output_fields
    if not fields:
        return ""

    if signature.structured:
        lines = ["Provide:"]
        for field in fields:
            desc = f" ({field.description})" if field.description else ""
            lines.append(f"{field.name}{desc}: {RESPONSE_PLACEHOLDER}")
        return "\n".join(lines)

    if len(fields) == 1:
        name = fields[0].name
        return f"Provide the {name} in this format:\n{name}: {RESPONSE_PLACEHOLDER}"

    lines = ["Provide the following fields:"]
    for field in fields:
        lines.append(f"{field.name} ({field.type}): {RESPONSE_PLACEHOLDER}")
    return "\n".join(lines)


def build_prompt(signature: Signature, inputs: Mapping[str, Any], suffix: str | None = None) -> str:
    """Build the prompt text for a signature and its runtime inputs.

    Parameters
    ----------
    signature : Signature
        The signature declaring inputs and outputs.
    inputs : Mapping[str, Any]
        Runtime values keyed by input field name. Unknown keys are ignored.
    suffix : str | None, optional
        Additional instruction appended after the output block, by default None

    Returns
    -------
    str
        The rendered prompt.

    Examples
    --------
    >>> print(build_prompt(Signature.from_string("question -> answer"), {"question": "Capital of France?"}))
    question: Capital of France?
    <BLANKLINE>
    Provide the answer in this format:
    answer: [your response]
    """
    sections = []
    if signature.instructions:
        sections.append(signature.instructions.strip())

    input_lines = render_inputs(signature, inputs)
    if input_lines:
        sections.append("\n".join(input_lines))

    output_format = render_output_format(signature)
    if output_format:
        sections.append(output_format)

    if suffix:
        sections.append(suffix.strip())

    return "\n\n".join(sections).strip()
