"""Typed signatures for prompting interactions.

A Signature declares the named input fields a module renders into its prompt and
the named output fields it parses back out of the model's reply.
Every field carries a semantic type tag that drives coercion of the parsed value.

Signatures can be declared two ways, both normalizing to the same representation:

- a terse string, ``"question, context -> answer: string, confidence: float"``
- a structured field list, via ``Signature.from_fields(inputs=[...], outputs=[...])``

Examples
--------
>>> sig = Signature.from_string("question -> answer, score: float")
>>> sig.input_names, sig.output_names
(['question'], ['answer', 'score'])
>>> sig.types["score"]
'float'
>>> sig.prompt_format
'question -> answer, score'
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Literal

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ConfigurationError, SignatureError

logger = logging.getLogger(__name__)

DEFAULT_TYPE = "string"
SEPARATOR = "->"

FieldRole = Literal["input", "output"]


class FieldSpec(BaseModel):
    """Declaration of a single signature field."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(description="Field name, unique within a signature.", min_length=1)
    description: str = Field(default="", description="Human readable description of the field.")
    type: str = Field(default=DEFAULT_TYPE, description="Semantic type tag used for output coercion.")
    required: bool = Field(default=True, description="Whether the field is required.")
    prefix: str | None = Field(default=None, description="Custom label used when rendering the field.")

    @property
    def label(self) -> str:
        """Label used when rendering an input value into the prompt."""
        return self.prefix or f"{self.name}:"


FieldDeclaration = FieldSpec | dict[str, Any]


def _default_description(name: str, role: FieldRole) -> str:
    return f"{role.capitalize()} field: {name}"


def _to_field(decl: FieldDeclaration, role: FieldRole) -> FieldSpec:
    if isinstance(decl, FieldSpec):
        spec = decl
    elif isinstance(decl, dict):
        spec = FieldSpec(**{k: v for k, v in decl.items() if v is not None})
    else:
        raise SignatureError(f"Unsupported field declaration {decl!r} ({type(decl).__name__})")

    if not spec.description:
        spec = spec.model_copy(update={"description": _default_description(spec.name, role)})
    return spec


def _parse_field_list(part: str, role: FieldRole) -> list[FieldSpec]:
    """Parse one side of a string signature into field specs."""
    fields = []
    for segment in part.split(","):
        segment = segment.strip()
        if not segment:
            continue
        name, _, type_ = segment.partition(":")
        name = name.strip()
        if not name:
            raise SignatureError(f"Missing field name in signature segment '{segment}'")
        fields.append(
            FieldSpec(
                name=name,
                type=type_.strip() or DEFAULT_TYPE,
                description=_default_description(name, role),
            )
        )
    return fields


def _check_unique_names(*groups: Iterable[FieldSpec]) -> None:
    seen: set[str] = set()
    for group in groups:
        for field in group:
            if field.name in seen:
                raise SignatureError(f"Duplicate field name '{field.name}' in signature")
            seen.add(field.name)


class Signature(BaseModel):
    """Ordered input and output fields for one prompting interaction.

    Attributes
    ----------
    input_fields : tuple[FieldSpec, ...]
        Fields rendered into the prompt, in declaration order.
    output_fields : tuple[FieldSpec, ...]
        Fields parsed from the reply, in declaration order.
    instructions : str | None
        Optional leading instruction line for the prompt.
    structured : bool
        True when declared as a field list rather than a terse string.
        Structured signatures get richer output instructions and stricter final answer handling.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    input_fields: tuple[FieldSpec, ...] = ()
    output_fields: tuple[FieldSpec, ...] = ()
    instructions: str | None = None
    structured: bool = False

    @classmethod
    def from_string(cls, signature: str, instructions: str | None = None) -> Signature:
        """Parse a terse ``"in1, in2 -> out1: type, out2"`` signature.

        Raises
        ------
        SignatureError
            If the string does not contain exactly one '->' separator.
        """
        if not isinstance(signature, str):
            raise SignatureError(f"Expected signature string, received {type(signature).__name__}")

        parts = signature.split(SEPARATOR)
        if len(parts) != 2:
            raise SignatureError(f"Signature must contain exactly one '{SEPARATOR}' separator: '{signature}'")

        input_fields = _parse_field_list(parts[0], "input")
        output_fields = _parse_field_list(parts[1], "output")
        _check_unique_names(input_fields, output_fields)
        return cls(
            input_fields=tuple(input_fields),
            output_fields=tuple(output_fields),
            instructions=instructions,
            structured=False,
        )

    @classmethod
    def from_fields(
        cls,
        inputs: Iterable[FieldDeclaration] = (),
        outputs: Iterable[FieldDeclaration] = (),
        instructions: str | None = None,
    ) -> Signature:
        """Build a structured signature from field declarations.

        Each declaration is a FieldSpec or a dict with ``name`` and optional
        ``description``, ``type``, ``required`` and ``prefix`` keys.

        Examples
        --------
        >>> sig = Signature.from_fields(
        ...     inputs=[{"name": "company", "description": "Company to look up"}],
        ...     outputs=[{"name": "symbol"}, {"name": "price", "type": "float"}],
        ...     instructions="Find the stock price for a company.",
        ... )
        >>> sig.structured
        True
        """
        input_fields = [_to_field(d, "input") for d in inputs]
        output_fields = [_to_field(d, "output") for d in outputs]
        _check_unique_names(input_fields, output_fields)
        return cls(
            input_fields=tuple(input_fields),
            output_fields=tuple(output_fields),
            instructions=instructions,
            structured=True,
        )

    @property
    def input_names(self) -> list[str]:
        return [f.name for f in self.input_fields]

    @property
    def output_names(self) -> list[str]:
        return [f.name for f in self.output_fields]

    @property
    def types(self) -> dict[str, str]:
        """Map of field name to type tag, for inputs and outputs."""
        return {f.name: f.type for f in (*self.input_fields, *self.output_fields)}

    @property
    def prompt_format(self) -> str:
        """Compact ``in1, in2 -> out1, out2`` form, useful for diagnostics."""
        return f"{', '.join(self.input_names)} {SEPARATOR} {', '.join(self.output_names)}"

    def __str__(self) -> str:
        return self.prompt_format


def ensure_signature(signature: Signature | str | None) -> Signature:
    """Normalize a signature declaration.

    Raises
    ------
    ConfigurationError
        If no signature was provided.
    SignatureError
        If a string signature is malformed.
    """
    if signature is None:
        raise ConfigurationError("No signature provided")
    if isinstance(signature, Signature):
        return signature
    if isinstance(signature, str):
        return Signature.from_string(signature)
    raise SignatureError(f"Unsupported signature type: {type(signature).__name__}")
