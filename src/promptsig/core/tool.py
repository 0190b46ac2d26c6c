"""Named tools the agentic loop can invoke.

A tool is a callable taking a single string argument, together with a name and a
human-readable description that is shown to the model.
The callable may be synchronous or return an awaitable.

Tools can be declared as:

- a bare function (the name is taken from the mapping key or ``__name__``)
- a ``Tool`` instance, i.e. via the ``@tool`` decorator
- a ``{"description": ..., "function": ...}`` dict
"""

from __future__ import annotations

import inspect
import json
import logging
import re
from typing import Any, Awaitable, Callable, Iterable, Literal, Mapping, Union

from pydantic import BaseModel

from ..utilities import maybe_await, suppress_logs

logger = logging.getLogger(__name__)

ToolFunction = Callable[[str], Union[Any, Awaitable[Any]]]

DocstringStyle = Literal["google", "numpy", "sphinx"]


def _detect_docstring_style(doc: str) -> DocstringStyle:
    """Detect the style of a docstring.

    Griffe's automatic style detection is not generally available, so this approximates it.
    """
    scores: dict[DocstringStyle, int] = {"sphinx": 0, "numpy": 0, "google": 0}

    for pattern in (r"^:param\s", r"^:type\s", r"^:return:", r"^:rtype:"):
        if re.search(pattern, doc, re.MULTILINE):
            scores["sphinx"] += 1

    # numpy section headers are underlined with dashes
    for pattern in (r"^Parameters\s*\n\s*-{3,}", r"^Returns\s*\n\s*-{3,}", r"^Yields\s*\n\s*-{3,}"):
        if re.search(pattern, doc, re.MULTILINE):
            scores["numpy"] += 1

    for pattern in (r"^(Args|Arguments):", r"^(Returns):", r"^(Raises):"):
        if re.search(pattern, doc, re.MULTILINE):
            scores["google"] += 1

    max_score = max(scores.values())
    if max_score == 0:
        return "google"

    # sphinx > numpy > google on ties
    for style in ("sphinx", "numpy", "google"):
        if scores[style] == max_score:
            return style
    return "google"


def extract_function_description(fn: Callable) -> str | None:
    """Extract the leading description text from a function's docstring."""
    from griffe import Docstring, DocstringSectionKind

    doc = inspect.getdoc(fn)
    if not doc:
        return None

    with suppress_logs(logging.getLogger("griffe")):
        docstring = Docstring(doc, lineno=1, parser=_detect_docstring_style(doc))
        parsed = docstring.parse()

    description: str | None = next(
        (section.value for section in parsed if section.kind == DocstringSectionKind.text), None
    )
    return description.strip() if description else None


def stringify_result(result: Any) -> str:
    """Render a tool result as observation text."""
    if isinstance(result, str):
        return result
    if isinstance(result, BaseModel):
        return result.model_dump_json()
    try:
        return json.dumps(result)
    except (TypeError, ValueError) as e:
        logger.debug(f"Could not serialize result as json string: {e}")
        return str(result)


class Tool:
    """A named, described callable invoked with a single string argument.

    Parameters
    ----------
    function : ToolFunction
        Callable accepting one string; may return an awaitable.
    name : str | None, optional
        Tool name shown to the model, by default the function's ``__name__``
    description : str | None, optional
        Description shown to the model, by default ``"Tool: <name>"``
    """

    def __init__(self, function: ToolFunction, name: str | None = None, description: str | None = None):
        if not callable(function):
            raise TypeError(f"Tool function must be callable, received {type(function).__name__}")
        self.function = function
        self.name = name or getattr(function, "__name__", None)
        if not self.name or self.name == "<lambda>":
            raise ValueError("Tool name is required for anonymous functions")
        self.description = description or f"Tool: {self.name}"

    def __call__(self, tool_input: str) -> Any:
        return self.function(tool_input)

    async def acall(self, tool_input: str) -> str:
        """Invoke the tool, awaiting the result if needed, and stringify it."""
        result = await maybe_await(self.function(tool_input))
        return stringify_result(result)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, description={self.description!r})"


def tool(
    func: ToolFunction | None = None,
    *,
    name: str | None = None,
    description: str | None = None,
) -> Tool | Callable[[ToolFunction], Tool]:
    """Decorate a function into a Tool, taking its description from the docstring.

    Can be used either as a bare decorator (@tool) or with parameters (@tool(name=...)).

    Examples
    --------
    >>> @tool
    ... def lookup(query: str) -> str:
    ...     \"\"\"Look up a stock ticker symbol for a company name.\"\"\"
    ...     return "AAPL"
    >>> lookup.description
    'Look up a stock ticker symbol for a company name.'
    """

    def decorator(f: ToolFunction) -> Tool:
        return Tool(f, name=name, description=description or extract_function_description(f))

    if func is not None:
        return decorator(func)
    return decorator


ToolDefinition = Union[Tool, ToolFunction, Mapping[str, Any]]


def _to_tool(definition: ToolDefinition, name: str | None = None) -> Tool:
    if isinstance(definition, Tool):
        if name and name != definition.name:
            return Tool(definition.function, name=name, description=definition.description)
        return definition
    if isinstance(definition, Mapping):
        if "function" not in definition:
            raise TypeError(f"Tool definition for '{name}' is missing a 'function'")
        return Tool(definition["function"], name=name or definition.get("name"), description=definition.get("description"))
    if callable(definition):
        return Tool(definition, name=name)
    raise TypeError(f"Unsupported tool definition for '{name}': {type(definition).__name__}")


def normalize_tools(tools: Mapping[str, ToolDefinition] | Iterable[ToolDefinition] | None) -> dict[str, Tool]:
    """Normalize tool declarations into a name -> Tool mapping.

    Examples
    --------
    >>> def add(x: str) -> int:
    ...     return sum(int(i) for i in x.split(","))
    >>> tools = normalize_tools({"add": add, "echo": {"description": "Echo input", "function": str}})
    >>> [(t.name, t.description) for t in tools.values()]
    [('add', 'Tool: add'), ('echo', 'Echo input')]
    """
    if tools is None:
        return {}

    if isinstance(tools, Mapping):
        normalized = {name: _to_tool(definition, name) for name, definition in tools.items()}
    else:
        normalized = {}
        for definition in tools:
            t = _to_tool(definition)
            if t.name in normalized:
                raise ValueError(f"Duplicate tool name '{t.name}'")
            normalized[t.name] = t

    logger.debug(f"Normalized tools: {list(normalized)}")
    return normalized
