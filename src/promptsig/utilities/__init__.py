import json
import textwrap

from .async_helpers import maybe_await, synchronize
from .log_helpers import suppress_logs
from .parse import extract_json, looks_like_json

__all__ = [
    "suppress_logs",
    "maybe_await",
    "synchronize",
    "extract_json",
    "looks_like_json",
    "to_snake_case",
    "format_json",
]


def to_snake_case(text: str) -> str:
    """Convert text to snake_case."""
    import re

    # Replace spaces and hyphens with underscores
    text = text.strip()
    text = re.sub(r"[\s-]+", "_", text)

    # Convert camelCase, PascalCase, and cases like HTTPHeader to snake_case
    text = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", text)
    text = re.sub(r"([A-Z]+)([A-Z][a-z0-9])", r"\1_\2", text)

    # Convert to lowercase
    return text.lower()


def format_json(data, width: int = 100, indent: int = 2, level: int = 0) -> str:
    """Format JSON data with proper indentation and line wrapping."""
    prefix = " " * (level * indent)

    if isinstance(data, dict):
        if not data:
            return "{}"

        lines = ["{"]
        items = list(data.items())
        for i, (key, value) in enumerate(items):
            key_prefix = f'{prefix}  "{key}": '
            key_indent = " " * len(key_prefix)

            formatted_value = format_json(value, width=width, indent=indent, level=level + 1)

            if isinstance(value, str):
                # Handle each line segment separately
                segments = []
                for segment in value.split("\n"):
                    wrapped = textwrap.fill(
                        segment,
                        width=max(width - len(key_prefix), 1),
                        initial_indent=key_indent,
                        subsequent_indent=key_indent + " ",
                        drop_whitespace=False,
                    )
                    segments.append(wrapped)
                formatted_value = '"{}"'.format((key_indent + "\n").join(segments).strip())

            comma = "," if i < len(items) - 1 else ""
            lines.append(f"{key_prefix}{formatted_value}{comma}")

        lines.append(prefix + "}")
        return "\n".join(lines)

    elif isinstance(data, list):
        if not data:
            return "[]"

        lines = ["["]
        for i, item in enumerate(data):
            formatted_item = format_json(item, width, indent, level + 1)
            comma = "," if i < len(data) - 1 else ""
            lines.append(f"{prefix}  {formatted_item}{comma}")

        lines.append(prefix + "]")
        return "\n".join(lines)

    elif isinstance(data, str):
        try:
            return format_json(json.loads(data), width, indent, level)
        except json.JSONDecodeError:
            return '"{}"'.format(data)

    elif data is None:
        return "null"

    else:
        return str(data).lower()
