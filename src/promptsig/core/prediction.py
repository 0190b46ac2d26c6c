"""Read-only results produced by modules."""

from __future__ import annotations

import json
import logging
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Sequence

logger = logging.getLogger(__name__)


class Prediction(Mapping[str, Any]):
    """Immutable mapping of output field names to parsed values.

    Values are available by item access, ``get``, or as attributes.
    Modules may attach a ``trace`` of intermediate records, which is not part of the outputs.

    Examples
    --------
    >>> pred = Prediction({"answer": "Paris", "steps": 1})
    >>> pred["answer"], pred.answer, pred.get("missing", "n/a")
    ('Paris', 'Paris', 'n/a')
    >>> pred == {"answer": "Paris", "steps": 1}
    True
    """

    __slots__ = ("_data", "_trace")

    def __init__(self, data: Mapping[str, Any] | None = None, trace: Sequence[Any] | None = None):
        object.__setattr__(self, "_data", MappingProxyType(dict(data or {})))
        object.__setattr__(self, "_trace", tuple(trace or ()))

    @property
    def trace(self) -> tuple[Any, ...]:
        """Intermediate records of the invocation that produced this prediction."""
        return self._trace

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(f"'{type(self).__name__}' has no field '{name}'") from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"'{type(self).__name__}' is read-only")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"'{type(self).__name__}' is read-only")

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable copy of the outputs."""
        return dict(self._data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self._data)!r})"

    def __str__(self) -> str:
        return json.dumps(dict(self._data), indent=2, default=str)
