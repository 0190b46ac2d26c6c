"""Labeled data records used to exercise modules."""

from __future__ import annotations

from typing import Any, Iterator, Mapping


class Example(Mapping[str, Any]):
    """A record of named values, some of which are designated as module inputs.

    Examples
    --------
    >>> ex = Example(question="Capital of France?", answer="Paris").with_inputs("question")
    >>> ex.inputs()
    {'question': 'Capital of France?'}
    >>> ex.labels()
    {'answer': 'Paris'}
    """

    def __init__(self, data: Mapping[str, Any] | None = None, /, **kwargs: Any):
        self._data = {**(data or {}), **kwargs}
        self._input_keys: tuple[str, ...] | None = None

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

    @property
    def input_keys(self) -> tuple[str, ...] | None:
        return self._input_keys

    def with_inputs(self, *keys: str) -> Example:
        """Return a copy of this example with the given keys designated as inputs."""
        example = type(self)(self._data)
        example._input_keys = tuple(keys)
        return example

    def _require_input_keys(self) -> tuple[str, ...]:
        if self._input_keys is None:
            raise ValueError("Input keys not specified. Use with_inputs() first.")
        return self._input_keys

    def inputs(self) -> dict[str, Any]:
        """Values of the designated input keys."""
        return {key: self._data.get(key) for key in self._require_input_keys()}

    def labels(self) -> dict[str, Any]:
        """Values of every key that is not an input."""
        input_keys = self._require_input_keys()
        return {key: value for key, value in self._data.items() if key not in input_keys}

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r}, input_keys={self._input_keys!r})"
