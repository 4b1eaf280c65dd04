"""Flat global variable namespace used by a running script."""
from __future__ import annotations

from typing import Dict, Iterator, Mapping

from scenescript.domain.values import StoryValue


class VariableStore:
    """Name to value mapping owned by a single execution state."""

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, StoryValue] | None = None) -> None:
        self._values: Dict[str, StoryValue] = dict(values or {})

    def get(self, name: str) -> StoryValue | None:
        return self._values.get(name)

    def set(self, name: str, value: StoryValue) -> None:
        self._values[name] = value

    def copy(self) -> "VariableStore":
        return VariableStore(self._values)

    def as_dict(self) -> Dict[str, StoryValue]:
        return dict(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._values))

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VariableStore):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"VariableStore({self._values!r})"
