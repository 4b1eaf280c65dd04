"""Immutable program representation shared by the engine and the analyzer."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import FrozenSet, Iterator, Mapping, Sequence, Tuple

from scenescript.domain.defs import Instruction, jump_targets


@dataclass(frozen=True, slots=True)
class Program:
    """Validated instruction sequence plus its label index.

    ``source_lines[i]`` is the 1-indexed script line that produced
    ``instructions[i]``.
    """

    instructions: Tuple[Instruction, ...]
    labels: Mapping[str, int]
    conditions: FrozenSet[str] = frozenset()
    source_lines: Tuple[int, ...] = field(default=())

    @classmethod
    def build(
        cls,
        instructions: Sequence[Instruction],
        labels: Mapping[str, int],
        conditions: Sequence[str] | FrozenSet[str] = frozenset(),
        source_lines: Sequence[int] = (),
    ) -> "Program":
        return cls(
            instructions=tuple(instructions),
            labels=MappingProxyType(dict(labels)),
            conditions=frozenset(conditions),
            source_lines=tuple(source_lines),
        )

    def __len__(self) -> int:
        return len(self.instructions)

    def __getitem__(self, index: int) -> Instruction:
        return self.instructions[index]

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def label_index(self, name: str) -> int | None:
        return self.labels.get(name)

    def line_of(self, index: int) -> int | None:
        if 0 <= index < len(self.source_lines):
            return self.source_lines[index]
        return None

    def targets_of(self, index: int) -> Tuple[int, ...]:
        """Resolve the jump/choice targets of an instruction to indices."""
        resolved = []
        for name in jump_targets(self.instructions[index]):
            target = self.labels.get(name)
            if target is not None:
                resolved.append(target)
        return tuple(resolved)
