"""Instruction structures produced by the parser and run by the engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple, Union

from scenescript.core.types import Comparator, Operator
from scenescript.domain.values import StoryValue


@dataclass(frozen=True, slots=True)
class Say:
    """Dialogue line spoken by a character."""

    speaker: str
    text: str


@dataclass(frozen=True, slots=True)
class PlayBgm:
    resource: str


@dataclass(frozen=True, slots=True)
class PlaySe:
    resource: str


@dataclass(frozen=True, slots=True)
class PlayMovie:
    resource: str


@dataclass(frozen=True, slots=True)
class ShowImage:
    resource: str
    layer: str = "default"


@dataclass(frozen=True, slots=True)
class Wait:
    """Advisory pause for the host; the engine never sleeps."""

    seconds: float


@dataclass(frozen=True, slots=True)
class Choice:
    """Single selectable option of a branch."""

    id: str
    label: str
    target: str
    condition: str | None = None


@dataclass(frozen=True, slots=True)
class Branch:
    choices: Tuple[Choice, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class Jump:
    target: str


@dataclass(frozen=True, slots=True)
class JumpIf:
    """Jump to ``target`` when ``variable <comparator> literal`` holds."""

    variable: str
    comparator: Comparator
    literal: StoryValue
    target: str


@dataclass(frozen=True, slots=True)
class Set:
    name: str
    literal: StoryValue


@dataclass(frozen=True, slots=True)
class Modify:
    name: str
    operator: Operator
    literal: StoryValue


@dataclass(frozen=True, slots=True)
class Label:
    name: str


@dataclass(frozen=True, slots=True)
class ClearLayer:
    layer: str


@dataclass(frozen=True, slots=True)
class Scene:
    """Scene header; doubles as a jump target and may mark an ending."""

    name: str
    ending: str | None = None


Instruction = Union[
    Say,
    PlayBgm,
    PlaySe,
    PlayMovie,
    ShowImage,
    Wait,
    Branch,
    Jump,
    JumpIf,
    Set,
    Modify,
    Label,
    ClearLayer,
    Scene,
]

SUSPENDING_INSTRUCTIONS: Tuple[type, ...] = (
    Say,
    Branch,
    ShowImage,
    PlayBgm,
    PlaySe,
    PlayMovie,
    Wait,
    ClearLayer,
    Label,
    Scene,
)


def jump_targets(instruction: Instruction) -> Tuple[str, ...]:
    """Return every label name the instruction can transfer control to."""
    if isinstance(instruction, (Jump, JumpIf)):
        return (instruction.target,)
    if isinstance(instruction, Branch):
        return tuple(choice.target for choice in instruction.choices)
    return ()
