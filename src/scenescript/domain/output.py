"""Observable results of a single engine step."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True, slots=True)
class DialogueLine:
    speaker: str | None
    text: str


@dataclass(frozen=True, slots=True)
class EffectMarker:
    """Tagged presentation effect; ``args`` is opaque to the engine."""

    tag: str
    args: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ChoiceOption:
    id: str
    label: str
    condition: str | None = None


@dataclass(slots=True)
class Output:
    """Data returned to the host for rendering after one step."""

    lines: List[DialogueLine] = field(default_factory=list)
    effects: List[EffectMarker] = field(default_factory=list)
    choices: List[ChoiceOption] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    finished: bool = False

    def add_line(self, speaker: str | None, text: str) -> None:
        self.lines.append(DialogueLine(speaker=speaker, text=text))

    def add_effect(self, tag: str, **args: Any) -> None:
        self.effects.append(EffectMarker(tag=tag, args=args))

    def add_choice(self, choice_id: str, label: str, condition: str | None = None) -> None:
        self.choices.append(ChoiceOption(id=choice_id, label=label, condition=condition))

    def extend(self, other: "Output") -> None:
        """Append another step's output, keeping its terminal flag."""
        self.lines.extend(other.lines)
        self.effects.extend(other.effects)
        self.choices.extend(other.choices)
        self.warnings.extend(other.warnings)
        self.finished = other.finished

    @property
    def is_empty(self) -> bool:
        return not (self.lines or self.effects or self.choices)
