"""Events a host feeds back into the engine."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

CHOICE_ID_PREFIX = "choice_"


def choice_id_for(index: int) -> str:
    return f"{CHOICE_ID_PREFIX}{index}"


@dataclass(frozen=True, slots=True)
class ChoiceSelected:
    """The player picked one of the options of the active branch."""

    choice_id: str

    @classmethod
    def for_index(cls, index: int) -> "ChoiceSelected":
        return cls(choice_id=choice_id_for(index))

    @property
    def index(self) -> int | None:
        """Return the option index encoded in the id, or None if malformed."""
        if not self.choice_id.startswith(CHOICE_ID_PREFIX):
            return None
        suffix = self.choice_id[len(CHOICE_ID_PREFIX) :]
        if not (suffix.isascii() and suffix.isdigit()):
            return None
        return int(suffix)


@dataclass(frozen=True, slots=True)
class Continue:
    """Advance without any input."""


Event = Union[ChoiceSelected, Continue]
