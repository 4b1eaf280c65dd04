"""Domain-level execution state tracking."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from scenescript.domain.program import Program
from scenescript.domain.variables import VariableStore


@dataclass
class ExecutionState:
    """Resumption point of one script execution."""

    program_counter: int = 0
    variables: VariableStore = field(default_factory=VariableStore)
    waiting_for_choice: bool = False
    pending_choice_targets: List[str] = field(default_factory=list)
    last_label_reached: str | None = None

    def is_finished(self, program: Program) -> bool:
        return self.program_counter >= len(program)

    def copy(self) -> "ExecutionState":
        return ExecutionState(
            program_counter=self.program_counter,
            variables=self.variables.copy(),
            waiting_for_choice=self.waiting_for_choice,
            pending_choice_targets=list(self.pending_choice_targets),
            last_label_reached=self.last_label_reached,
        )

    def clear_choice_wait(self) -> None:
        self.waiting_for_choice = False
        self.pending_choice_targets = []
