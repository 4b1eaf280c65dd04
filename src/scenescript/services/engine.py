"""Step-wise execution of parsed programs."""
from __future__ import annotations

import logging
from typing import Tuple

from scenescript.domain.defs import (
    SUSPENDING_INSTRUCTIONS,
    Branch,
    ClearLayer,
    Instruction,
    Jump,
    JumpIf,
    Label,
    Modify,
    PlayBgm,
    PlayMovie,
    PlaySe,
    Say,
    Scene,
    Set,
    ShowImage,
    Wait,
)
from scenescript.domain.events import ChoiceSelected, Event
from scenescript.domain.output import Output
from scenescript.domain.program import Program
from scenescript.domain.state import ExecutionState
from scenescript.domain.values import ValueOperationError, apply_operation, compare_values
from scenescript.services.errors import EngineError
from scenescript.services.resources import ResourceKind, ResourceResolver, resolve_resource

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 10_000


class ScriptEngine:
    """Application service that drives one program.

    The engine holds no execution state of its own; every call receives a
    state and returns an advanced copy, so one engine can serve any number
    of independent states as long as callers serialize their own calls.
    """

    def __init__(self, program: Program, *, resolver: ResourceResolver | None = None) -> None:
        self._program = program
        self._resolver = resolver

    @property
    def program(self) -> Program:
        return self._program

    def start(self) -> ExecutionState:
        """Create a fresh state positioned at the first instruction."""
        return ExecutionState()

    def step(self, state: ExecutionState, event: Event | None = None) -> Tuple[ExecutionState, Output]:
        """Run instructions until one meaningful unit of output is produced."""
        state = state.copy()
        output = Output()
        if event is not None:
            self._handle_event(state, event)
        if state.waiting_for_choice:
            return state, output

        while state.program_counter < len(self._program):
            instruction = self._program[state.program_counter]
            if not self._execute(instruction, state, output):
                break
        output.finished = state.is_finished(self._program) and output.is_empty
        if output.finished:
            logger.debug("Reached end of program at pc=%d", state.program_counter)
        return state, output

    def run_until_blocked(
        self,
        state: ExecutionState,
        event: Event | None = None,
        *,
        max_steps: int = DEFAULT_MAX_STEPS,
    ) -> Tuple[ExecutionState, Output]:
        """Step repeatedly until the program waits for a choice or ends."""
        combined = Output()
        for _ in range(max_steps):
            state, output = self.step(state, event)
            event = None
            combined.extend(output)
            if state.waiting_for_choice or output.finished:
                return state, combined
        raise EngineError(f"Program did not block or finish within {max_steps} steps.")

    def _handle_event(self, state: ExecutionState, event: Event) -> None:
        if not isinstance(event, ChoiceSelected) or not state.waiting_for_choice:
            return
        index = event.index
        if index is None or index >= len(state.pending_choice_targets):
            logger.debug("Ignoring choice %r; no matching pending option", event.choice_id)
            return
        target = state.pending_choice_targets[index]
        target_index = self._program.label_index(target)
        if target_index is None:
            logger.warning("Choice target %r is not a label; ignoring selection", target)
            return
        logger.debug(
            "Choice %d selected, jumping from pc=%d to pc=%d (label=%s)",
            index,
            state.program_counter,
            target_index,
            target,
        )
        state.program_counter = target_index
        state.clear_choice_wait()

    def _execute(self, instruction: Instruction, state: ExecutionState, output: Output) -> bool:
        """Execute one instruction; return True when execution should continue."""
        if isinstance(instruction, Jump):
            self._jump(state, instruction.target)
            return True
        if isinstance(instruction, JumpIf):
            if self._condition_holds(instruction, state, output):
                self._jump(state, instruction.target)
            else:
                state.program_counter += 1
            return True

        if isinstance(instruction, Say):
            output.add_line(instruction.speaker, instruction.text)
        elif isinstance(instruction, ShowImage):
            self._add_resource_effect(
                output, "show_image", "image", instruction.resource, layer=instruction.layer
            )
        elif isinstance(instruction, PlayBgm):
            self._add_resource_effect(output, "play_bgm", "bgm", instruction.resource)
        elif isinstance(instruction, PlaySe):
            self._add_resource_effect(output, "play_se", "se", instruction.resource)
        elif isinstance(instruction, PlayMovie):
            self._add_resource_effect(output, "play_movie", "movie", instruction.resource)
        elif isinstance(instruction, Wait):
            output.add_effect("wait", seconds=instruction.seconds)
        elif isinstance(instruction, ClearLayer):
            output.add_effect("clear_layer", layer=instruction.layer)
        elif isinstance(instruction, Label):
            state.last_label_reached = instruction.name
            output.add_effect("label", name=instruction.name)
        elif isinstance(instruction, Scene):
            state.last_label_reached = instruction.name
            output.add_effect("scene", name=instruction.name, ending=instruction.ending)
        elif isinstance(instruction, Branch):
            for choice in instruction.choices:
                output.add_choice(choice.id, choice.label, choice.condition)
            state.waiting_for_choice = True
            state.pending_choice_targets = [choice.target for choice in instruction.choices]
            logger.debug(
                "Presenting %d choices at pc=%d", len(instruction.choices), state.program_counter
            )
        elif isinstance(instruction, Set):
            logger.debug("Setting %s=%s", instruction.name, instruction.literal)
            state.variables.set(instruction.name, instruction.literal)
        elif isinstance(instruction, Modify):
            self._modify(instruction, state, output)
        else:
            raise TypeError(f"Unsupported instruction: {instruction!r}")
        state.program_counter += 1
        return not isinstance(instruction, SUSPENDING_INSTRUCTIONS)

    def _jump(self, state: ExecutionState, target: str) -> None:
        target_index = self._program.label_index(target)
        if target_index is None:
            # Unreachable for parsed programs; labels are validated up front.
            logger.warning("Jump target %r is not a label; falling through", target)
            state.program_counter += 1
            return
        logger.debug(
            "Jumping from pc=%d to pc=%d (label=%s)", state.program_counter, target_index, target
        )
        state.program_counter = target_index

    def _condition_holds(self, instruction: JumpIf, state: ExecutionState, output: Output) -> bool:
        current = state.variables.get(instruction.variable)
        if current is None:
            logger.debug("Variable %r is not set; condition is false", instruction.variable)
            return False
        try:
            result = compare_values(current, instruction.comparator, instruction.literal)
        except ValueOperationError as exc:
            self._report(output, state, f"JUMP_IF on '{instruction.variable}': {exc}")
            return False
        logger.debug(
            "Condition %s=%s %s %s is %s",
            instruction.variable,
            current,
            instruction.comparator,
            instruction.literal,
            result,
        )
        return result

    def _modify(self, instruction: Modify, state: ExecutionState, output: Output) -> None:
        current = state.variables.get(instruction.name)
        if current is None:
            logger.debug("Variable %r is not set; MODIFY skipped", instruction.name)
            return
        try:
            updated = apply_operation(current, instruction.operator, instruction.literal)
        except ValueOperationError as exc:
            self._report(output, state, f"MODIFY on '{instruction.name}': {exc}")
            return
        logger.debug(
            "Modify %s %s %s: %s -> %s",
            instruction.name,
            instruction.operator,
            instruction.literal,
            current,
            updated,
        )
        state.variables.set(instruction.name, updated)

    def _add_resource_effect(
        self,
        output: Output,
        tag: str,
        kind: ResourceKind,
        name: str,
        **extra: object,
    ) -> None:
        if self._resolver is None:
            output.add_effect(tag, name=name, **extra)
            return
        path = resolve_resource(self._resolver, kind, name)
        if path is None:
            logger.warning("Unresolved %s resource %r", kind, name)
            output.add_effect(tag, name=name, resolved=False, **extra)
            return
        output.add_effect(tag, name=name, resolved=True, path=str(path), **extra)

    @staticmethod
    def _report(output: Output, state: ExecutionState, message: str) -> None:
        logger.warning("pc=%d: %s", state.program_counter, message)
        output.warnings.append(message)


def step(
    state: ExecutionState,
    program: Program,
    event: Event | None = None,
    *,
    resolver: ResourceResolver | None = None,
) -> Tuple[ExecutionState, Output]:
    """Advance ``state`` through ``program`` by one suspension point."""
    return ScriptEngine(program, resolver=resolver).step(state, event)


def run_until_blocked(
    state: ExecutionState,
    program: Program,
    event: Event | None = None,
    *,
    resolver: ResourceResolver | None = None,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> Tuple[ExecutionState, Output]:
    """Step until a branch wait or the end of the program."""
    return ScriptEngine(program, resolver=resolver).run_until_blocked(
        state, event, max_steps=max_steps
    )


__all__ = ["DEFAULT_MAX_STEPS", "ScriptEngine", "run_until_blocked", "step"]
