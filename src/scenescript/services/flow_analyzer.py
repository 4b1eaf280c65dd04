"""Static flow diagnostics over a parsed program."""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List

from scenescript.core.types import Severity
from scenescript.domain.defs import Branch, Jump, JumpIf, Label, PlayBgm, Say, Scene, Wait
from scenescript.domain.program import Program


@dataclass(frozen=True, slots=True)
class Diagnostic:
    severity: Severity
    code: str
    message: str
    category: str
    context: Dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class AnalyzerConfig:
    """Toggles and thresholds for the analysis passes."""

    check_reachability: bool = True
    check_loops: bool = True
    check_conditions: bool = True
    check_quality: bool = True
    max_consecutive_wait: float = 5.0
    max_text_length: int = 200
    warn_duplicate_bgm: bool = True


def format_diagnostic(diagnostic: Diagnostic) -> str:
    context = " ".join(f"{key}={value}" for key, value in diagnostic.context.items())
    suffix = f" ({context})" if context else ""
    return f"[{diagnostic.severity}] {diagnostic.code}: {diagnostic.message}{suffix}"


def analyze(program: Program, config: AnalyzerConfig | None = None) -> List[Diagnostic]:
    """Run every enabled pass and return the diagnostics in pass order."""
    config = config or AnalyzerConfig()
    diagnostics: List[Diagnostic] = []
    if config.check_reachability:
        _check_reachability(program, diagnostics)
    if config.check_loops:
        _check_infinite_loops(program, diagnostics)
    if config.check_conditions:
        _check_conditions(program, diagnostics)
    if config.check_quality:
        _check_consecutive_waits(program, diagnostics, config.max_consecutive_wait)
        if config.warn_duplicate_bgm:
            _check_duplicate_bgm(program, diagnostics)
        _check_text_length(program, diagnostics, config.max_text_length)
    return diagnostics


def reachable_indices(program: Program) -> set[int]:
    """Breadth-first walk of the control-flow graph starting at index 0."""
    reachable: set[int] = set()
    if not len(program):
        return reachable
    queue: deque[int] = deque([0])
    reachable.add(0)
    while queue:
        index = queue.popleft()
        for successor in _successors(program, index):
            if successor < len(program) and successor not in reachable:
                reachable.add(successor)
                queue.append(successor)
    return reachable


def _successors(program: Program, index: int) -> List[int]:
    targets = list(program.targets_of(index))
    if isinstance(program[index], Jump):
        return targets
    return [index + 1, *targets]


def _location(program: Program, index: int) -> Dict[str, str]:
    context = {"index": str(index)}
    line = program.line_of(index)
    if line is not None:
        context["line"] = str(line)
    return context


def _check_reachability(program: Program, diagnostics: List[Diagnostic]) -> None:
    reachable = reachable_indices(program)
    for index, instruction in enumerate(program):
        if index in reachable or isinstance(instruction, (Label, Scene)):
            continue
        diagnostics.append(
            Diagnostic(
                severity="WARN",
                code="UNREACHABLE_INSTRUCTION",
                message=f"Unreachable {type(instruction).__name__} instruction.",
                category="flow",
                context=_location(program, index),
            )
        )


def _check_infinite_loops(program: Program, diagnostics: List[Diagnostic]) -> None:
    for index, instruction in enumerate(program):
        if not isinstance(instruction, Jump):
            continue
        target = program.label_index(instruction.target)
        if target is None or target > index:
            continue
        has_exit = any(
            isinstance(program[position], (JumpIf, Branch)) for position in range(target, index + 1)
        )
        if has_exit:
            continue
        context = _location(program, index)
        context["label"] = instruction.target
        context["target_index"] = str(target)
        diagnostics.append(
            Diagnostic(
                severity="WARN",
                code="POTENTIAL_INFINITE_LOOP",
                message="Unconditional backward jump with no conditional exit in the loop body.",
                category="flow",
                context=context,
            )
        )


def _check_conditions(program: Program, diagnostics: List[Diagnostic]) -> None:
    used: set[str] = set()
    for index, instruction in enumerate(program):
        if not isinstance(instruction, Branch):
            continue
        for choice in instruction.choices:
            if choice.condition is None:
                continue
            used.add(choice.condition)
            if choice.condition in program.conditions:
                continue
            context = _location(program, index)
            context["condition"] = choice.condition
            context["choice_id"] = choice.id
            diagnostics.append(
                Diagnostic(
                    severity="WARN",
                    code="UNDECLARED_CONDITION",
                    message="Choice uses a condition that is not declared.",
                    category="references",
                    context=context,
                )
            )
    for condition in sorted(program.conditions - used):
        diagnostics.append(
            Diagnostic(
                severity="INFO",
                code="UNUSED_CONDITION",
                message="Declared condition is never used.",
                category="references",
                context={"condition": condition},
            )
        )


def _check_consecutive_waits(
    program: Program, diagnostics: List[Diagnostic], threshold: float
) -> None:
    total = 0.0
    start: int | None = None

    def flush() -> None:
        if start is not None and total > threshold:
            context = _location(program, start)
            context["total_seconds"] = f"{total:.1f}"
            diagnostics.append(
                Diagnostic(
                    severity="WARN",
                    code="LONG_WAIT_SEQUENCE",
                    message=f"Consecutive WAIT commands exceed {threshold:.1f}s.",
                    category="quality",
                    context=context,
                )
            )

    for index, instruction in enumerate(program):
        if isinstance(instruction, Wait):
            if start is None:
                start = index
            total += instruction.seconds
            continue
        flush()
        total = 0.0
        start = None
    flush()


def _check_duplicate_bgm(program: Program, diagnostics: List[Diagnostic]) -> None:
    last_bgm: str | None = None
    for index, instruction in enumerate(program):
        if not isinstance(instruction, PlayBgm):
            continue
        if instruction.resource == last_bgm:
            context = _location(program, index)
            context["name"] = instruction.resource
            diagnostics.append(
                Diagnostic(
                    severity="INFO",
                    code="DUPLICATE_BGM",
                    message="Same BGM played twice in a row.",
                    category="quality",
                    context=context,
                )
            )
        last_bgm = instruction.resource


def _check_text_length(program: Program, diagnostics: List[Diagnostic], limit: int) -> None:
    for index, instruction in enumerate(program):
        if isinstance(instruction, Say) and len(instruction.text) > limit:
            context = _location(program, index)
            context["length"] = str(len(instruction.text))
            diagnostics.append(
                Diagnostic(
                    severity="INFO",
                    code="LONG_TEXT",
                    message=f"Dialogue text exceeds {limit} characters.",
                    category="quality",
                    context=context,
                )
            )


__all__ = ["AnalyzerConfig", "Diagnostic", "analyze", "format_diagnostic", "reachable_indices"]
