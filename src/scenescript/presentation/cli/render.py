"""Shared CLI rendering helpers."""
from __future__ import annotations

import textwrap
from typing import Iterable, Sequence

from scenescript.domain.output import ChoiceOption, DialogueLine, EffectMarker, Output
from scenescript.presentation.cli.config import debug_enabled
from scenescript.services.flow_analyzer import Diagnostic, format_diagnostic

_TEXT_WIDTH = 72


def wrap_text_for_box(text: str, width: int, *, indent_continuation: bool = True) -> list[str]:
    """
    Wrap text to fit within a fixed width, breaking on word boundaries.

    Args:
        text: The text to wrap
        width: Maximum width per line
        indent_continuation: If True, indent continuation lines with 2 spaces

    Returns:
        List of wrapped lines
    """
    if not text or width <= 0:
        return [text] if text else [""]
    subsequent_indent = "  " if indent_continuation else ""
    wrapped = textwrap.fill(
        text,
        width=width,
        initial_indent="",
        subsequent_indent=subsequent_indent,
        break_long_words=False,
        break_on_hyphens=False,
    )
    return wrapped.split("\n")


def format_line(line: DialogueLine) -> str:
    if line.speaker:
        return f"{line.speaker}: {line.text}"
    return line.text


def format_effect(effect: EffectMarker) -> str:
    args = " ".join(f"{key}={value}" for key, value in sorted(effect.args.items()))
    return f"<{effect.tag}{' ' + args if args else ''}>"


def render_heading(title: str) -> None:
    """Print a consistent section heading."""
    print(f"\n=== {title} ===")


def render_lines(lines: Sequence[DialogueLine]) -> None:
    for line in lines:
        for wrapped in wrap_text_for_box(format_line(line), _TEXT_WIDTH):
            print(wrapped)


def render_effects(effects: Sequence[EffectMarker]) -> None:
    """Effects are only shown when debug output is enabled."""
    if not debug_enabled():
        return
    for effect in effects:
        print(format_effect(effect))


def render_choices(choices: Sequence[ChoiceOption]) -> None:
    """Display numbered branch choices."""
    if not choices:
        return
    render_heading("Choices")
    for idx, choice in enumerate(choices, start=1):
        print(f"{idx}. {choice.label}")


def has_visible_content(output: Output) -> bool:
    """Return True when render_output would print anything for this output."""
    if output.lines or output.choices or output.warnings:
        return True
    return bool(output.effects) and debug_enabled()


def render_output(output: Output) -> None:
    render_effects(output.effects)
    render_lines(output.lines)
    render_bullet_lines(f"warning: {message}" for message in output.warnings)
    render_choices(output.choices)


def render_diagnostics(diagnostics: Sequence[Diagnostic]) -> None:
    if not diagnostics:
        print("No issues found.")
        return
    for diagnostic in diagnostics:
        print(format_diagnostic(diagnostic))


def render_bullet_lines(lines: Iterable[str]) -> None:
    """Print bullet-prefixed lines."""
    for line in lines:
        print(f"- {line}")
