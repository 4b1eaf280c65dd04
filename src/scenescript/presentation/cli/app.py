"""Console front-end for checking and playing scripts."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Literal, Sequence

from scenescript.data import ScriptError, load_script
from scenescript.domain.events import ChoiceSelected, Event
from scenescript.domain.program import Program
from scenescript.domain.state import ExecutionState
from scenescript.presentation.cli import config
from scenescript.presentation.cli.render import (
    has_visible_content,
    render_diagnostics,
    render_heading,
    render_output,
)
from scenescript.presentation.cli.save_slots import SaveSlotStore, SlotMetadata
from scenescript.services import (
    FileSystemResourceResolver,
    ScriptEngine,
    SnapshotError,
    analyze,
    deserialize,
    serialize,
)

PromptAction = Literal["continue", "choose", "save", "quit"]

EXIT_OK = 0
EXIT_DIAGNOSTICS = 1
EXIT_LOAD_ERROR = 2

# Steps that render nothing are not prompted for, up to this many in a row.
_MAX_SILENT_STEPS = 1000


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scenescript", description="Check or play scenario scripts.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Parse a script and report flow diagnostics.")
    check.add_argument("script", type=Path, help="Path to the script file.")
    check.add_argument("--config", type=Path, default=None, help="Analyzer settings JSON file.")
    check.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when any warning or error is reported.",
    )

    play = subparsers.add_parser("play", help="Run a script interactively.")
    play.add_argument("script", type=Path, help="Path to the script file.")
    play.add_argument("--slot", type=int, default=1, help="Save slot used by 's' and --resume.")
    play.add_argument("--resume", action="store_true", help="Resume from the save slot.")
    play.add_argument("--assets", type=Path, default=None, help="Directory with media assets.")

    slots = subparsers.add_parser("slots", help="List or delete save slots.")
    slots.add_argument("--delete", type=int, default=None, metavar="SLOT", help="Delete a save slot.")
    return parser


def configure_logging() -> None:
    level = logging.DEBUG if config.debug_enabled() else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point; returns the process exit status."""
    args = build_parser().parse_args(argv)
    configure_logging()
    if args.command == "check":
        return run_check(args.script, config_path=args.config, strict=args.strict)
    if args.command == "slots":
        return run_slots(delete=args.delete)
    return run_play(args.script, slot=args.slot, resume=args.resume, assets=args.assets)


def run_check(script: Path, *, config_path: Path | None = None, strict: bool = False) -> int:
    program = _load_program(script)
    if program is None:
        return EXIT_LOAD_ERROR
    diagnostics = analyze(program, config.load_analyzer_config(config_path))
    print(f"{script}: {len(program)} instructions, {len(program.labels)} labels")
    render_diagnostics(diagnostics)
    if strict and any(diagnostic.severity in ("ERROR", "WARN") for diagnostic in diagnostics):
        return EXIT_DIAGNOSTICS
    return EXIT_OK


def run_play(
    script: Path,
    *,
    slot: int = 1,
    resume: bool = False,
    assets: Path | None = None,
    store: SaveSlotStore | None = None,
) -> int:
    program = _load_program(script)
    if program is None:
        return EXIT_LOAD_ERROR
    store = store or SaveSlotStore()
    resolver = FileSystemResourceResolver(assets) if assets is not None else None
    engine = ScriptEngine(program, resolver=resolver)
    try:
        if resume and not store.slot_exists(slot):
            print(f"Could not resume from slot {slot}: the slot is empty.", file=sys.stderr)
            return EXIT_LOAD_ERROR
        state = _restore_state(store, slot) if resume else engine.start()
    except (OSError, SnapshotError, ValueError) as exc:
        print(f"Could not resume from slot {slot}: {exc}", file=sys.stderr)
        return EXIT_LOAD_ERROR
    return _play_loop(engine, state, store, slot)


def run_slots(*, delete: int | None = None, store: SaveSlotStore | None = None) -> int:
    store = store or SaveSlotStore()
    if delete is not None:
        try:
            store.delete_slot(delete)
        except (OSError, ValueError) as exc:
            print(f"Could not delete slot {delete}: {exc}", file=sys.stderr)
            return EXIT_LOAD_ERROR
        print(f"Deleted slot {delete}.")
    render_heading("Save slots")
    for metadata in store.list_slots():
        print(f"Slot {metadata.slot}: {_describe_slot(metadata)}")
    return EXIT_OK


def _describe_slot(metadata: SlotMetadata) -> str:
    if not metadata.exists:
        return "empty"
    if metadata.is_corrupt or metadata.program_counter is None:
        return "unreadable"
    return f"instruction {metadata.program_counter}"


def _load_program(script: Path) -> Program | None:
    try:
        return load_script(script)
    except ScriptError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return None


def _restore_state(store: SaveSlotStore, slot: int) -> ExecutionState:
    state = deserialize(store.read_slot(slot))
    print(f"Resumed from slot {slot} at instruction {state.program_counter}.")
    if state.waiting_for_choice:
        render_heading("Choices")
        for idx, target in enumerate(state.pending_choice_targets, start=1):
            print(f"{idx}. -> {target}")
    return state


def _play_loop(engine: ScriptEngine, state: ExecutionState, store: SaveSlotStore, slot: int) -> int:
    event: Event | None = None
    silent_steps = 0
    while True:
        state, output = engine.step(state, event)
        event = None
        render_output(output)
        if output.finished and not state.waiting_for_choice:
            render_heading("The End")
            return EXIT_OK
        if not state.waiting_for_choice and not has_visible_content(output):
            silent_steps += 1
            if silent_steps < _MAX_SILENT_STEPS:
                continue
        silent_steps = 0
        action, choice_index = _prompt_action(len(state.pending_choice_targets), state.waiting_for_choice)
        while action == "save":
            store.write_slot(slot, serialize(state))
            print(f"Saved to slot {slot}.")
            action, choice_index = _prompt_action(
                len(state.pending_choice_targets), state.waiting_for_choice
            )
        if action == "quit":
            print("Goodbye!")
            return EXIT_OK
        if action == "choose":
            event = ChoiceSelected.for_index(choice_index)


def _prompt_action(choice_count: int, waiting: bool) -> tuple[PromptAction, int]:
    prompt = "Select an option (s=save, q=quit): " if waiting else "[Enter] continue, s=save, q=quit: "
    while True:
        raw = input(prompt).strip().lower()
        if raw == "q":
            return "quit", -1
        if raw == "s":
            return "save", -1
        if not waiting:
            if not raw:
                return "continue", -1
            print("Press Enter to continue.")
            continue
        try:
            index = int(raw) - 1
        except ValueError:
            print("Please enter a number.")
            continue
        if 0 <= index < choice_count:
            return "choose", index
        print(f"Please enter a value between 1 and {choice_count}.")
