"""Branching scenario scripts: parse, analyze and step through them."""
from __future__ import annotations

from scenescript.data import ScriptError, load_script, parse_script
from scenescript.domain.events import ChoiceSelected, Continue
from scenescript.domain.output import Output
from scenescript.domain.program import Program
from scenescript.domain.state import ExecutionState
from scenescript.services import ScriptEngine, analyze, deserialize, run_until_blocked, serialize, step

__all__ = [
    "ChoiceSelected",
    "Continue",
    "ExecutionState",
    "Output",
    "Program",
    "ScriptEngine",
    "ScriptError",
    "analyze",
    "deserialize",
    "load_script",
    "parse_script",
    "run_until_blocked",
    "serialize",
    "step",
]
