"""Data layer utilities for loading and parsing scripts."""

from .errors import (
    DuplicateLabelError,
    InvalidSyntaxError,
    InvalidValueError,
    MissingParameterError,
    ScriptError,
    ScriptLoadError,
    ScriptParseError,
    UndefinedLabelError,
    UnknownCommandError,
)
from .parser import parse_script
from .script_loader import load_script, read_script

__all__ = [
    "DuplicateLabelError",
    "InvalidSyntaxError",
    "InvalidValueError",
    "MissingParameterError",
    "ScriptError",
    "ScriptLoadError",
    "ScriptParseError",
    "UndefinedLabelError",
    "UnknownCommandError",
    "load_script",
    "parse_script",
    "read_script",
]
