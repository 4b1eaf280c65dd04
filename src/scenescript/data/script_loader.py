"""Low-level helpers for reading scripts from disk."""
from __future__ import annotations

from pathlib import Path

from scenescript.domain.program import Program

from .errors import ScriptLoadError
from .parser import parse_script


def read_script(path: Path | str) -> str:
    """Read script text from disk and raise ScriptLoadError on failure."""
    script_path = Path(path)
    try:
        return script_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ScriptLoadError(f"Script file not found: {script_path}") from exc
    except UnicodeDecodeError as exc:
        raise ScriptLoadError(f"Script file is not valid UTF-8: {script_path}") from exc
    except OSError as exc:
        raise ScriptLoadError(f"Unable to read script file: {script_path}") from exc


def load_script(path: Path | str) -> Program:
    """Read and parse a script file; parse failures propagate unchanged."""
    return parse_script(read_script(path))
