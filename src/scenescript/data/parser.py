"""Parser that turns script text into a validated program."""
from __future__ import annotations

import logging
import math
from typing import Callable, Dict, List, Mapping, Sequence, Tuple

from scenescript.core.types import COMPARATOR_ALIASES, OPERATOR_ALIASES
from scenescript.data.errors import (
    DuplicateLabelError,
    InvalidSyntaxError,
    InvalidValueError,
    MissingParameterError,
    UndefinedLabelError,
    UnknownCommandError,
)
from scenescript.domain.defs import (
    Branch,
    Choice,
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
    jump_targets,
)
from scenescript.domain.events import choice_id_for
from scenescript.domain.program import Program
from scenescript.domain.values import IntegerValue, StoryValue, infer_value

logger = logging.getLogger(__name__)

_QUOTES = ('"', "'")
_CLICK_MARKER = "[c]"
_RESOURCE_KEYS = ("name", "file")
_WAIT_KEYS = ("seconds", "secs", "duration")
_SCENE_PREFIXES = ("# scene:", "#scene:")
_ENDING_DIRECTIVE = "@ending"
_STANDARD_ENDINGS = ("good", "bad", "true", "normal")
_TOLERATED_COMMANDS = frozenset({"POSITION", "SHOW_CHOICE", "HIDE_IMAGE", "STOP_BGM", "STOP_SE"})

Params = Dict[str, str]


def split_outside_quotes(text: str, separator: str | None = None) -> List[str]:
    """Split ``text`` on ``separator`` (whitespace when None), ignoring quoted runs.

    A quote only opens a quoted run at the start of a token or right after
    ``=``, so apostrophes inside plain words are left alone.
    """
    tokens: List[str] = []
    current: List[str] = []
    quote: str | None = None
    for char in text:
        if quote is not None:
            current.append(char)
            if char == quote:
                quote = None
            continue
        if char in _QUOTES and (not current or current[-1] == "=" or current[-1].isspace()):
            quote = char
            current.append(char)
            continue
        is_separator = char.isspace() if separator is None else char == separator
        if is_separator:
            _flush(tokens, current)
            current = []
            continue
        current.append(char)
    if quote is not None:
        raise ValueError(f"Unterminated {quote} quote in: {text}")
    _flush(tokens, current)
    return tokens


def _flush(tokens: List[str], current: Sequence[str]) -> None:
    token = "".join(current).strip()
    if token:
        tokens.append(token)


def _is_quoted(value: str) -> bool:
    return len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]


def _unquote(value: str) -> str:
    return value[1:-1] if _is_quoted(value) else value


def parse_params(remainder: str, line: int) -> Tuple[Params, List[str]]:
    """Tokenize whitespace separated ``key=value`` parameters.

    Returns the keyed parameters (first occurrence wins) and any positional
    tokens that carried no ``=``.
    """
    try:
        tokens = split_outside_quotes(remainder)
    except ValueError as exc:
        raise InvalidSyntaxError(remainder, line, reason="Unterminated quote in") from exc
    params: Params = {}
    positionals: List[str] = []
    for token in tokens:
        key, sep, value = token.partition("=")
        if not sep:
            positionals.append(token)
            continue
        key = key.strip()
        if not key:
            raise InvalidSyntaxError(token, line, reason="Parameter without a name")
        value = value.strip()
        if value.endswith(",") and not _is_quoted(value):
            value = value.rstrip(",")
        params.setdefault(key, _unquote(value))
    return params, positionals


class ScriptParser:
    """Single-use parser over the lines of one script."""

    def __init__(self, text: str) -> None:
        self._lines = text.splitlines()
        self._cursor = 0
        self._instructions: List[Instruction] = []
        self._source_lines: List[int] = []
        self._labels: Dict[str, int] = {}
        self._conditions: set[str] = set()
        self._handlers: Mapping[str, Callable[[str, str, str], Instruction]] = {
            "SAY": self._parse_say,
            "PLAY_BGM": self._parse_resource,
            "PLAY_MUSIC": self._parse_resource,
            "PLAY_SE": self._parse_resource,
            "PLAY_MOVIE": self._parse_resource,
            "SHOW_IMAGE": self._parse_resource,
            "WAIT": self._parse_wait,
            "BRANCH": self._parse_branch,
            "LABEL": self._parse_label,
            "JUMP": self._parse_jump,
            "GOTO": self._parse_jump,
            "JUMP_IF": self._parse_jump_if,
            "SET": self._parse_set,
            "MODIFY": self._parse_modify,
            "CLEAR_LAYER": self._parse_clear_layer,
        }

    @property
    def _line_number(self) -> int:
        return self._cursor + 1

    def parse(self) -> Program:
        while self._cursor < len(self._lines):
            self._parse_line(self._lines[self._cursor].strip())
            self._cursor += 1
        self._validate_targets()
        program = Program.build(
            instructions=self._instructions,
            labels=self._labels,
            conditions=self._conditions,
            source_lines=self._source_lines,
        )
        logger.debug(
            "Parsed script: instructions=%d labels=%d conditions=%d",
            len(program),
            len(program.labels),
            len(program.conditions),
        )
        return program

    def _parse_line(self, line: str) -> None:
        if not line:
            return
        if line.startswith("<!--"):
            self._skip_comment(line)
            return
        if line == ":::conditions":
            self._parse_conditions_block()
            return
        if line.startswith(":::"):
            if line != ":::":
                self._skip_block()
            return
        if line.startswith(_SCENE_PREFIXES):
            self._parse_scene_header(line)
            return
        if line.startswith("#"):
            return
        if line.startswith("[") and "]" in line:
            self._parse_command(line)

    def _skip_comment(self, line: str) -> None:
        if "-->" in line[4:]:
            return
        start = self._line_number
        self._cursor += 1
        while self._cursor < len(self._lines):
            if "-->" in self._lines[self._cursor]:
                return
            self._cursor += 1
        raise InvalidSyntaxError("<!--", start, reason="Unclosed comment")

    def _parse_conditions_block(self) -> None:
        start = self._line_number
        self._cursor += 1
        while self._cursor < len(self._lines):
            line = self._lines[self._cursor].strip()
            if line == ":::":
                return
            if line and not line.startswith(("[", "<!--", "#")):
                name = line[1:].strip() if line.startswith("-") else line
                if name:
                    self._conditions.add(name)
            self._cursor += 1
        raise InvalidSyntaxError(":::conditions", start, reason="Unclosed block")

    def _skip_block(self) -> None:
        depth = 1
        self._cursor += 1
        while self._cursor < len(self._lines):
            line = self._lines[self._cursor].strip()
            if line == ":::":
                depth -= 1
                if depth == 0:
                    return
            elif line.startswith(":::"):
                depth += 1
            self._cursor += 1

    def _parse_command(self, line: str) -> None:
        line_number = self._line_number
        close = line.index("]")
        content = line[1:close].strip()
        trailing = line[close + 1 :].strip()
        if not content:
            raise InvalidSyntaxError(line, line_number, reason="Empty command")
        parts = content.split(None, 1)
        keyword = parts[0]
        remainder = parts[1] if len(parts) > 1 else ""
        if keyword in _TOLERATED_COMMANDS:
            logger.debug("Ignoring unsupported command %s at line %d", keyword, line_number)
            return
        handler = self._handlers.get(keyword)
        if handler is None:
            raise UnknownCommandError(keyword, line_number)
        self._append(handler(keyword, remainder, trailing), line_number)

    def _append(self, instruction: Instruction, line_number: int) -> None:
        if isinstance(instruction, (Label, Scene)):
            if instruction.name in self._labels:
                raise DuplicateLabelError(instruction.name, line_number)
            self._labels[instruction.name] = len(self._instructions)
        self._instructions.append(instruction)
        self._source_lines.append(line_number)

    def _parse_scene_header(self, line: str) -> None:
        line_number = self._line_number
        prefix = next(prefix for prefix in _SCENE_PREFIXES if line.startswith(prefix))
        name = line[len(prefix) :].strip()
        if not name:
            raise InvalidSyntaxError(line, line_number, reason="Scene header without a name")
        ending: str | None = None
        if self._cursor + 1 < len(self._lines):
            following = self._lines[self._cursor + 1].strip()
            if following.startswith(_ENDING_DIRECTIVE):
                ending = _normalize_ending(following[len(_ENDING_DIRECTIVE) :].strip())
                self._cursor += 1
        self._append(Scene(name=name, ending=ending), line_number)

    def _parse_say(self, keyword: str, remainder: str, trailing: str) -> Instruction:
        line_number = self._line_number
        params, _ = parse_params(remainder, line_number)
        speaker = self._require(params, "speaker", keyword)
        text = _strip_click_markers(trailing) if trailing else self._read_say_body()
        if not text:
            raise MissingParameterError(keyword, "text", line_number)
        return Say(speaker=speaker, text=text)

    def _read_say_body(self) -> str:
        index = self._cursor + 1
        while index < len(self._lines):
            candidate = self._lines[index].strip()
            if not candidate:
                index += 1
                continue
            if candidate.startswith(("[", "#", "<!--", ":::")):
                return ""
            self._cursor = index
            return _strip_click_markers(candidate)
        return ""

    def _parse_resource(self, keyword: str, remainder: str, trailing: str) -> Instruction:
        params, _ = parse_params(remainder, self._line_number)
        resource = self._require_any(params, _RESOURCE_KEYS, keyword)
        if keyword == "SHOW_IMAGE":
            return ShowImage(resource=resource, layer=params.get("layer") or "default")
        if keyword == "PLAY_SE":
            return PlaySe(resource=resource)
        if keyword == "PLAY_MOVIE":
            return PlayMovie(resource=resource)
        return PlayBgm(resource=resource)

    def _parse_wait(self, keyword: str, remainder: str, trailing: str) -> Instruction:
        params, positionals = parse_params(remainder, self._line_number)
        raw = next((params[key] for key in _WAIT_KEYS if params.get(key)), None)
        if raw is None and positionals:
            raw = positionals[0]
        if raw is None:
            raise MissingParameterError(keyword, "seconds", self._line_number)
        number = raw[:-1] if raw.endswith("s") else raw
        try:
            seconds = float(number)
        except ValueError as exc:
            raise InvalidValueError("seconds", raw, self._line_number) from exc
        if not math.isfinite(seconds) or seconds < 0:
            raise InvalidValueError("seconds", raw, self._line_number)
        return Wait(seconds=seconds)

    def _parse_branch(self, keyword: str, remainder: str, trailing: str) -> Instruction:
        line_number = self._line_number
        try:
            groups = split_outside_quotes(remainder, ",")
        except ValueError as exc:
            raise InvalidSyntaxError(remainder, line_number, reason="Unterminated quote in") from exc
        choices: List[Choice] = []
        for group in groups:
            params, _ = parse_params(group, line_number)
            label = self._require(params, "choice", keyword)
            choices.append(
                Choice(
                    id=choice_id_for(len(choices)),
                    label=label,
                    target=params.get("label") or label,
                    condition=params.get("if") or None,
                )
            )
        if not choices:
            raise MissingParameterError(keyword, "choice", line_number)
        return Branch(choices=tuple(choices))

    def _parse_label(self, keyword: str, remainder: str, trailing: str) -> Instruction:
        params, _ = parse_params(remainder, self._line_number)
        return Label(name=self._require(params, "name", keyword))

    def _parse_jump(self, keyword: str, remainder: str, trailing: str) -> Instruction:
        params, _ = parse_params(remainder, self._line_number)
        key = "target" if keyword == "GOTO" else "label"
        return Jump(target=self._require(params, key, keyword))

    def _parse_jump_if(self, keyword: str, remainder: str, trailing: str) -> Instruction:
        params, _ = parse_params(remainder, self._line_number)
        variable = self._require(params, "var", keyword)
        raw_cmp = self._require(params, "cmp", keyword)
        comparator = COMPARATOR_ALIASES.get(raw_cmp)
        if comparator is None:
            raise InvalidValueError("cmp", raw_cmp, self._line_number)
        literal = self._literal("value", self._require(params, "value", keyword))
        target = self._require(params, "label", keyword)
        return JumpIf(variable=variable, comparator=comparator, literal=literal, target=target)

    def _parse_set(self, keyword: str, remainder: str, trailing: str) -> Instruction:
        params, _ = parse_params(remainder, self._line_number)
        name = self._require(params, "name", keyword)
        return Set(name=name, literal=self._literal("value", self._require(params, "value", keyword)))

    def _parse_modify(self, keyword: str, remainder: str, trailing: str) -> Instruction:
        params, _ = parse_params(remainder, self._line_number)
        name = self._require(params, "name", keyword)
        raw_op = self._require(params, "op", keyword)
        operator = OPERATOR_ALIASES.get(raw_op)
        if operator is None:
            raise InvalidValueError("op", raw_op, self._line_number)
        raw_value = self._require(params, "value", keyword)
        literal = self._literal("value", raw_value)
        if not isinstance(literal, IntegerValue):
            raise InvalidValueError("value", raw_value, self._line_number)
        return Modify(name=name, operator=operator, literal=literal)

    def _parse_clear_layer(self, keyword: str, remainder: str, trailing: str) -> Instruction:
        params, _ = parse_params(remainder, self._line_number)
        return ClearLayer(layer=self._require(params, "layer", keyword))

    def _validate_targets(self) -> None:
        for index, instruction in enumerate(self._instructions):
            for target in jump_targets(instruction):
                if target not in self._labels:
                    raise UndefinedLabelError(target, self._source_lines[index])

    def _literal(self, param: str, raw: str) -> StoryValue:
        try:
            return infer_value(raw)
        except ValueError as exc:
            raise InvalidValueError(param, _abbreviate(raw), self._line_number) from exc

    def _require(self, params: Params, key: str, command: str) -> str:
        value = params.get(key)
        if not value:
            raise MissingParameterError(command, key, self._line_number)
        return value

    def _require_any(self, params: Params, keys: Sequence[str], command: str) -> str:
        for key in keys:
            value = params.get(key)
            if value:
                return value
        raise MissingParameterError(command, keys[0], self._line_number)


def _strip_click_markers(text: str) -> str:
    return text.replace(_CLICK_MARKER, "").strip()


def _abbreviate(text: str, limit: int = 40) -> str:
    return text if len(text) <= limit else f"{text[:limit]}..."


def _normalize_ending(raw: str) -> str:
    """Standard endings are lower-cased; a bare directive means a normal ending."""
    if not raw:
        return "normal"
    lowered = raw.lower()
    return lowered if lowered in _STANDARD_ENDINGS else raw


def parse_script(text: str) -> Program:
    """Parse script text into a validated, immutable program."""
    return ScriptParser(text).parse()


__all__ = ["ScriptParser", "parse_params", "parse_script", "split_outside_quotes"]
