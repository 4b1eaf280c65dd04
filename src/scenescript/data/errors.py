"""Custom exceptions for loading and parsing scripts."""


class ScriptError(Exception):
    """Base exception for the data layer."""


class ScriptLoadError(ScriptError):
    """Raised when a script file is missing or unreadable."""


class ScriptParseError(ScriptError):
    """Raised when script text cannot be turned into a program."""

    def __init__(self, message: str, line: int) -> None:
        super().__init__(f"{message} at line {line}")
        self.line = line


class MissingParameterError(ScriptParseError):
    def __init__(self, command: str, param: str, line: int) -> None:
        super().__init__(f"Missing required parameter '{param}' for command '{command}'", line)
        self.command = command
        self.param = param


class InvalidValueError(ScriptParseError):
    def __init__(self, param: str, value: str, line: int) -> None:
        super().__init__(f"Invalid value '{value}' for parameter '{param}'", line)
        self.param = param
        self.value = value


class UndefinedLabelError(ScriptParseError):
    def __init__(self, label: str, line: int) -> None:
        super().__init__(f"Undefined label '{label}' referenced", line)
        self.label = label


class DuplicateLabelError(ScriptParseError):
    def __init__(self, label: str, line: int) -> None:
        super().__init__(f"Duplicate label '{label}' defined", line)
        self.label = label


class InvalidSyntaxError(ScriptParseError):
    def __init__(self, content: str, line: int, reason: str = "Invalid command syntax") -> None:
        super().__init__(f"{reason} '{content}'", line)
        self.content = content


class UnknownCommandError(InvalidSyntaxError):
    def __init__(self, keyword: str, line: int) -> None:
        super().__init__(keyword, line, reason="Unknown command")
        self.keyword = keyword
