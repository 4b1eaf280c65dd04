"""Service layer exports."""

from .engine import DEFAULT_MAX_STEPS, ScriptEngine, run_until_blocked, step
from .errors import EngineError, SnapshotError
from .flow_analyzer import AnalyzerConfig, Diagnostic, analyze, format_diagnostic
from .resources import (
    FileSystemResourceResolver,
    InMemoryResourceResolver,
    ResourceResolver,
)
from .snapshot_service import SnapshotService, deserialize, serialize

__all__ = [
    "DEFAULT_MAX_STEPS",
    "ScriptEngine",
    "run_until_blocked",
    "step",
    "EngineError",
    "SnapshotError",
    "AnalyzerConfig",
    "Diagnostic",
    "analyze",
    "format_diagnostic",
    "FileSystemResourceResolver",
    "InMemoryResourceResolver",
    "ResourceResolver",
    "SnapshotService",
    "deserialize",
    "serialize",
]
