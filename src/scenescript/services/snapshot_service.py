"""Serialization helpers for persisting execution state."""
from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping

from scenescript.domain.state import ExecutionState
from scenescript.domain.values import INTEGER_MAX, StoryValue, make_value
from scenescript.domain.variables import VariableStore
from scenescript.services.errors import SnapshotError

SnapshotPayload = Dict[str, Any]


class SnapshotService:
    """Converts execution state to/from a validated, versioned payload."""

    SNAPSHOT_VERSION = 1

    def to_payload(self, state: ExecutionState) -> SnapshotPayload:
        """Return a JSON-serializable payload for the given state."""
        return {
            "snapshot_version": self.SNAPSHOT_VERSION,
            "state": {
                "program_counter": state.program_counter,
                "variables": {
                    name: self._serialize_value(value)
                    for name, value in state.variables.as_dict().items()
                },
                "waiting_for_choice": state.waiting_for_choice,
                "pending_choice_targets": list(state.pending_choice_targets),
                "last_label_reached": state.last_label_reached,
            },
        }

    def from_payload(self, payload: Any) -> ExecutionState:
        """Rehydrate an ExecutionState from a decoded payload."""
        if not isinstance(payload, Mapping):
            raise SnapshotError("Snapshot data must be a JSON object.")
        version = payload.get("snapshot_version")
        if version != self.SNAPSHOT_VERSION:
            raise SnapshotError(f"Unsupported snapshot version: {version!r}")
        state_payload = payload.get("state")
        if not isinstance(state_payload, Mapping):
            raise SnapshotError("Snapshot data is missing the state section.")

        program_counter = self._require_int(state_payload.get("program_counter"), "state.program_counter")
        if not 0 <= program_counter <= INTEGER_MAX:
            raise SnapshotError("state.program_counter must be a non-negative 64-bit integer.")
        if "variables" not in state_payload:
            raise SnapshotError("state.variables is required.")
        variables = self._coerce_variables(state_payload.get("variables"))
        waiting_for_choice = self._coerce_bool(
            state_payload.get("waiting_for_choice"), "state.waiting_for_choice", default=False
        )
        pending_targets = self._coerce_str_list(
            state_payload.get("pending_choice_targets"), "state.pending_choice_targets"
        )
        last_label = self._coerce_optional_str(
            state_payload.get("last_label_reached"), "state.last_label_reached"
        )
        return ExecutionState(
            program_counter=program_counter,
            variables=variables,
            waiting_for_choice=waiting_for_choice,
            pending_choice_targets=pending_targets,
            last_label_reached=last_label,
        )

    def serialize(self, state: ExecutionState) -> bytes:
        return json.dumps(self.to_payload(state), sort_keys=True).encode("utf-8")

    def deserialize(self, data: bytes) -> ExecutionState:
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SnapshotError(f"Snapshot is not valid UTF-8: {exc}") from exc
        try:
            payload = json.loads(text)
        except (ValueError, RecursionError) as exc:
            raise SnapshotError(f"Snapshot is not valid JSON: {exc}") from exc
        return self.from_payload(payload)

    @staticmethod
    def _serialize_value(value: StoryValue) -> Dict[str, Any]:
        return {"type": value.kind, "value": value.value}

    def _coerce_variables(self, value: Any) -> VariableStore:
        mapping = self._require_dict(value, "state.variables")
        store = VariableStore()
        for name, entry in mapping.items():
            if not isinstance(name, str):
                raise SnapshotError("state.variables keys must be strings.")
            context = f"state.variables.{name}"
            entry_map = self._require_dict(entry, context)
            kind = self._require_str(entry_map.get("type"), f"{context}.type")
            try:
                store.set(name, make_value(kind, entry_map.get("value")))
            except ValueError as exc:
                raise SnapshotError(f"{context}: {exc}") from exc
        return store

    @staticmethod
    def _coerce_bool(value: Any, context: str, *, default: bool) -> bool:
        if value is None:
            return default
        if not isinstance(value, bool):
            raise SnapshotError(f"{context} must be a boolean.")
        return value

    @staticmethod
    def _coerce_str_list(value: Any, context: str) -> List[str]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise SnapshotError(f"{context} must be a list.")
        result: List[str] = []
        for entry in value:
            if not isinstance(entry, str):
                raise SnapshotError(f"{context} entries must be strings.")
            result.append(entry)
        return result

    def _coerce_optional_str(self, value: Any, context: str) -> str | None:
        if value is None:
            return None
        return self._require_str(value, context)

    @staticmethod
    def _require_str(value: Any, context: str) -> str:
        if not isinstance(value, str):
            raise SnapshotError(f"{context} must be a string.")
        return value

    @staticmethod
    def _require_int(value: Any, context: str) -> int:
        if not isinstance(value, int) or isinstance(value, bool):
            raise SnapshotError(f"{context} must be an integer.")
        return value

    @staticmethod
    def _require_dict(value: Any, context: str) -> Dict[str, Any]:
        if not isinstance(value, Mapping):
            raise SnapshotError(f"{context} must be an object.")
        return dict(value)


_DEFAULT_SERVICE = SnapshotService()


def serialize(state: ExecutionState) -> bytes:
    """Encode ``state`` as UTF-8 JSON bytes."""
    return _DEFAULT_SERVICE.serialize(state)


def deserialize(data: bytes) -> ExecutionState:
    """Decode snapshot bytes, raising SnapshotError on any malformed input."""
    return _DEFAULT_SERVICE.deserialize(data)


__all__ = ["SnapshotPayload", "SnapshotService", "deserialize", "serialize"]
