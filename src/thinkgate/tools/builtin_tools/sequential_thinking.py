from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, replace
from typing import Any

from ..annotations import SEQUENTIAL_THINKING
from ..base import ToolResult, ToolSpec, error_result, text_result
from ...errors import ThoughtValidationError
from .prompts import SEQUENTIAL_THINKING_DESCRIPTION

logger = logging.getLogger(__name__)

NAME = "sequential_thinking"


def _positive_int(obj: dict[str, Any], key: str, *, required: bool) -> int | None:
    value = obj.get(key)
    if value is None:
        if required:
            raise ThoughtValidationError(key, f"Invalid {key}: must be a number")
        return None
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ThoughtValidationError(key, f"Invalid {key}: must be a number")
    if isinstance(value, float):
        if not value.is_integer():
            raise ThoughtValidationError(key, f"Invalid {key}: must be a positive integer")
        value = int(value)
    if value < 1:
        raise ThoughtValidationError(key, f"Invalid {key}: must be a positive integer")
    return value


def _optional_bool(obj: dict[str, Any], key: str) -> bool | None:
    value = obj.get(key)
    if value is not None and not isinstance(value, bool):
        raise ThoughtValidationError(key, f"Invalid {key}: must be a boolean")
    return value


@dataclass(frozen=True)
class ThoughtRecord:
    thought: str
    thought_number: int
    total_thoughts: int
    next_thought_needed: bool
    is_revision: bool | None = None
    revises_thought: int | None = None
    branch_from_thought: int | None = None
    branch_id: str | None = None
    needs_more_thoughts: bool | None = None

    @property
    def is_branch(self) -> bool:
        return bool(self.branch_from_thought and self.branch_id)

    @staticmethod
    def from_obj(obj: Any) -> "ThoughtRecord":
        """Validate raw call arguments; raises ThoughtValidationError naming the bad field."""
        if not isinstance(obj, dict):
            raise ThoughtValidationError("arguments", "Invalid arguments: must be an object")

        thought = obj.get("thought")
        if not isinstance(thought, str) or not thought:
            raise ThoughtValidationError("thought", "Invalid thought: must be a non-empty string")
        thought_number = _positive_int(obj, "thoughtNumber", required=True)
        total_thoughts = _positive_int(obj, "totalThoughts", required=True)
        next_needed = obj.get("nextThoughtNeeded")
        if not isinstance(next_needed, bool):
            raise ThoughtValidationError("nextThoughtNeeded", "Invalid nextThoughtNeeded: must be a boolean")

        branch_id = obj.get("branchId")
        if branch_id is not None and not isinstance(branch_id, str):
            raise ThoughtValidationError("branchId", "Invalid branchId: must be a string")

        return ThoughtRecord(
            thought=thought,
            thought_number=thought_number,  # type: ignore[arg-type]
            total_thoughts=total_thoughts,  # type: ignore[arg-type]
            next_thought_needed=next_needed,
            is_revision=_optional_bool(obj, "isRevision"),
            revises_thought=_positive_int(obj, "revisesThought", required=False),
            branch_from_thought=_positive_int(obj, "branchFromThought", required=False),
            branch_id=branch_id or None,
            needs_more_thoughts=_optional_bool(obj, "needsMoreThoughts"),
        )


def render_thought(rec: ThoughtRecord) -> str:
    if rec.is_revision:
        prefix, context = "Revision", f" (revising thought {rec.revises_thought})"
    elif rec.branch_from_thought:
        prefix, context = "Branch", f" (from thought {rec.branch_from_thought}, ID: {rec.branch_id})"
    else:
        prefix, context = "Thought", ""
    header = f"{prefix} {rec.thought_number}/{rec.total_thoughts}{context}"
    rule = "-" * max(len(header), 12)
    return f"{header}\n{rule}\n{rec.thought}"


class ThoughtLog:
    """Append-only thought history plus named branches.

    A branch entry is the same record object that sits in the history.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._history: list[ThoughtRecord] = []
        self._branches: dict[str, list[ThoughtRecord]] = {}

    @property
    def history(self) -> list[ThoughtRecord]:
        with self._lock:
            return list(self._history)

    @property
    def branches(self) -> dict[str, list[ThoughtRecord]]:
        with self._lock:
            return {k: list(v) for k, v in self._branches.items()}

    def record(self, rec: ThoughtRecord) -> tuple[ThoughtRecord, dict[str, Any]]:
        """Normalize, append and snapshot under one lock."""
        if rec.thought_number > rec.total_thoughts:
            rec = replace(rec, total_thoughts=rec.thought_number)
        with self._lock:
            self._history.append(rec)
            if rec.is_branch:
                self._branches.setdefault(rec.branch_id, []).append(rec)  # type: ignore[arg-type]
            snapshot = {
                "thoughtNumber": rec.thought_number,
                "totalThoughts": rec.total_thoughts,
                "nextThoughtNeeded": rec.next_thought_needed,
                "branches": list(self._branches.keys()),
                "thoughtHistoryLength": len(self._history),
            }
        return rec, snapshot

    def reset(self) -> None:
        with self._lock:
            self._history.clear()
            self._branches.clear()


class SequentialThinkingTool:
    spec = ToolSpec(
        name=NAME,
        description=SEQUENTIAL_THINKING_DESCRIPTION,
        parameters={
            "type": "object",
            "properties": {
                "thought": {"type": "string", "description": "Your current thinking step"},
                "nextThoughtNeeded": {"type": "boolean", "description": "Whether another thought step is needed"},
                "thoughtNumber": {"type": "integer", "description": "Current thought number", "minimum": 1},
                "totalThoughts": {"type": "integer", "description": "Estimated total thoughts needed", "minimum": 1},
                "isRevision": {"type": "boolean", "description": "Whether this revises previous thinking"},
                "revisesThought": {"type": "integer", "description": "Which thought is being reconsidered", "minimum": 1},
                "branchFromThought": {"type": "integer", "description": "Branching point thought number", "minimum": 1},
                "branchId": {"type": "string", "description": "Branch identifier"},
                "needsMoreThoughts": {"type": "boolean", "description": "If more thoughts are needed"},
            },
            "required": ["thought", "nextThoughtNeeded", "thoughtNumber", "totalThoughts"],
        },
        annotations=SEQUENTIAL_THINKING,
    )

    def __init__(self, log: ThoughtLog):
        self.log = log

    async def execute(self, args: dict[str, Any]) -> ToolResult:
        logger.debug("Handling sequential_thinking tool with args: %s...", json.dumps(args, default=str)[:100])
        try:
            rec = ThoughtRecord.from_obj(args)
        except ThoughtValidationError as e:
            logger.warning("Rejected sequential_thinking call: %s", e)
            return error_result(NAME, str(e), "Invalid thought data provided. Please check the required parameters.")

        rec, snapshot = self.log.record(rec)
        logger.info("%s", render_thought(rec))
        return text_result(json.dumps(snapshot, indent=2))
