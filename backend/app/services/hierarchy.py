"""
Hierarchy codec for the four-level task tree.

The tree (task -> subtask -> action item -> sub-action item) is stored
flat in the tasks table. Each row caches its ancestors in
level1_id..level4_id, and its own id in the field for its own level.

This module translates between that flat form and nested trees, and
decodes the JSON text columns. Everything here is pure: rows go in as
dicts, dicts come out.
"""

import json
from typing import Any, Callable, Mapping, Optional

from app.exceptions import InvalidRequestError
from app.logging_config import get_logger

logger = get_logger(__name__)

MAX_TASK_LEVEL = 4

# Field under which a node's children are attached, keyed by the node's level
CHILD_FIELDS = {
    1: "subtasks",
    2: "action_items",
    3: "subaction_items",
}


def level_field(level: int) -> str:
    """Name of the ancestor-pointer field for a task level."""
    if not isinstance(level, int) or not 1 <= level <= MAX_TASK_LEVEL:
        raise InvalidRequestError(f"Invalid task level: {level}")
    return f"level{level}_id"


def compute_ancestor_pointers(
    parent: Optional[Mapping[str, Any]],
    task_level: int,
) -> dict[str, int]:
    """
    Ancestor pointers for a new task placed under `parent`.

    Levels below the new task's level are inherited from the parent; when
    the parent itself is the ancestor at that level its own id is used.
    The new task's own level stays 0 until its id is known, and higher
    levels are always 0.

    Example: a parent subtask {id: 7, task_level: 2, level1_id: 3,
    level2_id: 7} gives a new action item {level1_id: 3, level2_id: 7,
    level3_id: 0, level4_id: 0}.
    """
    level_field(task_level)  # rejects levels outside 1..4
    pointers = {level_field(level): 0 for level in range(1, MAX_TASK_LEVEL + 1)}

    if parent is None:
        return pointers

    for level in range(1, task_level):
        field = level_field(level)
        inherited = parent.get(field) or 0
        if not inherited and parent.get("task_level") == level:
            inherited = parent["id"]
        pointers[field] = inherited

    return pointers


def build_tree(
    tasks: list[Mapping[str, Any]],
    parent_id: int = 0,
    level: int = 1,
) -> list[dict[str, Any]]:
    """
    Nest a flat task list starting from the tasks at (parent_id, level).

    Children are attached under CHILD_FIELDS[level]; level-4 nodes have no
    children field. Recursion depth is bounded by MAX_TASK_LEVEL since the
    level grows on every call.
    """
    nodes = []
    for task in tasks:
        if task["parent_id"] != parent_id or task["task_level"] != level:
            continue

        node = dict(task)
        child_field = CHILD_FIELDS.get(level)
        if child_field:
            node[child_field] = build_tree(tasks, task["id"], level + 1)
        nodes.append(node)

    return nodes


def flatten_tree(tree: list[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Inverse of build_tree: nodes in pre-order, children fields removed."""
    flat = []
    for node in tree:
        row = {key: value for key, value in node.items() if key not in CHILD_FIELDS.values()}
        flat.append(row)
        for child_field in CHILD_FIELDS.values():
            if child_field in node:
                flat.extend(flatten_tree(node[child_field]))
    return flat


def safe_json_loads(value: Any, default_factory: Callable[[], Any]) -> Any:
    """
    Parse a JSON text column, falling back to a fresh default.

    Already-decoded values of the right type pass through. Empty, null,
    malformed or wrongly typed values give default_factory().
    """
    default = default_factory()
    expected_type = type(default)

    if isinstance(value, expected_type):
        return value
    if not isinstance(value, str) or not value.strip():
        return default

    try:
        parsed = json.loads(value)
    except ValueError as e:
        logger.warning(f"Could not decode stored JSON value {value[:50]!r}: {e}")
        return default

    if not isinstance(parsed, expected_type):
        if parsed is not None:
            logger.warning(f"Stored JSON value has type {type(parsed).__name__}, expected {expected_type.__name__}")
        return default
    return parsed


def decode_stored_fields(row: Mapping[str, Any]) -> dict[str, Any]:
    """Decode est_prev_hours and info from their persisted text form."""
    task = dict(row)
    task["est_prev_hours"] = safe_json_loads(row.get("est_prev_hours"), list)
    task["info"] = safe_json_loads(row.get("info"), dict)
    return task


def encode_stored_fields(values: Mapping[str, Any]) -> dict[str, Any]:
    """Serialize est_prev_hours and info for writing."""
    encoded = dict(values)
    if "est_prev_hours" in encoded:
        encoded["est_prev_hours"] = json.dumps(list(encoded["est_prev_hours"] or []))
    if "info" in encoded:
        encoded["info"] = json.dumps(encoded["info"] or {})
    return encoded
