"""Field-level comparison of row snapshots.

Two values differ when their JSON serialisations differ, matching how the
database trigger compares jsonb values.
"""

import json
from typing import Any

from backoffice.history.models import FieldDifference

_MISSING = object()


def _serialise(value: Any) -> str | None:
    if value is _MISSING:
        return None
    return json.dumps(value, sort_keys=True, default=str)


def compute_changed_fields(
    old: dict[str, Any] | None,
    new: dict[str, Any] | None,
) -> list[str]:
    """Return the sorted keys, over both snapshots, whose values differ.

    A key present on one side only always counts as changed.
    """
    old = old or {}
    new = new or {}
    return sorted(
        key
        for key in set(old) | set(new)
        if _serialise(old.get(key, _MISSING)) != _serialise(new.get(key, _MISSING))
    )


def compare_versions(
    old: dict[str, Any] | None,
    new: dict[str, Any] | None,
) -> list[FieldDifference]:
    """List every differing field with its value on each side."""
    old = old or {}
    new = new or {}
    return [
        FieldDifference(field=key, old_value=old.get(key), new_value=new.get(key))
        for key in compute_changed_fields(old, new)
    ]
