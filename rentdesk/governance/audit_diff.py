"""Key-by-key diff of audit snapshots, for display only."""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

IGNORED_KEYS = frozenset({"id", "created_at", "updated_at"})


@dataclass(frozen=True)
class FieldChange:
    key: str
    kind: str  # added | removed | changed
    old: Any = None
    new: Any = None

    def render(self) -> str:
        if self.kind == "added":
            return f"{self.key}: added ({_display(self.new)})"
        if self.kind == "removed":
            return f"{self.key}: removed ({_display(self.old)})"
        return f"{self.key}: {_display(self.old)} → {_display(self.new)}"


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)


def _display(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def diff_states(
    before: Optional[Dict[str, Any]],
    after: Optional[Dict[str, Any]],
) -> List[FieldChange]:
    """Changed top-level keys, sorted by key. Values compare by their JSON form."""
    before = before or {}
    after = after or {}
    changes: List[FieldChange] = []
    for key in sorted(set(before) | set(after)):
        if key in IGNORED_KEYS:
            continue
        in_before = key in before
        in_after = key in after
        if not in_before:
            changes.append(FieldChange(key=key, kind="added", new=after[key]))
        elif not in_after:
            changes.append(FieldChange(key=key, kind="removed", old=before[key]))
        elif _canonical(before[key]) != _canonical(after[key]):
            changes.append(FieldChange(key=key, kind="changed", old=before[key], new=after[key]))
    return changes


def render_changes(
    before: Optional[Dict[str, Any]],
    after: Optional[Dict[str, Any]],
) -> List[str]:
    return [change.render() for change in diff_states(before, after)]
