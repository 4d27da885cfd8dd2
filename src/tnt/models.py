"""Data models for tnt.

Task extends the generic arena Node with the fields the tracker needs.
Timestamps are naive local datetimes, stored as ISO-8601 strings.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from tnt.arena import Node


@dataclass
class Task(Node):
    """A single task in the forest.

    Fields:
        id: Position in the forest; never reused.
        value: Description shown to the user.
        parent: Parent task id, None for a root.
        children: Child ids in insertion order.
        active: True for the one task currently in focus.
        done: Terminal completion flag.
        last_touched: Recency marker used to pick the active branch.
    """
    active: bool = False
    done: bool = False
    last_touched: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return str(self.value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'value': self.value,
            'parent': self.parent,
            'children': list(self.children),
            'active': self.active,
            'done': self.done,
            'last_touched': self.last_touched.isoformat(),
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any], now: Optional[datetime] = None) -> 'Task':
        """Build a Task from a stored record.

        Raises ValueError when a field is missing or has the wrong type.
        A missing last_touched is filled with `now` (older documents lack it).
        """
        if not isinstance(raw, Mapping):
            raise ValueError(f"task record must be an object, got {type(raw).__name__}")
        for key in ('id', 'value', 'parent', 'children', 'active', 'done'):
            if key not in raw:
                raise ValueError(f"task record missing field {key!r}")
        tid = raw['id']
        if not _is_int(tid):
            raise ValueError(f"task id must be an integer, got {tid!r}")
        if not isinstance(raw['value'], str):
            raise ValueError(f"task {tid}: value must be a string")
        parent = raw['parent']
        if parent is not None and not _is_int(parent):
            raise ValueError(f"task {tid}: parent must be an integer or null")
        children = raw['children']
        if not isinstance(children, list) or not all(_is_int(c) for c in children):
            raise ValueError(f"task {tid}: children must be a list of integers")
        for key in ('active', 'done'):
            if not isinstance(raw[key], bool):
                raise ValueError(f"task {tid}: {key} must be a boolean")
        touched = raw.get('last_touched')
        if touched is None:
            last_touched = now or datetime.now()
        elif isinstance(touched, str):
            try:
                last_touched = datetime.fromisoformat(touched)
            except ValueError as exc:
                raise ValueError(f"task {tid}: bad last_touched {touched!r}") from exc
            if last_touched.tzinfo is not None:
                # compared against naive local now()
                last_touched = last_touched.astimezone().replace(tzinfo=None)
        else:
            raise ValueError(f"task {tid}: last_touched must be an ISO timestamp")
        return cls(
            id=tid,
            value=raw['value'],
            parent=parent,
            children=list(children),
            active=raw['active'],
            done=raw['done'],
            last_touched=last_touched,
        )


def _is_int(value: Any) -> bool:
    # bool is an int subclass; JSON true/false are not ids
    return isinstance(value, int) and not isinstance(value, bool)
