"""Forest logic: task queries, active-task resolution, mutation, and rendering.

The forest is an ArenaTree of Task records. Tasks are never removed:
completing one sets `done`, which hides it (and, for traversal, its whole
subtree) from every query below. At most one task is `active`.

Choosing the active task walks down from a starting point, always into the
undone child with the latest `last_touched`, until it reaches a task with
no undone children. The winner and all of its ancestors are then touched
with the same timestamp, so a recently used subtree wins again the next
time its ancestors compete with their siblings.
"""
from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Callable, List, Optional, Set

from tnt.arena import ArenaTree
from tnt.models import Task
from tnt.theme import color, ID_COLOR, ACTIVE_COLOR

logger = logging.getLogger(__name__)

INDENT = '  '
ACTIVE_MARK = ' *'


class RootNotFound(LookupError):
    """Raised when a parent chain runs off the forest or loops."""


class Forest(ArenaTree[Task]):
    def __init__(self, tasks: Optional[List[Task]] = None,
                 clock: Callable[[], datetime] = datetime.now):
        super().__init__(tasks)
        self._clock = clock

    def _new_node(self, idx: int, value: Any) -> Task:
        return Task(id=idx, value=value, last_touched=self._clock())

    def __getitem__(self, idx: int) -> Task:
        return self.get_node(idx)

    # -------------------- queries --------------------
    def get_root_tasks(self) -> List[Task]:
        return [t for t in self._arena if t.parent is None and not t.done]

    def get_leaf_tasks(self) -> List[Task]:
        return [t for t in self._arena if not t.children and not t.done]

    def get_active_task(self) -> Optional[Task]:
        return next((t for t in self._arena if t.active), None)

    def get_root(self, idx: int) -> int:
        seen: Set[int] = set()
        while True:
            if not self._exists(idx) or idx in seen:
                raise RootNotFound(f"no root reachable from task {idx}")
            seen.add(idx)
            parent = self._arena[idx].parent
            if parent is None:
                return idx
            idx = parent

    def get_leaf_descendants(self, idx: int) -> List[int]:
        """Undone leaves under idx, in child order.

        A done child prunes its whole subtree. Returns [idx] when idx has
        no children at all, and [] when idx is unknown or done.
        """
        return self._leaf_descendants(idx, set())

    def _leaf_descendants(self, idx: int, seen: Set[int]) -> List[int]:
        if not self._exists(idx) or idx in seen:
            return []
        seen.add(idx)
        task = self._arena[idx]
        if task.done:
            return []
        if not task.children:
            return [idx]
        leaves: List[int] = []
        for child in task.children:
            leaves.extend(self._leaf_descendants(child, seen))
        return leaves

    def get_lineage(self, idx: int) -> List[int]:
        """Ids from the root of idx down to idx itself."""
        lineage = [idx]
        root = self.get_root(idx)
        while lineage[-1] != root:
            lineage.append(self._arena[lineage[-1]].parent)  # type: ignore[arg-type]
        lineage.reverse()
        return lineage

    # -------------------- mutation --------------------
    def add(self, value: str, parent: Optional[int] = None, switch: bool = False) -> int:
        """Create a task and return its id.

        Focus moves to the new task when `switch` is set, when nothing is
        active yet, or when the new task is a child of the active one.
        Raises NodeNotFound for an unknown parent.
        """
        active = self.get_active_task()
        if parent is None:
            idx = self.add_node(value)
        else:
            idx = self.add_child_node(parent, value)
        logger.debug("added task %d %r under %s", idx, value, parent)
        if switch or active is None or active.id == parent:
            self.set_active_task(idx)
        return idx

    def done(self) -> Optional[int]:
        """Complete the active task and refocus from its parent.

        Returns the completed id, or None when no task was active.
        """
        active = self.get_active_task()
        if active is None:
            return None
        active.done = True
        active.active = False
        logger.debug("completed task %d", active.id)
        self.set_active_task(active.parent)
        return active.id

    def set_active_task(self, target: Optional[int] = None) -> Optional[int]:
        """Make the most recently touched undone leaf under target active.

        With no target the search starts from the root tasks; a done target
        starts from its nearest undone ancestor instead. Returns the
        id that became active, or None when the forest has no candidate.
        Raises NodeNotFound for an unknown target.
        """
        resolved = self._resolve(target)
        for task in self._arena:
            task.active = False
        if resolved is None:
            logger.debug("no task to activate")
            return None
        self._arena[resolved].active = True
        self._touch(resolved)
        logger.debug("active task is now %d", resolved)
        return resolved

    def _resolve(self, target: Optional[int]) -> Optional[int]:
        if target is not None:
            target = self._nearest_undone(target)
        if target is None:
            roots = self.get_root_tasks()
            if not roots:
                return None
            # max() keeps the first of equal keys
            target = max(roots, key=lambda t: t.last_touched).id
        current = self.get_node(target)
        seen = {current.id}
        while True:
            candidates = [
                self._arena[c] for c in current.children
                if self._exists(c) and c not in seen and not self._arena[c].done
            ]
            if not candidates:
                return current.id
            current = max(candidates, key=lambda t: t.last_touched)
            seen.add(current.id)

    def _nearest_undone(self, idx: int) -> Optional[int]:
        """idx itself, or its closest undone ancestor; None if all are done."""
        task = self.get_node(idx)
        seen: Set[int] = set()
        while task.done and task.id not in seen:
            seen.add(task.id)
            if task.parent is None:
                return None
            task = self.get_node(task.parent)
        return None if task.done else task.id

    def _touch(self, idx: int) -> None:
        now = self._clock()
        seen: Set[int] = set()
        cursor: Optional[int] = idx
        while cursor is not None and cursor not in seen:
            seen.add(cursor)
            task = self.get_node(cursor)
            task.last_touched = now
            cursor = task.parent

    def clear(self) -> None:
        logger.debug("clearing %d tasks", len(self._arena))
        self._arena = []

    # -------------------- display --------------------
    def format_task(self, task: Task, depth: int = 0) -> str:
        prefix = INDENT * depth + color(f"{task.id}.", ID_COLOR) + ' '
        if task.active:
            return prefix + color(task.value + ACTIVE_MARK, ACTIVE_COLOR)
        return prefix + task.value

    def render_roots(self) -> List[str]:
        return [self.format_task(t) for t in self.get_root_tasks()]

    def render_all(self) -> List[str]:
        lines: List[str] = []
        for root in self.get_root_tasks():
            self._render_subtree(root, 0, lines, set())
        return lines

    def _render_subtree(self, task: Task, depth: int, lines: List[str], seen: Set[int]) -> None:
        seen.add(task.id)
        lines.append(self.format_task(task, depth))
        for child_idx in task.children:
            child = self.get_node(child_idx)
            if child.done or child_idx in seen:
                continue
            self._render_subtree(child, depth + 1, lines, seen)

    def display(self) -> None:
        for line in self.render_roots():
            print(line)

    def display_all(self) -> None:
        for line in self.render_all():
            print(line)

    def __str__(self) -> str:
        active = self.get_active_task()
        return (f'{len(self._arena)} tasks, '
                f'{sum(1 for t in self._arena if not t.done)} open, '
                f'active: {active.id if active else None}')
