"""Persistence helpers: locate, load and save the task document.

The document is a JSON list of task records ordered by id. Loading checks
the forest's structural rules so the engine never sees dangling ids.
Saving replaces the whole file.
"""
import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from tnt.models import Task

logger = logging.getLogger(__name__)

FILE_ENV = 'TNT_FILE'


class StorageError(Exception):
    """The task document could not be read, written, or understood."""


def default_tasks_file() -> Path:
    """TNT_FILE, else $XDG_DATA_HOME/tnt/tasks.json, else ~/.local/share/tnt/tasks.json."""
    override = os.environ.get(FILE_ENV)
    if override:
        return Path(override).expanduser()
    data_home = os.environ.get('XDG_DATA_HOME')
    base = Path(data_home) if data_home else Path.home() / '.local' / 'share'
    return base / 'tnt' / 'tasks.json'


class Storage:
    @staticmethod
    def load_tasks(path: Path, now: Optional[datetime] = None) -> List[Task]:
        """Load tasks from disk.

        Missing file -> empty list. Anything else that is not a valid
        document raises StorageError.
        """
        if not path.exists():
            logger.debug("%s does not exist, starting empty", path)
            return []
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except OSError as exc:
            raise StorageError(f"cannot read {path}: {exc}") from exc
        except ValueError as exc:
            raise StorageError(f"{path} is not valid JSON: {exc}") from exc
        if not isinstance(data, list):
            raise StorageError(f"{path}: expected a list of tasks")
        now = now or datetime.now()
        try:
            tasks = [Task.from_dict(raw, now) for raw in data]
            check_links(tasks)
        except ValueError as exc:
            raise StorageError(f"{path}: {exc}") from exc
        logger.debug("loaded %d tasks from %s", len(tasks), path)
        return tasks

    @staticmethod
    def save_tasks(tasks: Iterable[Task], path: Path) -> None:
        """Persist tasks to disk (pretty-printed), truncating the old file."""
        records = [t.to_dict() for t in tasks]
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(records, f, indent=4)
        except OSError as exc:
            raise StorageError(f"cannot write {path}: {exc}") from exc
        logger.debug("saved %d tasks to %s", len(records), path)


def check_links(tasks: List[Task]) -> None:
    """Raise ValueError unless ids match positions, parents precede their
    children, and links agree both ways."""
    n = len(tasks)
    active = 0
    for pos, task in enumerate(tasks):
        if task.id != pos:
            raise ValueError(f"task at position {pos} has id {task.id}")
        if task.parent is not None:
            if not 0 <= task.parent < n:
                raise ValueError(f"task {pos}: parent {task.parent} does not exist")
            # a parent always exists before its children, which rules out cycles
            if task.parent >= pos:
                raise ValueError(f"task {pos}: parent {task.parent} is not an earlier task")
            if pos not in tasks[task.parent].children:
                raise ValueError(f"task {pos}: missing from children of {task.parent}")
        for child in task.children:
            if not 0 <= child < n:
                raise ValueError(f"task {pos}: child {child} does not exist")
            if tasks[child].parent != pos:
                raise ValueError(f"task {pos}: child {child} names another parent")
        if task.active:
            active += 1
    if active > 1:
        raise ValueError(f"{active} tasks are marked active")
