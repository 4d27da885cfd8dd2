"""Command-line interface: argument parsing and command dispatch.

One command runs per invocation against an already loaded Forest; the
caller loads and saves the document around it.
"""
import argparse
import logging
import sys
from typing import List, Optional, TextIO

from tnt.forest import Forest
from tnt.matching import find_matching_task
from tnt.models import Task
from tnt.theme import color, MUTED_COLOR

logger = logging.getLogger(__name__)

# commands that change the forest and therefore need a save afterwards
MUTATING_COMMANDS = frozenset({'add', 'first', 'also', 'done', 'stdin', 'switch', 'clear'})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='tnt', description='Interactive hierarchical todo list')
    parser.add_argument('-f', '--file', help='Task file (default: $TNT_FILE or ~/.local/share/tnt/tasks.json)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging on stderr')

    sub = parser.add_subparsers(dest='command')

    sub.add_parser('view', help='View the current task')
    sub.add_parser('done', help='Mark the current task done')
    sub.add_parser('clear', help='Clear all tasks and subtasks')
    sub.add_parser('local', help='List actionable subtasks of the current root task')

    add_p = sub.add_parser('add', help='Add a task')
    add_p.add_argument('name', nargs='+', help='Task name')
    add_p.add_argument('-p', '--parent', type=int, help='Id of the parent task')
    add_p.add_argument('-s', '--switch', action='store_true', help='Switch to the new task')

    first_p = sub.add_parser('first', help='Add a blocking subtask and switch to it')
    first_p.add_argument('name', nargs='+', help='Task name')

    also_p = sub.add_parser('also', help='Add a sibling of the current task')
    also_p.add_argument('name', nargs='+', help='Task name')
    also_p.add_argument('-s', '--switch', action='store_true', help='Switch to the new task')

    list_p = sub.add_parser('list', help='List tasks')
    list_p.add_argument('-a', '--all', action='store_true', help='List tasks and subtasks')

    stdin_p = sub.add_parser('stdin', help='Add tasks from stdin, one per line')
    stdin_p.add_argument('-p', '--parent', type=int, help='Id of the parent task; overrides --current')
    stdin_p.add_argument('-c', '--current', action='store_true', help='Add under the current task')

    switch_p = sub.add_parser('switch', help='Switch to a task by approximate name or id')
    switch_p.add_argument('pattern', nargs='*', help='Part of the task name')
    switch_p.add_argument('-i', '--id', type=int, help='Exact task id')

    return parser


class CLI:
    def __init__(self, forest: Forest, stdin: Optional[TextIO] = None):
        self.forest: Forest = forest
        self.stdin: TextIO = stdin if stdin is not None else sys.stdin

    def run(self, args: argparse.Namespace) -> None:
        command = args.command or 'view'
        logger.debug("running command %s", command)
        handler = getattr(self, '_cmd_' + command)
        handler(args)

    # -------------------- helpers --------------------
    def _valid_id(self, idx: int) -> bool:
        if 0 <= idx < len(self.forest):
            return True
        print(f"Task id {idx} not found.")
        return False

    def _open_parent(self, idx: int) -> bool:
        if not self._valid_id(idx):
            return False
        if self.forest[idx].done:
            print(f"Task {idx} is already done.")
            return False
        return True

    def _report_active(self) -> None:
        active = self.forest.get_active_task()
        if active is None:
            print("No active task.")
        else:
            print("Now working on: " + self.forest.format_task(active))

    def _add(self, name_parts: List[str], parent: Optional[int], switch: bool) -> None:
        name = ' '.join(name_parts).strip()
        if not name:
            print("Task name required.")
            return
        if parent is not None and not self._open_parent(parent):
            return
        idx = self.forest.add(name, parent=parent, switch=switch)
        print(f"Added task {idx}.")
        active = self.forest.get_active_task()
        if active is not None and active.id == idx:
            self._report_active()

    # -------------------- commands --------------------
    def _cmd_view(self, args: argparse.Namespace) -> None:
        active = self.forest.get_active_task()
        if active is None:
            print("No active task.")
            return
        print(self.forest.format_task(active))
        ancestors = self.forest.get_lineage(active.id)[:-1]
        if ancestors:
            trail = ' > '.join(self.forest[i].value for i in ancestors)
            print(color(f"  under: {trail}", MUTED_COLOR))

    def _cmd_add(self, args: argparse.Namespace) -> None:
        self._add(args.name, args.parent, args.switch)

    def _cmd_first(self, args: argparse.Namespace) -> None:
        active = self.forest.get_active_task()
        self._add(args.name, active.id if active else None, True)

    def _cmd_also(self, args: argparse.Namespace) -> None:
        active = self.forest.get_active_task()
        self._add(args.name, active.parent if active else None, args.switch)

    def _cmd_done(self, args: argparse.Namespace) -> None:
        completed = self.forest.done()
        if completed is None:
            print("No active task.")
            return
        print(f"Completed: {self.forest[completed].value}")
        if self.forest.get_active_task() is None:
            print("Nothing left to do.")
        else:
            self._report_active()

    def _cmd_clear(self, args: argparse.Namespace) -> None:
        count = len(self.forest)
        self.forest.clear()
        print(f"Cleared {count} tasks.")

    def _cmd_list(self, args: argparse.Namespace) -> None:
        lines = self.forest.render_all() if args.all else self.forest.render_roots()
        if not lines:
            print("No tasks.")
            return
        for line in lines:
            print(line)

    def _cmd_local(self, args: argparse.Namespace) -> None:
        active = self.forest.get_active_task()
        if active is None:
            print("No active task.")
            return
        root = self.forest.get_root(active.id)
        leaves: List[Task] = [
            self.forest[i] for i in self.forest.get_leaf_descendants(root)
            if not self.forest[i].done
        ]
        for task in leaves:
            print(self.forest.format_task(task))

    def _cmd_stdin(self, args: argparse.Namespace) -> None:
        parent: Optional[int] = args.parent
        if parent is None and args.current:
            active = self.forest.get_active_task()
            if active is None:
                print("No active task.")
                return
            parent = active.id
        if parent is not None and not self._open_parent(parent):
            return
        added = 0
        for line in self.stdin:
            name = line.strip()
            if not name:
                continue
            self.forest.add(name, parent=parent)
            added += 1
        print(f"Added {added} tasks.")

    def _cmd_switch(self, args: argparse.Namespace) -> None:
        if args.id is not None:
            if not self._valid_id(args.id):
                return
            target = self.forest[args.id]
        elif args.pattern:
            pattern = ' '.join(args.pattern)
            target = find_matching_task(pattern, (t for t in self.forest if not t.done))
            if target is None:
                print(f"No task matches {pattern!r}.")
                return
        else:
            print("Give part of a task name or --id.")
            return
        if target.done:
            print(f"Task {target.id} is already done.")
            return
        self.forest.set_active_task(target.id)
        self._report_active()
