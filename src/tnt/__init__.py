"""tnt: a hierarchical todo list with one task in focus."""
from tnt.arena import ArenaTree, Node, NodeNotFound
from tnt.forest import Forest, RootNotFound
from tnt.matching import find_matching_task
from tnt.models import Task
from tnt.storage import Storage, StorageError

__all__ = [
    'ArenaTree', 'Node', 'NodeNotFound', 'Forest', 'RootNotFound',
    'find_matching_task', 'Task', 'Storage', 'StorageError',
]
