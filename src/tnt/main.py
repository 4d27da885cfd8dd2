"""Main entry point for tnt.

Loads the whole forest, applies one command, writes the whole forest back.
"""
import logging
import sys
from pathlib import Path
from typing import List, Optional

from tnt.cli import CLI, MUTATING_COMMANDS, build_parser
from tnt.forest import Forest
from tnt.logging_setup import setup_logging
from tnt.storage import Storage, StorageError, default_tasks_file

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose)
    path = Path(args.file).expanduser() if args.file else default_tasks_file()
    try:
        forest = Forest(Storage.load_tasks(path))
        logger.debug("loaded %s: %s", path, forest)
        CLI(forest).run(args)
        if args.command in MUTATING_COMMANDS:
            Storage.save_tasks(forest, path)
    except StorageError as exc:
        logger.debug("storage failure", exc_info=True)
        print(f"tnt: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
