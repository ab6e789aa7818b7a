"""Module entrypoint for ``python -m todoist_backup``."""

import sys

from todoist_backup.cli import main

if __name__ == "__main__":
    sys.exit(main())
