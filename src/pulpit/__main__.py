"""Entry point for `python -m pulpit`."""

import sys

from pulpit.cli.__main__ import main

if __name__ == "__main__":
    sys.exit(main())
