"""Package entry point for ``python -m sassy``."""

import sys

from sassy.cli import main

if __name__ == "__main__":
    sys.exit(main())
