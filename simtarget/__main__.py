"""Entry point for ``python -m simtarget``."""

import sys

from simtarget.main import cli

if __name__ == "__main__":
    sys.exit(cli())
