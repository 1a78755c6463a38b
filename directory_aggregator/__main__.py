"""
Package entry point.

Allows running: python -m directory_aggregator serve
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
