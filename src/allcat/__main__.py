"""
Entry point for module execution (``python -m allcat``).

This module delegates execution to the CLI handler in ``allcat.cli.__main__``.
"""

import sys
from allcat.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
