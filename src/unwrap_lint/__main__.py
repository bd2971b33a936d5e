"""
Entry point for module execution (``python -m unwrap_lint``).

This module delegates execution to the CLI handler in ``unwrap_lint.cli.__main__``.
"""

import sys
from unwrap_lint.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
