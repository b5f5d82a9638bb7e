"""
Entry point for module execution (``python -m primeng_migrate``).

This module delegates execution to the CLI handler in ``primeng_migrate.cli.__main__``.
"""

import sys
from primeng_migrate.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
