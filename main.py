#!/usr/bin/env python3
"""Main entry point for minivcs.

Runs one version-control command against --workdir (default: the current
directory), e.g. ``python main.py --workdir ./project status``.
"""

import sys
from pathlib import Path

# Add the project root to Python path
sys.path.insert(0, str(Path(__file__).parent))

if __name__ == "__main__":
    from minivcs.cli import main

    sys.exit(main())
