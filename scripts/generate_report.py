#!/usr/bin/env python3
"""
Generate a flow validation report from the command line.
"""

import sys
from pathlib import Path

# Add the repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from flowreport.cli import main


if __name__ == "__main__":
    sys.exit(main())
