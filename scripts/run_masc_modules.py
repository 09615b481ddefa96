#!/usr/bin/env python3
"""MASC Module Runner.

Usage:
    python scripts/run_masc_modules.py run scripts/user_config.py
    python scripts/run_masc_modules.py run scripts/user_config.py --start 2019-01-10 --end 2019-01-12
    python scripts/run_masc_modules.py run scripts/user_config.py --modules flake_geometry flake_shape
    python scripts/run_masc_modules.py revert /data/masc/2019 2019-01-10

Note: User config in scripts/user_config.py, expert defaults in src/masclab/schemas/param.py
"""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from masclab.cli.run_modules import main


if __name__ == "__main__":
    sys.exit(main())
