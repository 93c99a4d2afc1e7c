#!/usr/bin/env python3
"""
Pytest configuration: make the ``notegraph`` package importable from a
source checkout without installing it.
"""

import sys
from pathlib import Path

project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))
