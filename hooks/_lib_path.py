#!/usr/bin/env python3
"""Path setup so hook scripts can import ``deep_review`` from ../lib/ without
an installed package. Import this first in hooks.

This module is imported for side effects only (modifies sys.path).
"""

import sys
from pathlib import Path

_lib_dir = str(Path(__file__).resolve().parent.parent / "lib")
if _lib_dir not in sys.path:
    sys.path.insert(0, _lib_dir)
