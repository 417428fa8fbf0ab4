#!/usr/bin/env python3
"""Entry point to run the auto-apply agent."""
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from autoapply.config import PROFILE_PATH
from autoapply.log import get_logger

log = get_logger(__name__)


def _check_setup() -> bool:
    """Return True if first-run setup is needed."""
    if not PROFILE_PATH.exists():
        print()
        print("  No profile found. Create one from the example first:")
        print("    cp config/profile.example.yaml config/profile.yaml")
        print()
        return True
    return False


if __name__ == "__main__":
    if _check_setup():
        sys.exit(1)

    from autoapply.agent import main

    sys.exit(main(sys.argv[1:]))
