#!/usr/bin/env python3
"""
Allows running the command line with: python -m signed_approval
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
