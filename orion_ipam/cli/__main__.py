#!/usr/bin/env python3
"""
Entry point for orion-ipam CLI tool.
"""

import sys

from orion_ipam.cli.cli import main

if __name__ == "__main__":
    sys.exit(main())
