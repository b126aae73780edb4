#!/usr/bin/env python3
"""
Allow running leakwatch as a module: python -m leakwatch
"""

from leakwatch.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
