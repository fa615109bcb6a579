"""
Main entry point for running the package as a module.

Usage:
    python -m albumgen photos/ gallery/ "Summer 2024"
    python -m albumgen -j 4 --face-detection photos/ gallery/
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
