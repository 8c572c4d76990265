"""
Module execution entry point.

Allows running with: python -m prophecy_cli
"""

import sys
from prophecy_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
