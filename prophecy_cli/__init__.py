"""
Prophecy CLI

Command-line interface for the oracle.

Usage:
    python -m prophecy_cli resolve "<question>" --market-id m1 --stake alice:100:yes
    python -m prophecy_cli reconsider --market-id m1 --outcome YES --evidence-cid bafy...
    python -m prophecy_cli serve --port 8000
    python -m prophecy_cli config --init
"""

__version__ = "0.1.0"
