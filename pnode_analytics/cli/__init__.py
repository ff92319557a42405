"""
pnode_analytics Command Line Interface.

Listing, detail and statistics views over the pNodes reported by pRPC.
"""

from .main import cli, main

__all__ = ["cli", "main"]
