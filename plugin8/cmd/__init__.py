"""
This module holds all of the command classes for plugin8's main entrypoint
"""

# Local
from .base import CmdBase
from .cleanup_cmd import CleanupCmd
from .reconcile_cmd import ReconcileCmd
