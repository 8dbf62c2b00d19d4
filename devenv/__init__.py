"""
FlowDesk developer environment.

This package bootstraps and operates the FlowDesk Docker Compose stack:
one-time setup, guarded day-to-day commands, and a local CI simulation.
"""

from devenv.config import SCRIPT_VERSION as __version__

__all__ = ["__version__"]
