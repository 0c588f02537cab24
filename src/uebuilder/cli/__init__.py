"""
Command-line interface for ue-builder.
"""

from .main import main_cli

__all__ = ["main_cli"]
