"""
Command-line interface for workshops.
"""

from .main import build_app, configure_logging

__all__ = ["build_app", "configure_logging"]
