"""
Core API for Chartura.

This package provides a clean, interface-agnostic API that can be used
by the CLI, the web server, or any other interface.
"""
from .chartura import ENGINES, GREETING, Chartura

__all__ = ["Chartura", "ENGINES", "GREETING"]
