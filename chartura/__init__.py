"""
Chartura core library.

Pure library module with NO CLI or server code.

Usage:
    from chartura import Chartura

    app = Chartura()
    svg = app.render()
    answer = await app.ask("What was our best year?")
"""

from chartura.api import Chartura

__all__ = ["Chartura"]
