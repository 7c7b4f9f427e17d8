"""ASGI entrypoint for Chartura.

    uvicorn src.app:app --port 8000

`python -m server` serves this app; CHARTURA_LOG_LEVEL picks the log level (default INFO).
"""
import logging
import os

from server.app import CharturaServer

server = CharturaServer(log_level=getattr(logging, os.getenv("CHARTURA_LOG_LEVEL", "INFO").upper(), logging.INFO))
app = server.create_app()
