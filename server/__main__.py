"""
Chartura server launcher

    python -m server [--host 0.0.0.0] [--port 8000] [--reload]

Defaults come from SERVER_HOST, SERVER_PORT and SERVER_RELOAD (a .env file is read first).
Equivalent to:
    uvicorn src.app:app --port 8000
"""
import argparse
import os

import uvicorn
from dotenv import load_dotenv


def _truthy(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="chartura-server", description="Serve the Chartura API.")
    parser.add_argument("--host", default=os.getenv("SERVER_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("SERVER_PORT", "8000")))
    parser.add_argument("--reload", action="store_true", default=_truthy(os.getenv("SERVER_RELOAD", "")))
    parser.add_argument("--log-level", default=os.getenv("SERVER_LOG_LEVEL", "info"))
    return parser.parse_args()


if __name__ == '__main__':
    load_dotenv()
    args = parse_args()
    uvicorn.run(
        "src.app:app",  # import string so --reload can re-import the app
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )
