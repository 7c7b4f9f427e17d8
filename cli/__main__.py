"""
CLI Main Entry Point

Run this module to start the interactive CLI:
    python -m cli [--data sales.csv] [--engine local|openai]
"""
import argparse
import asyncio
import logging
from dotenv import load_dotenv
from cli.main import run_cli


def configure_logging(level: int = logging.INFO) -> None:
    """Configure logging for the CLI."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def load_env() -> None:
    """Load environment variables from .env file."""
    load_dotenv()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="chartura", description="Chart and question a small dataset.")
    parser.add_argument("--data", help="CSV, TSV or JSON file to load instead of the demo rows")
    parser.add_argument("--engine", choices=["local", "openai"], default="local", help="Askura engine")
    parser.add_argument("--model", help="Chat model for the openai engine")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser.parse_args()


if __name__ == '__main__':
    args = parse_args()
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    load_env()
    asyncio.run(run_cli(data_file=args.data, engine=args.engine, model_name=args.model))
