"""Environment-backed settings."""
import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("⚠️ Ignoring non-integer %s=%r; using %d", name, raw, default)
        return default


def openai_api_key() -> Optional[str]:
    """Return the OpenAI API key, or None when unset or blank."""
    key = os.getenv("OPENAI_API_KEY", "").strip()
    return key or None


def askura_model() -> str:
    return os.getenv("ASKURA_MODEL", DEFAULT_MODEL).strip() or DEFAULT_MODEL


def prompt_row_limit() -> int:
    """Number of dataset rows included in the LLM prompt."""
    return max(0, _int_env("ASKURA_MAX_ROWS", 12))


def upload_row_limit() -> int:
    return max(1, _int_env("CHARTURA_MAX_ROWS", 5000))


def max_body_bytes() -> int:
    return max(1, _int_env("CHARTURA_MAX_BODY", 1024 * 1024))
