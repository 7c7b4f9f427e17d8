"""Utilities for normalizing chat-model responses to plain text."""

from __future__ import annotations
from typing import Any
import logging

logger = logging.getLogger(__name__)


def _content_to_text(content: Any) -> str:
    # Message content is either a string or a list of typed parts.
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type", "text") == "text":
                parts.append(str(part.get("text", "")))
        return "".join(parts)
    return str(content)


def format_response(resp: object) -> str:
    """Normalize a chat-model reply into a stripped string.

    Accepts plain strings, message objects with a ``content`` attribute, and
    raw chat-completion payloads (``{"choices": [{"message": {...}}]}``).
    Returns an empty string when no text can be found.
    """
    try:
        if isinstance(resp, str):
            return resp.strip()
        if isinstance(resp, dict):
            choices = resp.get("choices")
            if isinstance(choices, list) and choices:
                message = choices[0].get("message") if isinstance(choices[0], dict) else None
                if isinstance(message, dict):
                    return _content_to_text(message.get("content")).strip()
                return ""
            if "content" in resp:
                return _content_to_text(resp["content"]).strip()
            return ""
        if hasattr(resp, "content"):
            return _content_to_text(getattr(resp, "content")).strip()
        return ""
    except Exception:
        logger.exception("Error formatting response")
        return ""
