"""Askura: answers natural-language questions about the dataset"""
from .errors import AskuraError, BadRequestError, MissingAPIKeyError, UpstreamError
from .llm_answerer import AskuraLLM
from .local_answerer import LocalAnswerer
from .prompt import build_prompt

__all__ = [
    "AskuraError",
    "AskuraLLM",
    "BadRequestError",
    "LocalAnswerer",
    "MissingAPIKeyError",
    "UpstreamError",
    "build_prompt",
]
