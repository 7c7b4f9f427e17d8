import logging
from typing import Any, Dict, Optional, Sequence

import openai
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage
from langchain_openai import ChatOpenAI

from chartura.askura.errors import AskuraError, MissingAPIKeyError, UpstreamError
from chartura.askura.prompt import build_prompt
from chartura.utils.response_formatter import format_response
from chartura.utils.settings import askura_model, openai_api_key, prompt_row_limit

logger = logging.getLogger(__name__)


class AskuraLLM:
    """Answers questions by forwarding the question, rows and chart context to an OpenAI chat model."""

    def __init__(self, model_name: Optional[str] = None, max_rows: Optional[int] = None):
        self.model_name = model_name
        self.max_rows = max_rows if max_rows is not None else prompt_row_limit()
        self.llm: Optional[BaseChatModel] = None

    def has_api_key(self) -> bool:
        """Return True if an OpenAI API key is available in the environment."""
        return openai_api_key() is not None

    async def initialize(self, llm: Optional[BaseChatModel] = None) -> "AskuraLLM":
        """Attach a chat model; without one, build the default OpenAI model.

        Raises:
            MissingAPIKeyError: If no model is given and OPENAI_API_KEY is unset
        """
        if llm is not None:
            self.llm = llm
            return self
        if not self.has_api_key():
            raise MissingAPIKeyError()
        self.llm = self.setup_llm(model_name=self.model_name)
        return self

    def setup_llm(self, model_name: Optional[str] = None) -> BaseChatModel:
        """Create and return the chat model."""
        chosen_model = model_name or askura_model()
        return ChatOpenAI(
            name="askura",
            model=chosen_model,
            temperature=0.2,
            streaming=False,
            api_key=openai_api_key(),
        )

    async def answer(self, question: str, rows: Sequence[Dict[str, Any]], context: Dict[str, Any]) -> str:
        """Ask the model and return its trimmed text answer.

        Raises:
            MissingAPIKeyError: If the model was never initialized and no key is set
            UpstreamError: On an HTTP error from OpenAI or an empty answer
            AskuraError: If OpenAI cannot be reached
        """
        if self.llm is None:
            await self.initialize()
        assert self.llm is not None

        prompt = build_prompt(question, rows, context, max_rows=self.max_rows)
        logger.info("🧠 Asking %s: %s", self.model_name or askura_model(), question[:100])
        try:
            response = await self.llm.ainvoke([HumanMessage(content=prompt)])
        except openai.APIStatusError as e:
            logger.error("OpenAI HTTP error %s: %s", e.status_code, e.message)
            raise UpstreamError(f"OpenAI error ({e.status_code}): {e.message}") from e
        except openai.APIConnectionError as e:
            logger.error("❌ OpenAI unreachable: %s", e)
            raise AskuraError("Network or server unreachable.", 500) from e

        answer = format_response(response)
        if not answer:
            logger.error("OpenAI empty answer: %s", str(response)[:500])
            raise UpstreamError("No answer from OpenAI.")
        return answer
