"""
Core API for Chartura

This is the single-session object used by any interface (CLI, web server, etc.):
one dataset, one chat transcript and one follow-up memory per instance.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from chartura.analytics import kpi_cards
from chartura.askura import AskuraError, AskuraLLM, BadRequestError, LocalAnswerer
from chartura.charts import render_chart
from chartura.data import DatasetLoader, default_rows
from chartura.models import AskuraMemory, ChartContext, ChatMessage, KpiCard, Row

logger = logging.getLogger(__name__)

GREETING = "Ask me anything about your data (e.g., “What was our best year?”)."
ENGINES = ("local", "openai")


class Chartura:
    """
    Core API for viewing, charting and questioning a small tabular dataset.

    Usage:
        app = Chartura()
        app.load_path("sales.csv")
        svg = app.render(ChartContext(mode="bar", y_a="units"))
        answer = await app.ask("What was our best year?")
    """

    def __init__(
        self,
        model_name: Optional[str] = None,
        loader: Optional[DatasetLoader] = None,
        llm: Optional[AskuraLLM] = None,
    ):
        """
        Args:
            model_name: Chat model for the OpenAI engine (defaults to ASKURA_MODEL)
            loader: Dataset loader to use for uploads
            llm: Remote answerer; built lazily on first use when omitted
        """
        self.loader = loader or DatasetLoader()
        self.llm = llm or AskuraLLM(model_name=model_name)
        self.local = LocalAnswerer()
        self.rows: List[Row] = default_rows()
        self.source = "demo"
        self.messages: List[ChatMessage] = [ChatMessage(role="ai", text=GREETING)]

    @property
    def memory(self) -> Optional[AskuraMemory]:
        return self.local.memory

    def load_file(self, filename: str, payload: bytes) -> List[Row]:
        """
        Replace the dataset with an uploaded CSV, TSV or JSON file.

        Raises:
            DatasetError: If the file cannot be parsed; the current dataset is kept
        """
        rows = self.loader.load_bytes(filename, payload)
        self.rows = rows
        self.source = filename or "upload"
        self.local.reset()
        logger.info("✅ Dataset replaced by %s (%d rows)", self.source, len(rows))
        return rows

    def load_path(self, path: str | Path) -> List[Row]:
        p = Path(path)
        return self.load_file(p.name, p.read_bytes()) if p.is_file() else self.loader.load_path(p)

    def reset_dataset(self) -> List[Row]:
        """Go back to the demo rows."""
        self.rows = default_rows()
        self.source = "demo"
        self.local.reset()
        return self.rows

    def dataset(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "count": len(self.rows),
            "rows": [r.to_serializable() for r in self.rows],
        }

    def kpis(self) -> List[KpiCard]:
        return kpi_cards(self.rows)

    def render(self, context: Optional[ChartContext] = None, title: Optional[str] = None) -> str:
        """Render the current dataset as an SVG document."""
        return render_chart(self.rows, context or ChartContext(), title=title)

    async def ask(self, question: str, context: Optional[ChartContext] = None, engine: str = "local") -> str:
        """
        Answer a question and record both sides in the transcript.

        Remote failures do not raise: the transcript and the return value
        carry an ``Askura error: ...`` line instead.

        Args:
            question: Natural-language question; blank questions are ignored
            context: Current chart settings, used as the default metric
            engine: ``local`` (regex heuristic) or ``openai``

        Returns:
            The answer text, or "" for a blank question

        Raises:
            ValueError: If the engine is unknown
        """
        if engine not in ENGINES:
            raise ValueError(f"Unknown engine: {engine}")
        q = question.strip()
        if not q:
            return ""

        context = context or ChartContext()
        self.messages.append(ChatMessage(role="user", text=q))
        if engine == "local":
            answer = self.local.answer(q, self.rows, context)
        else:
            try:
                answer = await self.answer_remote(
                    q, [r.to_serializable() for r in self.rows], context.to_serializable()
                )
            except AskuraError as e:
                logger.warning("Askura remote answer failed: %s", e.message)
                answer = f"Askura error: {e.message}"
            except Exception as e:
                logger.exception("❌ Askura remote answer crashed")
                answer = f"Askura error: {str(e) or 'Unknown server error'}"
        self.messages.append(ChatMessage(role="ai", text=answer))
        return answer

    async def answer_remote(self, question: str, rows: Sequence[Dict[str, Any]], context: Dict[str, Any]) -> str:
        """
        Stateless passthrough to the chat model; nothing is recorded.

        Raises:
            AskuraError: On a missing question, missing API key or upstream failure
        """
        if not question or not question.strip():
            raise BadRequestError('Bad Request: missing "question", "rows", or "context".')
        return await self.llm.answer(question.strip(), rows, context)

    def history(self) -> List[Dict[str, Any]]:
        return [m.to_serializable() for m in self.messages]

    def clear_messages(self) -> None:
        """Reset the transcript to the greeting and forget follow-up context."""
        self.messages = [ChatMessage(role="ai", text=GREETING)]
        self.local.reset()
