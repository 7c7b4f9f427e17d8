"""FastAPI application for Chartura.

This module exposes a class-based server wrapper (no global mutable state).

- `app` is exported for `uvicorn server.app:app` and tests.
- `src.app:app` is the preferred ASGI entrypoint (see `src/app.py`).
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Literal, Optional

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field
from starlette.requests import Request

from chartura import Chartura
from chartura.askura import AskuraError, BadRequestError
from chartura.data import DatasetError
from chartura.models import ChartContext
from chartura.utils.settings import max_body_bytes

ASKURA_PATH = "/api/askura"


def configure_logging(level: int = logging.INFO) -> None:
    """Configure logging for the server."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        force=True,
    )
    logging.getLogger("chartura").setLevel(level)
    logging.getLogger("server").setLevel(level)


logger = logging.getLogger(__name__)


# ============================================================================
# Request/Response Models
# ============================================================================


class ChartContextModel(BaseModel):
    """Chart settings as sent by the page."""

    mode: str = Field("line", description="line, area, bar, scatter, dual or pie")
    yA: str = Field("revenue", description="Primary metric")
    yB: Optional[str] = Field(None, description="Secondary metric")
    secondaryOn: bool = Field(False, description="Whether the secondary metric is shown")


class AskuraRequest(BaseModel):
    """Body of the stateless LLM passthrough; fields are checked by hand to return 400."""

    question: Optional[str] = None
    rows: Optional[Any] = None
    context: Optional[Any] = None


class AskuraResponse(BaseModel):
    answer: str = Field(..., description="Answer from the chat model")


class AskRequest(BaseModel):
    """Request model for a question recorded in the session transcript."""

    question: str = Field(..., description="Natural language question about the data")
    context: Optional[ChartContextModel] = Field(None, description="Current chart settings")
    engine: Literal["local", "openai"] = Field("local", description="Answering engine")


class AskResponse(BaseModel):
    answer: str = Field(..., description="Answer text")
    engine: str = Field(..., description="Engine that produced the answer")


class DatasetResponse(BaseModel):
    source: str = Field(..., description="'demo' or the uploaded filename")
    count: int = Field(..., description="Number of rows")
    rows: list = Field(..., description="Rows with camelCase keys")


class KpiResponse(BaseModel):
    cards: list = Field(..., description="KPI cards with label, value and hint")


class MessagesResponse(BaseModel):
    messages: list = Field(..., description="Transcript, oldest first")
    message_count: int = Field(..., description="Total number of messages")


class HealthResponse(BaseModel):
    status: str = Field(..., description="Server health status")
    system_ready: bool = Field(..., description="Whether the session is ready")
    rows: int = Field(..., description="Rows in the current dataset")


def _context_from(model: Optional[ChartContextModel]) -> ChartContext:
    if model is None:
        return ChartContext()
    return ChartContext.from_dict(model.model_dump())


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


class CharturaServer:
    """Encapsulates FastAPI app + Chartura session lifecycle."""

    def __init__(self, *, log_level: int = logging.INFO) -> None:
        configure_logging(log_level)
        self.system: Optional[Chartura] = None

    @asynccontextmanager
    async def lifespan(self, app: FastAPI) -> AsyncIterator[None]:
        """Lifespan event handler for startup and shutdown."""
        logger.info("=" * 70)
        logger.info("🚀 CHARTURA SERVER STARTING")
        logger.info("=" * 70)
        self.system = Chartura()
        logger.info("✅ Server ready with %d demo rows", len(self.system.rows))

        yield

        logger.info("👋 Server shutting down...")

    def create_app(self) -> FastAPI:
        """Create and configure a FastAPI application instance."""
        app = FastAPI(
            title="Chartura API",
            description="Charts and Askura answers for small tabular datasets",
            version="1.0.0",
            lifespan=self.lifespan,
        )

        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        @app.middleware("http")
        async def limit_askura_body(request: Request, call_next):
            if request.url.path == ASKURA_PATH and request.method == "POST":
                limit = max_body_bytes()
                length = request.headers.get("content-length")
                if length is None or not length.isdigit():
                    # chunked upload: Starlette caches the body for the route
                    size = len(await request.body())
                else:
                    size = int(length)
                if size > limit:
                    logger.warning("Rejected %s body of %d bytes", ASKURA_PATH, size)
                    return _error(413, "Payload Too Large: body exceeds the size limit.")
            return await call_next(request)

        def require_system() -> Chartura:
            if self.system is None:
                raise HTTPException(status_code=503, detail="Session not initialized.")
            return self.system

        @app.exception_handler(AskuraError)
        async def askura_error_handler(request: Request, exc: AskuraError) -> JSONResponse:
            return _error(exc.status_code, exc.message)

        @app.exception_handler(RequestValidationError)
        async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
            if request.url.path == ASKURA_PATH:
                return _error(400, 'Bad Request: missing "question", "rows", or "context".')
            return await request_validation_exception_handler(request, exc)

        @app.get("/", tags=["General"])
        async def root() -> dict[str, Any]:
            return {
                "name": "Chartura API",
                "version": "1.0.0",
                "docs": "/docs",
                "health": "/health",
                "validEndpoints": [
                    "GET /health",
                    "GET /dataset",
                    "POST /dataset/upload",
                    "POST /dataset/reset",
                    "GET /kpis",
                    "GET /chart",
                    "POST /ask",
                    "GET /messages",
                    "DELETE /messages",
                    f"POST {ASKURA_PATH}",
                ],
            }

        @app.get("/health", response_model=HealthResponse, tags=["General"])
        async def health_check() -> HealthResponse:
            ready = self.system is not None
            return HealthResponse(status="healthy", system_ready=ready, rows=len(self.system.rows) if ready else 0)

        @app.get("/dataset", response_model=DatasetResponse, tags=["Dataset"])
        async def get_dataset() -> DatasetResponse:
            system = require_system()
            return DatasetResponse(**system.dataset())

        @app.post("/dataset/upload", response_model=DatasetResponse, tags=["Dataset"])
        async def upload_dataset(file: UploadFile = File(...)) -> DatasetResponse:
            system = require_system()
            payload = await file.read()
            try:
                system.load_file(file.filename or "upload", payload)
            except DatasetError as e:
                logger.warning("⚠️  Upload rejected: %s", e)
                raise HTTPException(status_code=400, detail=str(e))
            return DatasetResponse(**system.dataset())

        @app.post("/dataset/reset", response_model=DatasetResponse, tags=["Dataset"])
        async def reset_dataset() -> DatasetResponse:
            system = require_system()
            system.reset_dataset()
            return DatasetResponse(**system.dataset())

        @app.get("/kpis", response_model=KpiResponse, tags=["Dataset"])
        async def get_kpis() -> KpiResponse:
            system = require_system()
            return KpiResponse(cards=[c.to_serializable() for c in system.kpis()])

        @app.get("/chart", tags=["Charts"])
        async def get_chart(
            mode: str = "line",
            yA: str = "revenue",
            yB: Optional[str] = None,
            secondaryOn: bool = False,
            title: Optional[str] = Query(None, max_length=120),
        ) -> Response:
            system = require_system()
            try:
                context = ChartContext(mode=mode, y_a=yA, y_b=yB or None, secondary_on=secondaryOn)  # type: ignore[arg-type]
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return Response(content=system.render(context, title=title), media_type="image/svg+xml")

        @app.post("/ask", response_model=AskResponse, tags=["Askura"])
        async def ask(request: AskRequest) -> AskResponse:
            system = require_system()
            try:
                context = _context_from(request.context)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            logger.info("🔍 Ask (%s): %s", request.engine, request.question[:100])
            answer = await system.ask(request.question, context, engine=request.engine)
            return AskResponse(answer=answer, engine=request.engine)

        @app.get("/messages", response_model=MessagesResponse, tags=["Askura"])
        async def get_messages() -> MessagesResponse:
            system = require_system()
            history = system.history()
            return MessagesResponse(messages=history, message_count=len(history))

        @app.delete("/messages", response_model=MessagesResponse, tags=["Askura"])
        async def clear_messages() -> MessagesResponse:
            system = require_system()
            system.clear_messages()
            history = system.history()
            return MessagesResponse(messages=history, message_count=len(history))

        @app.post(ASKURA_PATH, response_model=AskuraResponse, tags=["Askura"])
        async def askura(request: AskuraRequest) -> AskuraResponse:
            system = require_system()
            if not request.question or not isinstance(request.rows, list) or not request.context:
                raise BadRequestError('Bad Request: missing "question", "rows", or "context".')
            try:
                answer = await system.answer_remote(request.question, request.rows, request.context)
            except AskuraError:
                raise
            except Exception as e:
                logger.exception("Askura handler exception")
                raise AskuraError(str(e) or "Unknown server error", 500) from e
            return AskuraResponse(answer=answer)

        @app.api_route(ASKURA_PATH, methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
        async def askura_wrong_method() -> JSONResponse:
            return _error(405, "Method Not Allowed. Use POST.")

        @app.exception_handler(404)
        async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
            return JSONResponse(
                status_code=404,
                content={
                    "error": "Not Found",
                    "detail": "The requested endpoint does not exist",
                    "docs": "/docs",
                },
            )

        @app.exception_handler(500)
        async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
            logger.exception("Internal server error")
            return JSONResponse(
                status_code=500,
                content={"error": "Internal Server Error", "detail": "An unexpected error occurred"},
            )

        return app


def create_app() -> FastAPI:
    """Factory for creating an app instance (useful for tests/uvicorn)."""
    return CharturaServer().create_app()


app = create_app()
