"""
CLI Application Logic

Provides an interactive command-line interface for Chartura.
"""
import logging
from pathlib import Path
from typing import Optional

from chartura import Chartura
from chartura.data import DatasetError
from chartura.models import ChartContext

logger = logging.getLogger(__name__)

COMMANDS = "📊 Step (🤔 ask, 📈 chart, 🧮 kpis, 📂 load, ♻️ reset, 🔀 engine, 📝 history, 👋 exit): "


def _read_context() -> ChartContext:
    mode = input("📈 Mode [line/area/bar/scatter/dual/pie] (Enter for line): ").strip().lower() or "line"
    y_a = input("📐 Metric [revenue/units/costPrice/staffExp] (Enter for revenue): ").strip() or "revenue"
    y_b = input("📐 Secondary metric (Enter for none): ").strip() or None
    return ChartContext(mode=mode, y_a=y_a, y_b=y_b, secondary_on=y_b is not None)  # type: ignore[arg-type]


async def interactive_session(system: Chartura, engine: str = "local") -> None:
    """
    Run an interactive session over the loaded dataset.

    Args:
        system: Chartura session
        engine: Initial answering engine, ``local`` or ``openai``
    """
    logger.info("\n%s", "=" * 70)
    logger.info("💬 CHARTURA — ASK YOUR DATA")
    logger.info("%s", "=" * 70)
    logger.info("Dataset: %s (%d rows), engine: %s\n", system.source, len(system.rows), engine)
    context = ChartContext()

    while True:
        try:
            step = input(COMMANDS).strip().lower()

            if step == "ask":
                question = input("\n🤔 Your question: ").strip()
                if not question:
                    continue
                answer = await system.ask(question, context, engine=engine)
                logger.info("\n💡 %s", answer)
                continue

            if step == "exit":
                logger.info("\n👋 Goodbye!")
                break

            if step == "chart":
                try:
                    context = _read_context()
                except ValueError as e:
                    logger.warning("❓ %s", e)
                    continue
                target = input("💾 Output file (Enter for chart.svg): ").strip() or "chart.svg"
                Path(target).write_text(system.render(context), encoding="utf-8")
                logger.info("✅ Wrote %s chart of %s to %s", context.mode, context.y_a, target)
                continue

            if step == "kpis":
                for card in system.kpis():
                    logger.info("🧮 %-14s %-10s (%s)", card.label, card.value, card.hint)
                continue

            if step == "load":
                path = input("📂 File (CSV, TSV or JSON): ").strip()
                try:
                    rows = system.load_path(path)
                    logger.info("✅ Loaded %d rows from %s", len(rows), path)
                except DatasetError as e:
                    logger.error("❌ %s", e)
                continue

            if step == "reset":
                system.reset_dataset()
                logger.info("♻️  Back to the demo dataset.")
                continue

            if step == "engine":
                engine = "openai" if engine == "local" else "local"
                logger.info("🔀 Engine is now %s", engine)
                continue

            if step == "history":
                for message in system.history():
                    logger.info("%s: %s", message["role"], message["text"])
                continue

            logger.warning("❓ Unknown command: %s", step)
        except (KeyboardInterrupt, EOFError):
            logger.info("\n👋 Goodbye!")
            break
        except Exception as e:
            logger.exception("❌ Error: %s", e)


async def run_cli(
    data_file: Optional[str] = None,
    engine: str = "local",
    model_name: Optional[str] = None,
    interactive: bool = True,
) -> Chartura:
    """
    Run the CLI application.

    Args:
        data_file: CSV, TSV or JSON file to load instead of the demo rows
        engine: Answering engine, ``local`` or ``openai``
        model_name: Chat model for the ``openai`` engine
        interactive: Whether to start the interactive session

    Returns:
        The Chartura session
    """
    logger.info("=" * 70)
    logger.info("🚀 CHARTURA CLI")
    logger.info("=" * 70)

    system = Chartura(model_name=model_name)
    if data_file:
        try:
            system.load_path(data_file)
        except DatasetError as e:
            logger.error("❌ Could not load %s: %s", data_file, e)
            return system

    if engine == "openai" and not system.llm.has_api_key():
        logger.warning("⚠️  OPENAI_API_KEY is not set; answers will report an Askura error.")

    if interactive:
        await interactive_session(system, engine=engine)

    return system
