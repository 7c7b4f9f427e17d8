import builtins

import pytest

from cli.main import interactive_session, run_cli
from chartura import Chartura


def _feed(monkeypatch, answers):
    it = iter(answers)
    monkeypatch.setattr(builtins, "input", lambda prompt="": next(it))


@pytest.mark.asyncio
async def test_run_cli_loads_file_without_session(tmp_path):
    target = tmp_path / "sales.csv"
    target.write_text("Year,Sales\n2020,10\n2021,15\n", encoding="utf-8")

    system = await run_cli(data_file=str(target), interactive=False)

    assert system.source == "sales.csv"
    assert len(system.rows) == 2


@pytest.mark.asyncio
async def test_run_cli_keeps_demo_rows_on_bad_file(tmp_path):
    system = await run_cli(data_file=str(tmp_path / "missing.csv"), interactive=False)
    assert system.source == "demo"


@pytest.mark.asyncio
async def test_interactive_session_asks_and_writes_chart(monkeypatch, tmp_path):
    chart = tmp_path / "out.svg"
    _feed(
        monkeypatch,
        [
            "ask", "What was our best year?",
            "chart", "bar", "units", "", str(chart),
            "kpis",
            "reset",
            "exit",
        ],
    )
    system = Chartura()

    await interactive_session(system)

    assert "2025" in system.history()[-1]["text"]
    assert chart.read_text(encoding="utf-8").startswith("<svg")


@pytest.mark.asyncio
async def test_interactive_session_stops_on_eof(monkeypatch):
    def _eof(prompt=""):
        raise EOFError

    monkeypatch.setattr(builtins, "input", _eof)
    await interactive_session(Chartura())
