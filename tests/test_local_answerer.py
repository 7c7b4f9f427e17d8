import pytest

from chartura.askura import LocalAnswerer
from chartura.askura.local_answerer import FALLBACK, HELP, NO_DATA, detect_metric, detect_periods, normalize_question
from chartura.data import default_rows
from chartura.models import ChartContext


@pytest.fixture
def rows():
    return default_rows()


@pytest.fixture
def askura():
    return LocalAnswerer()


@pytest.mark.parametrize(
    "question, expected",
    [
        ("What was our best year?", ["2025", "590"]),
        ("Worst year for units", ["2020", "240"]),
        ("Total units", ["1,830"]),
        ("Average staff expenses", ["49"]),
        ("Which supplier had the most revenue?", ["Skyline", "42.4%"]),
        ("How many suppliers are there?", ["3 suppliers", "Northstar, BluePeak and Skyline"]),
        ("Who was the supplier in 2022?", ["BluePeak"]),
        ("Revenue in 2023", ["460"]),
        ("Is revenue trending up?", ["trending up", "5 of 5"]),
        ("How many years do we have?", ["6 rows", "2020", "2025"]),
        ("Biggest increase in revenue", ["2025", "70"]),
        ("revenue FY24", ["520"]),
        ("Profit in 2020", ["48.8"]),
    ],
)
def test_intents(askura, rows, question, expected):
    answer = askura.answer(question, rows)
    for fragment in expected:
        assert fragment in answer


def test_growth_between_two_years(askura, rows):
    answer = askura.answer("Revenue growth 2024–2025?", rows)
    assert "+13.5%" in answer
    assert askura.memory is not None
    assert askura.memory.intent == "growth"
    assert askura.memory.periods == ["2024", "2025"]


@pytest.mark.parametrize(
    "question",
    ["Revenue from 2024 to 2025", "revenue between 2024 and 2025", "revenue 2024 to 2025", "revenue 2024-2025"],
)
def test_period_range_is_growth(askura, rows, question):
    answer = askura.answer(question, rows)
    assert "+13.5%" in answer
    assert askura.memory.intent == "growth"


def test_period_range_follow_up_switches_to_growth(askura, rows):
    askura.answer("Units in 2023", rows)
    assert "+12.9%" in askura.answer("what about 2023 to 2024?", rows)


def test_listed_periods_are_not_a_range(askura, rows):
    assert askura.answer("revenue in 2024 and 2025", rows) == "Revenue was 520 in 2024 and 590 in 2025."


@pytest.mark.parametrize("question", ["Revenue above 2000?", "years with sales over $1999", "units more than 1950"])
def test_thresholds_are_not_years(askura, rows, question):
    assert "don't have data" not in askura.answer(question, rows)


def test_follow_up_reuses_intent_and_periods(askura, rows):
    askura.answer("Revenue growth 2024-2025?", rows)
    answer = askura.answer("and units?", rows)
    assert "+8.6%" in answer
    assert askura.memory.metric == "units"


def test_follow_up_with_new_period(askura, rows):
    askura.answer("Revenue in 2023", rows)
    assert "400" in askura.answer("what about 2022?", rows)


def test_follow_up_metric_carries_over(askura, rows):
    askura.answer("Best year for units", rows)
    assert "240" in askura.answer("and the worst?", rows)


def test_overall_growth_without_years(askura, rows):
    assert "96.7%" in askura.answer("How much did revenue grow?", rows)


def test_chart_context_sets_default_metric(askura, rows):
    answer = askura.answer("Best year?", rows, ChartContext(y_a="units"))
    assert "380" in answer
    assert "units" in answer


def test_unknown_year(askura, rows):
    answer = askura.answer("Revenue in 2030", rows)
    assert "don't have data for 2030" in answer
    assert "2020 to 2025" in answer


def test_fallback_help_and_empty(askura, rows):
    assert askura.answer("tell me a joke", rows) == FALLBACK
    assert askura.answer("help", rows) == HELP
    assert askura.answer("   ", rows) == HELP
    assert askura.answer("best year?", []) == NO_DATA


def test_reset_forgets_memory(askura, rows):
    askura.answer("Total units", rows)
    askura.reset()
    assert askura.memory is None
    assert askura.answer("and revenue?", rows) == FALLBACK


@pytest.mark.parametrize(
    "text, metric",
    [
        ("staff costs", "staffExp"),
        ("unit cost", "costPrice"),
        ("sales volume", "units"),
        ("turnover", "revenue"),
        ("margin", "profit"),
        ("best year", None),
    ],
)
def test_detect_metric(text, metric):
    assert detect_metric(text) == metric


def test_detect_periods_in_question_order(rows):
    assert detect_periods(normalize_question("Compare 2025 and 2021"), rows) == ["2025", "2021"]
    assert detect_periods("20201", rows) == []
