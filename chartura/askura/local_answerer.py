"""Offline question answering over the fixed six-column schema.

Questions are routed through a table of regular expressions. The first
intent whose pattern matches wins; when nothing matches but the question
names a metric or a period, the previous intent is reused, which is what
makes follow-ups such as "and units?" or "what about 2022?" work.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from chartura import analytics
from chartura.analytics import format_number
from chartura.models import METRIC_LABELS, AskuraMemory, ChartContext, Row

logger = logging.getLogger(__name__)

# Checked in order: "staff cost" is staff, "unit cost" is cost price
METRIC_PATTERNS: List[Tuple[str, re.Pattern]] = [
    ("profit", re.compile(r"\b(profit|profits|margin|margins)\b")),
    ("staffExp", re.compile(r"\b(staff|staffexp|wages?|salary|salaries|payroll)\b")),
    ("costPrice", re.compile(r"\b(cost\s*price|costprice|unit\s*costs?|costs?)\b")),
    ("units", re.compile(r"\b(units?|volume|quantity|qty)\b")),
    ("revenue", re.compile(r"\b(revenue|sales|turnover|income)\b")),
]

_BEST = re.compile(r"\b(best|highest|top|peak|max|maximum|most|strongest|largest|biggest)\b")
_WORST = re.compile(r"\b(worst|lowest|weakest|min|minimum|least|smallest|poorest)\b")
_YEAR = re.compile(r"\b(?:19|20)\d{2}\b")
_FISCAL_YEAR = re.compile(r"\bfy\s*'?(\d{4}|\d{2})\b")
_FOLLOW_UP = re.compile(r"^(and|what about|how about|same for)\b")
# "above 2000" is a threshold, not a year
_COMPARISON = re.compile(r"\b(above|over|below|under|than|exceeds?|exceeded|exceeding)\s*[$€£]?\s*$")
# Intents whose answer depends on the periods named in the question
_PERIOD_AWARE = {"growth", "total", "value", "supplier"}

FALLBACK = (
    "I couldn't match that question. Try asking about the best or worst year, totals, averages, "
    "growth between two years, suppliers, or the trend."
)
HELP = (
    "You can ask things like: “What was our best year?”, “Revenue growth 2024–2025?”, "
    "“Total units”, “Average staff expenses”, “Which supplier sold the most?” or “Is revenue trending up?”."
)
NO_DATA = "There is no data loaded yet."


@dataclass
class _Query:
    text: str
    metric: str
    periods: List[str] = field(default_factory=list)


def _label(metric: str) -> str:
    return METRIC_LABELS.get(metric, metric)


def _sentence(text: str) -> str:
    return text[:1].upper() + text[1:]


def _period_word(period: str) -> str:
    return "year" if re.fullmatch(r"(19|20)\d{2}", period) else "period"


def _join(names: Sequence[str]) -> str:
    if len(names) <= 1:
        return "".join(names)
    return f"{', '.join(names[:-1])} and {names[-1]}"


def normalize_question(question: str) -> str:
    text = question.strip().lower()
    text = re.sub(r"[–—−]", "-", text)
    return _FISCAL_YEAR.sub(lambda m: m.group(1) if len(m.group(1)) == 4 else f"20{m.group(1)}", text)


def detect_metric(text: str) -> Optional[str]:
    for metric, pattern in METRIC_PATTERNS:
        if pattern.search(text):
            return metric
    return None


def detect_periods(text: str, rows: Sequence[Row]) -> List[str]:
    """Periods from the dataset mentioned in the question, in the order they appear."""
    found: List[Tuple[int, str]] = []
    seen: set[str] = set()
    for row in rows:
        key = row.period.lower()
        if not key or key in seen:
            continue
        match = re.search(rf"(?<![\w.]){re.escape(key)}(?![\w])", text)
        if match:
            found.append((match.start(), row.period))
            seen.add(key)
    return [period for _, period in sorted(found)]


def is_period_range(text: str, periods: Sequence[str]) -> bool:
    """True for "2024-2025", "from 2024 to 2025" or "between 2024 and 2025"."""
    if len(periods) < 2:
        return False
    a, b = (re.escape(p.lower()) for p in periods[:2])
    return bool(
        re.search(rf"(?<![\w.]){a}\s*(?:-|to|through|until)\s*{b}(?!\w)", text)
        or re.search(rf"\bbetween\s+{a}\s+and\s+{b}(?!\w)", text)
    )


def unknown_years(text: str, rows: Sequence[Row]) -> List[str]:
    """Year-like numbers that are not periods in the data and do not follow a comparison word."""
    known = {r.period.lower() for r in rows}
    return [
        m.group(0)
        for m in _YEAR.finditer(text)
        if m.group(0) not in known and not _COMPARISON.search(text[: m.start()])
    ]


class LocalAnswerer:
    """Regex-dispatch answerer with a one-question memory."""

    def __init__(self) -> None:
        self.memory: Optional[AskuraMemory] = None
        self.intents: List[Tuple[str, re.Pattern, Callable[[Sequence[Row], _Query], str]]] = [
            ("help", re.compile(r"\b(help|what can (you|i) (do|ask))\b"), self._help),
            ("supplier", re.compile(r"\b(suppliers?|vendors?)\b"), self._supplier),
            ("growth", re.compile(
                r"\b(growth|grow|grew|growing|increase|increased|decrease|decreased|change|changed|"
                r"rise|rose|fell|drop|dropped|compare|compared|vs|versus)\b"), self._growth),
            ("best", _BEST, self._best),
            ("worst", _WORST, self._worst),
            ("total", re.compile(r"\b(total|sum|overall|cumulative|combined|altogether)\b"), self._total),
            ("average", re.compile(r"\b(average|avg|mean|typical)\b"), self._average),
            ("trend", re.compile(r"\b(trend|trending|going up|going down|direction)\b"), self._trend),
            ("count", re.compile(r"\bhow many (rows|years|periods|records|entries)\b"), self._count),
        ]

    def reset(self) -> None:
        self.memory = None

    def answer(self, question: str, rows: Sequence[Row], context: Optional[ChartContext] = None) -> str:
        """Answer ``question`` from ``rows``; never raises for unmatched questions."""
        text = normalize_question(question)
        if not text:
            return HELP
        if not rows:
            return NO_DATA

        explicit_metric = detect_metric(text)
        periods = detect_periods(text, rows)
        unknown = unknown_years(text, rows)

        intent = next(((name, handler) for name, pattern, handler in self.intents if pattern.search(text)), None)
        if intent is None and is_period_range(text, periods):
            intent = ("growth", self._growth)
        if intent is None and self.memory is not None and (
            explicit_metric or periods or _FOLLOW_UP.search(text)
        ):
            name = self.memory.intent
            if periods and name not in _PERIOD_AWARE:
                name = "value"
            handler = self._handler(name)
            if not periods and not unknown:
                periods = list(self.memory.periods)
            logger.debug("Follow-up question reuses intent %s", name)
            intent = (name, handler)
        if intent is None and periods:
            intent = ("value", self._value)

        if unknown and (intent is None or intent[0] != "help"):
            return (
                f"I don't have data for {_join(unknown)}. "
                f"Available periods: {rows[0].period} to {rows[-1].period}."
            )
        if intent is None:
            return FALLBACK
        name, handler = intent

        metric = explicit_metric
        if metric is None and self.memory is not None:
            metric = self.memory.metric
        if metric is None:
            metric = context.y_a if context is not None else "revenue"

        query = _Query(text=text, metric=metric, periods=periods)
        reply = handler(rows, query)
        self.memory = AskuraMemory(intent=name, metric=metric, periods=periods)
        return reply

    def _handler(self, name: str) -> Callable[[Sequence[Row], _Query], str]:
        for intent_name, _, handler in self.intents:
            if intent_name == name:
                return handler
        return self._value

    # ------------------------------------------------------------------
    # Intent handlers
    # ------------------------------------------------------------------

    def _help(self, rows: Sequence[Row], q: _Query) -> str:
        return HELP

    def _best(self, rows: Sequence[Row], q: _Query) -> str:
        period, value = analytics.best_period(rows, q.metric)  # type: ignore[misc]
        return f"{period} was the best {_period_word(period)} for {_label(q.metric)}, at {format_number(value)}."

    def _worst(self, rows: Sequence[Row], q: _Query) -> str:
        period, value = analytics.worst_period(rows, q.metric)  # type: ignore[misc]
        return f"{period} was the weakest {_period_word(period)} for {_label(q.metric)}, at {format_number(value)}."

    def _growth(self, rows: Sequence[Row], q: _Query) -> str:
        label = _label(q.metric)
        if len(q.periods) >= 2:
            start, end = q.periods[0], q.periods[-1]
            a = analytics.period_value(rows, start, q.metric) or 0.0
            b = analytics.period_value(rows, end, q.metric) or 0.0
            if a == 0:
                return f"{_sentence(label)} was 0 in {start}, so growth to {end} can't be expressed as a percentage."
            pct = analytics.pct_change(a, b)
            return (
                f"{_sentence(label)} changed by {pct:+.1f}% from {start} ({format_number(a)}) "
                f"to {end} ({format_number(b)})."
            )
        if _BEST.search(q.text) and len(rows) > 1:
            jumps = [
                (rows[i].period, rows[i].get(q.metric) - rows[i - 1].get(q.metric))
                for i in range(1, len(rows))
            ]
            period, jump = max(jumps, key=lambda item: item[1])
            return f"The biggest rise in {label} came in {period}, up {format_number(jump)} on the previous period."
        first, last = rows[0], rows[-1]
        pct = analytics.growth(rows, q.metric)
        return (
            f"{_sentence(label)} grew {pct:.1f}% from {first.period} ({format_number(first.get(q.metric))}) "
            f"to {last.period} ({format_number(last.get(q.metric))})."
        )

    def _total(self, rows: Sequence[Row], q: _Query) -> str:
        if q.periods:
            return self._value(rows, q)
        value = analytics.total(rows, q.metric)
        return f"Total {_label(q.metric)} across {len(rows)} periods is {format_number(value)}."

    def _average(self, rows: Sequence[Row], q: _Query) -> str:
        value = analytics.average(rows, q.metric)
        return f"Average {_label(q.metric)} is {format_number(round(value, 2))} per period."

    def _value(self, rows: Sequence[Row], q: _Query) -> str:
        if not q.periods:
            return self._total(rows, q)
        parts = []
        for period in q.periods:
            value = analytics.period_value(rows, period, q.metric)
            parts.append(f"{format_number(value or 0.0)} in {period}")
        return f"{_sentence(_label(q.metric))} was {_join(parts)}."

    def _trend(self, rows: Sequence[Row], q: _Query) -> str:
        result = analytics.trend(rows, q.metric)
        steps = len(rows) - 1
        label = _label(q.metric)
        if steps <= 0:
            return f"There is only one period, so {label} has no trend yet."
        return (
            f"{_sentence(label)} is trending {result.direction}: it rose in {result.rises} of {steps} "
            f"periods and fell in {result.falls}."
        )

    def _count(self, rows: Sequence[Row], q: _Query) -> str:
        return f"The dataset has {len(rows)} rows, from {rows[0].period} to {rows[-1].period}."

    def _supplier(self, rows: Sequence[Row], q: _Query) -> str:
        totals = analytics.supplier_totals(rows, q.metric)
        names = list(totals)
        label = _label(q.metric)
        if q.periods:
            parts = []
            for period in q.periods:
                row = analytics.find_row(rows, period)
                parts.append(f"{row.supplier or 'unknown'} in {period}" if row else f"nothing in {period}")
            return f"The supplier was {_join(parts)}."
        if re.search(r"\bhow many\b|\blist\b|\ball\b|\bwho are\b", q.text) or not (
            _BEST.search(q.text) or _WORST.search(q.text)
        ):
            return f"There {'is' if len(names) == 1 else 'are'} {len(names)} supplier{'' if len(names) == 1 else 's'}: {_join(names)}."
        pick = max if _BEST.search(q.text) else min
        name = pick(names, key=lambda n: totals[n])
        grand = sum(totals.values())
        share = totals[name] / grand * 100 if grand else 0.0
        return f"{name} accounts for {format_number(totals[name])} of {label} ({share:.1f}% of the total)."
