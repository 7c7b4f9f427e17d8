from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, get_args

ChartMode = Literal["line", "area", "bar", "scatter", "dual", "pie"]
MetricKey = Literal["revenue", "units", "costPrice", "staffExp"]
Role = Literal["user", "ai"]

CHART_MODES: tuple = get_args(ChartMode)
METRIC_KEYS: tuple = get_args(MetricKey)

# Wire key -> attribute name on Row
_FIELD_FOR_KEY: Dict[str, str] = {
    "period": "period",
    "revenue": "revenue",
    "units": "units",
    "supplier": "supplier",
    "costPrice": "cost_price",
    "staffExp": "staff_exp",
}

METRIC_LABELS: Dict[str, str] = {
    "revenue": "revenue",
    "units": "units",
    "costPrice": "cost price",
    "staffExp": "staff expenses",
    "profit": "profit",
}


def finite(value: Any, default: float = 0.0) -> float:
    """Coerce to a finite float; anything else becomes ``default``."""
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(result):
        return default
    return result


@dataclass
class Row:
    period: str
    revenue: float = 0.0
    units: float = 0.0
    supplier: str = ""
    cost_price: float = 0.0
    staff_exp: float = 0.0

    def __post_init__(self) -> None:
        self.period = str(self.period).strip()
        self.supplier = str(self.supplier or "").strip()
        self.revenue = finite(self.revenue)
        self.units = finite(self.units)
        self.cost_price = finite(self.cost_price)
        self.staff_exp = finite(self.staff_exp)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Row":
        """Build a row from wire keys (``costPrice``) or attribute names (``cost_price``)."""
        values: Dict[str, Any] = {}
        for key, attr in _FIELD_FOR_KEY.items():
            if key in payload:
                values[attr] = payload[key]
            elif attr in payload:
                values[attr] = payload[attr]
        values.setdefault("period", "")
        return cls(**values)

    def get(self, metric: str) -> float:
        """Return a numeric column by wire key; ``profit`` is derived."""
        if metric == "profit":
            return finite(self.revenue - self.units * self.cost_price - self.staff_exp)
        attr = _FIELD_FOR_KEY.get(metric)
        if attr is None or attr in ("period", "supplier"):
            raise KeyError(f"Unknown metric: {metric}")
        return getattr(self, attr)

    def to_serializable(self) -> Dict[str, Any]:
        return {key: getattr(self, attr) for key, attr in _FIELD_FOR_KEY.items()}


@dataclass
class ChartContext:
    mode: ChartMode = "line"
    y_a: MetricKey = "revenue"
    y_b: Optional[MetricKey] = None
    secondary_on: bool = False

    def __post_init__(self) -> None:
        if self.mode not in CHART_MODES:
            raise ValueError(f"Unknown chart mode: {self.mode}")
        if self.y_a not in METRIC_KEYS:
            raise ValueError(f"Unknown metric: {self.y_a}")
        if self.y_b is not None and self.y_b not in METRIC_KEYS:
            raise ValueError(f"Unknown metric: {self.y_b}")

    @property
    def secondary(self) -> Optional[MetricKey]:
        """The secondary metric when it is switched on."""
        if self.secondary_on and self.y_b and self.y_b != self.y_a:
            return self.y_b
        return None

    @classmethod
    def from_dict(cls, payload: Optional[Dict[str, Any]]) -> "ChartContext":
        payload = payload or {}
        return cls(
            mode=payload.get("mode") or "line",
            y_a=payload.get("yA") or "revenue",
            y_b=payload.get("yB") or None,
            secondary_on=bool(payload.get("secondaryOn", False)),
        )

    def to_serializable(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"mode": self.mode, "yA": self.y_a, "secondaryOn": self.secondary_on}
        if self.y_b is not None:
            payload["yB"] = self.y_b
        return payload


@dataclass
class ChatMessage:
    role: Role
    text: str

    def to_serializable(self) -> Dict[str, Any]:
        return {"role": self.role, "text": self.text}


@dataclass
class KpiCard:
    label: str
    value: str
    hint: str

    def to_serializable(self) -> Dict[str, Any]:
        return {"label": self.label, "value": self.value, "hint": self.hint}


@dataclass
class AskuraMemory:
    """What the previous local answer was about, for follow-up questions."""

    intent: str
    metric: str
    periods: List[str] = field(default_factory=list)
