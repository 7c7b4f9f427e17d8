"""Demo dataset shown before anything is uploaded."""
from typing import List

from chartura.models import Row

_DEMO = (
    ("2020", 300, 240, "Northstar", 0.88, 40),
    ("2021", 350, 260, "Northstar", 0.90, 44),
    ("2022", 400, 290, "BluePeak", 0.91, 48),
    ("2023", 460, 310, "BluePeak", 0.93, 50),
    ("2024", 520, 350, "Skyline", 0.94, 54),
    ("2025", 590, 380, "Skyline", 0.96, 58),
)


def default_rows() -> List[Row]:
    """Return a fresh copy of the demo rows."""
    return [
        Row(period=p, revenue=r, units=u, supplier=s, cost_price=c, staff_exp=e)
        for p, r, u, s, c, e in _DEMO
    ]
