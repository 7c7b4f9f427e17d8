import io
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from chartura.models import Row, finite
from chartura.utils.settings import upload_row_limit

logger = logging.getLogger(__name__)


class DatasetError(ValueError):
    """Raised when an uploaded file cannot be turned into rows."""


# Normalized header (lowercase letters only) -> row field
HEADER_ALIASES: Dict[str, str] = {
    "period": "period", "year": "period", "fy": "period", "fiscalyear": "period",
    "date": "period", "month": "period", "quarter": "period",
    "revenue": "revenue", "sales": "revenue", "turnover": "revenue", "income": "revenue",
    "units": "units", "unitsqty": "units", "qty": "units", "quantity": "units", "volume": "units",
    "supplier": "supplier", "vendor": "supplier", "suppliername": "supplier",
    "costprice": "costPrice", "unitcost": "costPrice", "cost": "costPrice",
    "staffexp": "staffExp", "staffexpense": "staffExp", "staffexpenses": "staffExp",
    "staff": "staffExp", "staffcost": "staffExp", "staffcosts": "staffExp",
    "wages": "staffExp", "salaries": "staffExp",
}

NUMERIC_FIELDS = ("revenue", "units", "costPrice", "staffExp")

_EMPTY_CELLS = {"", "-", "—", "–", "n/a", "na", "nan", "none", "null"}
_NUMBER_JUNK = re.compile(r"[\s,$€£¥≈~?]")
_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")
_FISCAL_YEAR = re.compile(r"fy\s*'?(\d{2}|\d{4})", re.IGNORECASE)


def normalize_header(header: Any) -> str:
    return re.sub(r"[^a-z]", "", str(header).lower())


def parse_number(value: Any) -> float:
    """Best-effort numeric parse of a messy spreadsheet cell; failures become 0."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return finite(value)
    text = str(value or "").strip()
    if text.lower() in _EMPTY_CELLS:
        return 0.0
    match = _NUMBER.search(_NUMBER_JUNK.sub("", text))
    return finite(match.group(0)) if match else 0.0


def clean_period(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value if value is not None else "").strip()
    match = _FISCAL_YEAR.fullmatch(text)
    if match:
        digits = match.group(1)
        return digits if len(digits) == 4 else f"20{digits}"
    return text


class DatasetLoader:
    """Parse CSV, TSV or JSON uploads into rows of the fixed schema."""

    def __init__(self, max_rows: Optional[int] = None):
        self.max_rows = max_rows if max_rows is not None else upload_row_limit()

    def load_path(self, path: str | Path) -> List[Row]:
        p = Path(path)
        if not p.is_file():
            raise DatasetError(f"File not found: {p}")
        return self.load_bytes(p.name, p.read_bytes())

    def load_bytes(self, filename: str, payload: bytes) -> List[Row]:
        """Parse an uploaded file; the format comes from the extension or is sniffed."""
        if not payload or not payload.strip():
            raise DatasetError("The uploaded file is empty.")

        text = self._decode(payload)
        fmt = self._detect_format(filename or "", text)
        logger.info("📄 Parsing %s as %s (%d bytes)", filename or "<upload>", fmt, len(payload))

        if fmt == "json":
            records = self._parse_json(text)
        else:
            records = self._parse_delimited(text, "\t" if fmt == "tsv" else ",")

        rows = self._to_rows(records)
        logger.info("✅ Loaded %d rows", len(rows))
        return rows

    @staticmethod
    def _decode(payload: bytes) -> str:
        for enc in ("utf-8-sig", "utf-8"):
            try:
                return payload.decode(enc)
            except UnicodeDecodeError:
                continue
        return payload.decode("latin-1")

    @staticmethod
    def _detect_format(filename: str, text: str) -> str:
        suffix = Path(filename).suffix.lower()
        if suffix == ".json":
            return "json"
        if suffix in (".tsv", ".tab"):
            return "tsv"
        if suffix == ".csv":
            return "csv"
        stripped = text.lstrip()
        if stripped[:1] in ("[", "{"):
            return "json"
        first_line = stripped.splitlines()[0] if stripped else ""
        return "tsv" if "\t" in first_line else "csv"

    @staticmethod
    def _parse_json(text: str) -> List[Dict[str, Any]]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DatasetError(f"Invalid JSON: {e.msg} (line {e.lineno})") from e

        if isinstance(data, dict):
            data = data.get("rows", data.get("data"))
        if not isinstance(data, list):
            raise DatasetError("JSON must be a list of objects or an object with a 'rows' list.")
        return [item for item in data if isinstance(item, dict)]

    @staticmethod
    def _parse_delimited(text: str, sep: str) -> List[Dict[str, Any]]:
        try:
            df = pd.read_csv(
                io.StringIO(text),
                sep=sep,
                dtype=str,
                keep_default_na=False,
                skipinitialspace=True,
                on_bad_lines="skip",
            )
        except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise DatasetError(f"Could not parse table: {e}") from e
        return df.to_dict(orient="records")

    def _map_headers(self, headers: List[Any]) -> Dict[Any, str]:
        mapping: Dict[Any, str] = {}
        taken: set[str] = set()
        for header in headers:
            target = HEADER_ALIASES.get(normalize_header(header))
            if target and target not in taken:
                mapping[header] = target
                taken.add(target)
        return mapping

    def _to_rows(self, records: List[Dict[str, Any]]) -> List[Row]:
        if not records:
            raise DatasetError("No data rows found.")

        headers: List[Any] = []
        for record in records:
            for key in record:
                if key not in headers:
                    headers.append(key)
        mapping = self._map_headers(headers)
        fields = set(mapping.values())
        if "period" not in fields and "revenue" not in fields:
            raise DatasetError(
                "No recognizable columns. Expected headers such as period/year and revenue/sales."
            )
        ignored = [str(h) for h in headers if h not in mapping]
        if ignored:
            logger.debug("Ignoring unrecognized columns: %s", ", ".join(ignored))

        rows: List[Row] = []
        for index, record in enumerate(records):
            values: Dict[str, Any] = {"period": "", "supplier": ""}
            for header, target in mapping.items():
                cell = record.get(header)
                if target == "period":
                    values["period"] = clean_period(cell)
                elif target == "supplier":
                    values["supplier"] = str(cell if cell is not None else "").strip()
                else:
                    values[target] = parse_number(cell)

            has_numbers = any(values.get(f, 0.0) for f in NUMERIC_FIELDS)
            if not values["period"] and not has_numbers:
                continue
            if not values["period"]:
                values["period"] = str(index + 1)
            rows.append(Row.from_dict(values))

        if not rows:
            raise DatasetError("No data rows found.")
        if len(rows) > self.max_rows:
            raise DatasetError(f"Too many rows ({len(rows)}); the limit is {self.max_rows}.")
        return rows
