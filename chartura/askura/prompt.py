"""Prompt sent to the chat model."""
import json
from typing import Any, Dict, List, Sequence

PERSONA = "You are Askura, a concise data analyst for small tabular datasets."
INSTRUCTIONS = "Instructions: Provide a direct answer in 1–2 sentences. Include one numeric fact if helpful."


def build_prompt(question: str, rows: Sequence[Dict[str, Any]], context: Dict[str, Any], max_rows: int = 12) -> str:
    """Persona, question, chart context and the first ``max_rows`` rows, one JSON object per line."""
    lines: List[str] = [
        PERSONA,
        f"User question: {question}",
        f"Chart context: {json.dumps(context, ensure_ascii=False)}",
        f"Data (first {max_rows} rows):",
    ]
    lines.extend(f"- {json.dumps(row, ensure_ascii=False)}" for row in list(rows)[:max_rows])
    lines.append(INSTRUCTIONS)
    return "\n".join(lines)
