import json

import pytest
from fastapi.testclient import TestClient

import server.app as server_app
from chartura import Chartura
from chartura.askura import UpstreamError


class FakeAskura:
    def __init__(self, answer: str = "Skyline sold the most.", exc: Exception | None = None):
        self._answer = answer
        self.exc = exc
        self.calls: list[tuple] = []

    def has_api_key(self) -> bool:
        return True

    async def answer(self, question, rows, context):
        self.calls.append((question, rows, context))
        if self.exc is not None:
            raise self.exc
        return self._answer


ASKURA_BODY = {
    "question": "Which supplier sold the most?",
    "rows": [{"period": "2020", "revenue": 300, "supplier": "Northstar"}],
    "context": {"mode": "pie", "yA": "revenue"},
}

JSON_HEADERS = {"content-type": "application/json"}


def _client(monkeypatch, askura: FakeAskura | None = None) -> TestClient:
    stub = askura or FakeAskura()
    monkeypatch.setattr(server_app, "Chartura", lambda: Chartura(llm=stub))
    return TestClient(server_app.app)


def test_health_dataset_and_kpis(monkeypatch):
    with _client(monkeypatch) as client:
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json() == {"status": "healthy", "system_ready": True, "rows": 6}

        r = client.get("/dataset")
        assert r.status_code == 200
        assert r.json()["source"] == "demo"
        assert r.json()["rows"][5]["staffExp"] == 58

        r = client.get("/kpis")
        assert [c["label"] for c in r.json()["cards"]] == ["Total Revenue", "Best Year", "Growth"]


def test_chart_endpoint(monkeypatch):
    with _client(monkeypatch) as client:
        r = client.get("/chart", params={"mode": "bar", "yA": "units", "yB": "revenue", "secondaryOn": "true"})
        assert r.status_code == 200
        assert r.headers["content-type"].startswith("image/svg+xml")
        assert r.text.startswith("<svg")

        r = client.get("/chart", params={"mode": "radar"})
        assert r.status_code == 400

        r = client.get("/chart", params={"yA": "weather"})
        assert r.status_code == 400


def test_ask_and_messages(monkeypatch):
    with _client(monkeypatch) as client:
        r = client.post("/ask", json={"question": "What was our best year?"})
        assert r.status_code == 200
        assert r.json()["engine"] == "local"
        assert "2025" in r.json()["answer"]

        r = client.post("/ask", json={"question": "and units?", "context": {"mode": "bar", "yA": "units"}})
        assert "380" in r.json()["answer"]

        r = client.get("/messages")
        assert r.json()["message_count"] == 5

        r = client.delete("/messages")
        assert r.json()["message_count"] == 1

        r = client.post("/ask", json={"question": "hi", "engine": "oracle"})
        assert r.status_code == 422


def test_ask_with_openai_engine_reports_errors_inline(monkeypatch):
    askura = FakeAskura(exc=UpstreamError("OpenAI error (500): boom"))
    with _client(monkeypatch, askura) as client:
        r = client.post("/ask", json={"question": "Top supplier?", "engine": "openai"})
        assert r.status_code == 200
        assert r.json()["answer"] == "Askura error: OpenAI error (500): boom"


def test_ask_with_openai_engine_survives_unexpected_errors(monkeypatch):
    with _client(monkeypatch, FakeAskura(exc=RuntimeError("kaput"))) as client:
        r = client.post("/ask", json={"question": "Top supplier?", "engine": "openai"})
        assert r.status_code == 200
        assert r.json()["answer"] == "Askura error: kaput"
        assert client.get("/messages").json()["messages"][-1] == {"role": "ai", "text": "Askura error: kaput"}


def test_upload_and_reset(monkeypatch):
    with _client(monkeypatch) as client:
        files = {"file": ("sales.csv", b"Year,Sales,Units\n2030,10,1\n2031,20,2\n", "text/csv")}
        r = client.post("/dataset/upload", files=files)
        assert r.status_code == 200
        assert r.json()["source"] == "sales.csv"
        assert r.json()["count"] == 2
        assert client.get("/kpis").json()["cards"][0]["value"] == "30"

        r = client.post("/dataset/upload", files={"file": ("bad.csv", b"foo,bar\n1,2\n", "text/csv")})
        assert r.status_code == 400
        assert client.get("/dataset").json()["count"] == 2

        r = client.post("/dataset/reset")
        assert r.json()["count"] == 6


def test_askura_passthrough(monkeypatch):
    askura = FakeAskura()
    with _client(monkeypatch, askura) as client:
        r = client.post("/api/askura", json=ASKURA_BODY)
        assert r.status_code == 200
        assert r.json() == {"answer": "Skyline sold the most."}
        assert askura.calls[0][2] == {"mode": "pie", "yA": "revenue"}
        # stateless: the transcript is untouched
        assert client.get("/messages").json()["message_count"] == 1


@pytest.mark.parametrize(
    "body",
    [
        {"rows": [], "context": {"mode": "line"}},
        {"question": "q", "context": {"mode": "line"}},
        {"question": "q", "rows": [], "context": None},
        {"question": "q", "rows": "nope", "context": {"mode": "line"}},
    ],
)
def test_askura_bad_request(monkeypatch, body):
    with _client(monkeypatch) as client:
        r = client.post("/api/askura", json=body)
        assert r.status_code == 400
        assert r.json() == {"error": 'Bad Request: missing "question", "rows", or "context".'}


def test_askura_invalid_json(monkeypatch):
    with _client(monkeypatch) as client:
        r = client.post("/api/askura", content=b"{not json", headers={"content-type": "application/json"})
        assert r.status_code == 400


def test_askura_wrong_method(monkeypatch):
    with _client(monkeypatch) as client:
        r = client.get("/api/askura")
        assert r.status_code == 405
        assert r.json() == {"error": "Method Not Allowed. Use POST."}


def test_askura_missing_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setattr(server_app, "Chartura", Chartura)
    with TestClient(server_app.app) as client:
        r = client.post("/api/askura", json=ASKURA_BODY)
        assert r.status_code == 401
        assert r.json() == {"error": "OPENAI_API_KEY is not set on the server."}


def test_askura_upstream_and_unknown_errors(monkeypatch):
    with _client(monkeypatch, FakeAskura(exc=UpstreamError("No answer from OpenAI."))) as client:
        r = client.post("/api/askura", json=ASKURA_BODY)
        assert r.status_code == 502
        assert r.json() == {"error": "No answer from OpenAI."}

    with _client(monkeypatch, FakeAskura(exc=RuntimeError("kaput"))) as client:
        r = client.post("/api/askura", json=ASKURA_BODY)
        assert r.status_code == 500
        assert r.json() == {"error": "kaput"}


def _chunks(payload: bytes):
    def gen():
        yield payload[: len(payload) // 2]
        yield payload[len(payload) // 2:]
    return gen()


def test_askura_body_limit(monkeypatch):
    monkeypatch.setenv("CHARTURA_MAX_BODY", "10")
    with _client(monkeypatch) as client:
        r = client.post("/api/askura", json=ASKURA_BODY)
        assert r.status_code == 413

        # no Content-Length header: the body itself is measured
        r = client.post("/api/askura", content=_chunks(json.dumps(ASKURA_BODY).encode()), headers=JSON_HEADERS)
        assert r.status_code == 413
        assert r.json() == {"error": "Payload Too Large: body exceeds the size limit."}


def test_askura_chunked_body_within_limit(monkeypatch):
    askura = FakeAskura()
    with _client(monkeypatch, askura) as client:
        r = client.post("/api/askura", content=_chunks(json.dumps(ASKURA_BODY).encode()), headers=JSON_HEADERS)
        assert r.status_code == 200
        assert r.json() == {"answer": "Skyline sold the most."}
        assert askura.calls[0][0] == ASKURA_BODY["question"]


def test_unknown_route(monkeypatch):
    with _client(monkeypatch) as client:
        r = client.get("/nope")
        assert r.status_code == 404
        assert r.json()["error"] == "Not Found"
