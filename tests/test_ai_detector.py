import httpx
import pytest

from core.ai_detector import GeminiDetector, _parse_reply, heuristic_detection


FORMAL = (
    "Furthermore, it is important to note that the system is robust. "
    "Moreover, the design is modular and scalable. "
    "Additionally, the approach is efficient and reliable. "
    "In conclusion, the results are consistent and clear."
)

CASUAL = "honestly I think it's kinda fun lol, I'm gonna try again!!! haha"


def test_heuristic_scores_formal_text_high():
    d = heuristic_detection(FORMAL)
    assert d.score >= 70
    assert d.reason.startswith("High AI probability")
    assert d.language == "English"


def test_heuristic_scores_casual_text_low():
    d = heuristic_detection(CASUAL)
    assert d.score < 40
    assert d.reason.startswith("Low AI probability")


def test_heuristic_is_clamped():
    d = heuristic_detection(" ".join(["lol"] * 50))
    assert 0 <= d.score <= 100


def test_parse_reply_extracts_json_object():
    d = _parse_reply('Sure! {"score": 140, "reason": "uniform", "language": "French"} done')
    assert d is not None
    assert d.score == 100
    assert d.language == "French"
    assert _parse_reply("no json here") is None


@pytest.mark.anyio
async def test_detector_without_key_uses_heuristic():
    detector = GeminiDetector(api_key="", models=["gemini-pro"])
    d = await detector.detect(FORMAL)
    assert d == heuristic_detection(FORMAL)


@pytest.mark.anyio
async def test_detector_tries_next_model_on_error(monkeypatch):
    seen = []

    async def fake_ask(self, client, model, text):
        seen.append(model)
        if model == "broken":
            raise httpx.ConnectError("boom")
        return _parse_reply('{"score": 12, "reason": "human", "language": "English"}')

    monkeypatch.setattr(GeminiDetector, "_ask", fake_ask)
    detector = GeminiDetector(api_key="k", models=["broken", "working"])

    d = await detector.detect("some text")

    assert seen == ["broken", "working"]
    assert d.score == 12
