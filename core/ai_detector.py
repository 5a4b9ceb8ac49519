import json
import re
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple
import httpx
import logging
from config.settings import settings
from core.entities import Detection
from util.constants import DEFAULT_LANGUAGE
from util.timing import timed

logger = logging.getLogger(__name__)

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


class AiDetector(Protocol):
    async def detect(self, text: str) -> Detection: ...


# (pattern, weight, label); positive weights point towards AI authorship.
_AI_PATTERNS: Sequence[Tuple[str, int, str]] = (
    (r"\bFurthermore\b", 8, "transition words"),
    (r"\bMoreover\b", 8, "transition words"),
    (r"\bAdditionally\b", 6, "transition words"),
    (r"\bIn conclusion\b", 10, "formal conclusions"),
    (r"\bIt is important to note\b", 12, "formal phrases"),
    (r"\bIt is worth mentioning\b", 10, "formal phrases"),
    (r"\bOne might argue\b", 8, "academic tone"),
    (r"\bThis suggests that\b", 6, "analytical language"),
    (r"\bIn order to\b", 4, "verbose phrasing"),
    (r"\bDue to the fact that\b", 6, "verbose phrasing"),
    (r"\bIt should be noted\b", 8, "formal phrases"),
    (r"\bAs mentioned earlier\b", 6, "structured references"),
)

_HUMAN_PATTERNS: Sequence[Tuple[str, int]] = (
    (r"\bI think\b", -8),
    (r"\bI feel\b", -8),
    (r"\bhonestly\b", -10),
    (r"\bto be fair\b", -8),
    (r"\bactually\b", -4),
    (r"\bdon't\b", -3),
    (r"\bcan't\b", -3),
    (r"\bwon't\b", -3),
    (r"\bit's\b", -2),
    (r"\bthat's\b", -2),
    (r"\bI'm\b", -4),
    (r"\bkinda\b", -10),
    (r"\bgonna\b", -10),
    (r"\bwanna\b", -10),
    (r"\blol\b", -15),
    (r"\bhaha\b", -12),
    (r"!{2,}", -8),
    (r"\.\.\.", -5),
)

_MAX_PATTERN_HITS = 3
_LIST_RE = re.compile(r"^\s*(?:[-•*]|\d+\.)\s+", re.MULTILINE)
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")


def _clamp(score: float) -> int:
    return int(max(0, min(100, score)))


def heuristic_detection(text: str) -> Detection:
    """
    Pattern-weighted estimate used when no model answers.
    Starts neutral at 50; phrases, sentence-length uniformity and lists move it.
    """
    score = 50
    reasons: List[str] = []

    for pattern, weight, label in _AI_PATTERNS:
        hits = len(re.findall(pattern, text, flags=re.IGNORECASE))
        if hits:
            score += weight * min(hits, _MAX_PATTERN_HITS)
            if label not in reasons:
                reasons.append(label)

    for pattern, weight in _HUMAN_PATTERNS:
        hits = len(re.findall(pattern, text, flags=re.IGNORECASE))
        if hits:
            score += weight * min(hits, _MAX_PATTERN_HITS)

    sentences = [s for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]
    if len(sentences) > 3:
        lengths = [len(s.split()) for s in sentences]
        avg = sum(lengths) / len(lengths)
        variance = sum((n - avg) ** 2 for n in lengths) / len(lengths)
        if variance < 15:
            score += 10
        elif variance > 50:
            score -= 8

    if _LIST_RE.search(text):
        score += 5

    score = _clamp(score)
    if score >= 70:
        reason = f"High AI probability: {', '.join(reasons[:2]) or 'formal writing style'}"
    elif score >= 40:
        reason = "Mixed indicators: could be AI-assisted or human"
    else:
        reason = "Low AI probability: conversational and personal tone detected"
    return Detection(score=score, reason=reason, language=DEFAULT_LANGUAGE)


def _parse_reply(raw: str) -> Optional[Detection]:
    m = _JSON_OBJECT_RE.search(raw or "")
    if not m:
        return None
    try:
        parsed = json.loads(m.group(0))
    except json.JSONDecodeError:
        return None
    if not isinstance(parsed, dict):
        return None
    try:
        score = _clamp(int(float(parsed.get("score", 0))))
    except (TypeError, ValueError):
        score = 0
    return Detection(
        score=score,
        reason=str(parsed.get("reason") or "Analysis complete"),
        language=str(parsed.get("language") or DEFAULT_LANGUAGE),
    )


def _reply_text(data: Dict[str, Any]) -> str:
    try:
        parts = data["candidates"][0]["content"]["parts"]
        return "".join(str(p.get("text") or "") for p in parts if isinstance(p, dict))
    except (KeyError, IndexError, TypeError):
        return ""


class GeminiDetector:
    """
    Asks Gemini models, in order, for an AI-authorship score.
    Falls back to `heuristic_detection` when no model produces a usable answer.
    """

    def __init__(
        self,
        api_key: str = settings.GEMINI_API_KEY,
        models: Sequence[str] = tuple(settings.GEMINI_MODELS),
        api_url: str = settings.GEMINI_API_URL,
        timeout: float = settings.DETECT_TIMEOUT_SECONDS,
        max_chars: int = settings.DETECT_MAX_CHARS,
    ) -> None:
        self._api_key = api_key
        self._models = list(models)
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._max_chars = max_chars

    async def _ask(self, client: httpx.AsyncClient, model: str, text: str) -> Optional[Detection]:
        payload = {
            "contents": [
                {"parts": [{"text": f"{settings.AI_DETECTION_PROMPT}\"{text[: self._max_chars]}\""}]}
            ],
            "generationConfig": {"temperature": 0.0},
        }
        with timed(logger, "ai.detect", model=model):
            r = await client.post(
                f"{self._api_url}/{model}:generateContent",
                params={"key": self._api_key},
                json=payload,
            )
            r.raise_for_status()
        return _parse_reply(_reply_text(r.json()))

    async def detect(self, text: str) -> Detection:
        if self._api_key:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                for model in self._models:
                    try:
                        result = await self._ask(client, model, text)
                    except (httpx.HTTPError, ValueError) as e:
                        logger.warning("ai.detect.model.error model=%s err=%s", model, type(e).__name__)
                        continue
                    if result is not None:
                        logger.info("ai.detect.result model=%s score=%d", model, result.score)
                        return result
                    logger.warning("ai.detect.model.unparsable model=%s", model)
        logger.warning("ai.detect.fallback heuristic chars=%d", len(text))
        return heuristic_detection(text)
