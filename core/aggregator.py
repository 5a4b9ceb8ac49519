from typing import Iterable, List, Optional, Sequence
from core.entities import ChunkMatch
from model.analysis import Highlight, SourceMatch
from util.constants import UNKNOWN_SOURCE, UNKNOWN_URL
from util.enums import HighlightType
from util.functions import percent, round_half_up

PLAGIARISM_THRESHOLD = 0.30
PLAGIARISM_WEIGHT = 0.5
AI_WEIGHT = 0.5


def classify(
    chunk: str, match: Optional[ChunkMatch], threshold: float = PLAGIARISM_THRESHOLD
) -> Highlight:
    """
    Verdict for one chunk. The score is reported for safe chunks too.
    """
    score = match.score if match else 0.0
    shown = round_half_up(score * 100)
    if match is not None and score > threshold:
        return Highlight(
            text=chunk,
            type=HighlightType.plagiarized,
            source=match.candidate.title or UNKNOWN_SOURCE,
            url=match.candidate.url or UNKNOWN_URL,
            score=shown,
        )
    return Highlight(text=chunk, type=HighlightType.safe, score=shown)


def classify_all(
    chunks: Sequence[str],
    matches: Sequence[Optional[ChunkMatch]],
    threshold: float = PLAGIARISM_THRESHOLD,
) -> List[Highlight]:
    return [classify(c, m, threshold) for c, m in zip(chunks, matches)]


def document_plagiarism_score(highlights: Sequence[Highlight]) -> int:
    plagiarized = sum(1 for h in highlights if h.type == HighlightType.plagiarized)
    return percent(plagiarized, len(highlights))


def combined_risk_score(plagiarism_score: int, ai_score: int) -> int:
    return round_half_up(PLAGIARISM_WEIGHT * plagiarism_score + AI_WEIGHT * ai_score)


def collect_sources(
    matches: Iterable[Optional[ChunkMatch]],
    highlights: Iterable[Highlight],
) -> List[SourceMatch]:
    """Sources behind plagiarized chunks, one entry per URL in first-seen order."""
    seen: dict[str, SourceMatch] = {}
    for m, h in zip(matches, highlights):
        if m is None or h.type != HighlightType.plagiarized:
            continue
        c = m.candidate
        url = c.url or UNKNOWN_URL
        if url not in seen:
            seen[url] = SourceMatch(title=c.title or UNKNOWN_SOURCE, url=url, snippet=c.snippet)
    return list(seen.values())
