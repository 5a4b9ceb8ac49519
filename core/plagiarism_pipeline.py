from dataclasses import dataclass
from typing import List
import logging
from core.aggregator import (
    PLAGIARISM_THRESHOLD,
    classify_all,
    collect_sources,
    document_plagiarism_score,
)
from core.chunker import DEFAULT_CHUNK_SIZE, chunk_text
from core.sampler import SourceQuerySampler
from model.analysis import Highlight, SourceMatch
from util.timing import timed

logger = logging.getLogger(__name__)


@dataclass
class DocumentReport:
    plagiarism_score: int
    highlights: List[Highlight]
    sources: List[SourceMatch]
    queried: int


async def analyze_document(
    text: str,
    *,
    sampler: SourceQuerySampler,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    threshold: float = PLAGIARISM_THRESHOLD,
) -> DocumentReport:
    """
    End-to-end plagiarism scan of one document:
    1) Split into word-bounded chunks
    2) Query sampled chunks and keep the best substantial candidate per chunk
    3) Classify every chunk against the threshold
    4) Aggregate into a document score and a de-duplicated source list
    """
    with timed(logger, "plagiarism.pipeline", chars=len(text)):
        chunks = chunk_text(text, chunk_size)
        scan = await sampler.scan(chunks)
        highlights = classify_all(scan.chunks, scan.matches, threshold)
        score = document_plagiarism_score(highlights)
        sources = collect_sources(scan.matches, highlights)

    logger.info(
        "plagiarism.report chunks=%d queried=%d score=%d sources=%d",
        len(chunks),
        len(scan.queried),
        score,
        len(sources),
    )
    return DocumentReport(
        plagiarism_score=score,
        highlights=highlights,
        sources=sources,
        queried=len(scan.queried),
    )
