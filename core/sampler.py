from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence
import logging
from core.entities import Candidate, ChunkMatch, DocumentScan
from core.search_client import SearchProvider
from core.similarity import is_substantial, similarity
from util.timing import Pacer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SamplingPolicy:
    """
    Which chunks are sent to the search provider.

    Short documents (up to `query_all_below` chunks) are queried in full;
    longer ones every `stride`-th chunk starting at 0. At most `max_queries`
    chunks are queried per document.
    """

    stride: int = 2
    query_all_below: int = 20
    max_queries: int = 30
    min_snippet_chars: int = 30

    def __post_init__(self) -> None:
        if self.stride < 1:
            raise ValueError("stride must be >= 1")
        if self.max_queries < 0:
            raise ValueError("max_queries must be >= 0")


def select_query_chunks(chunk_count: int, policy: SamplingPolicy = SamplingPolicy()) -> List[int]:
    if chunk_count <= 0:
        return []
    step = 1 if chunk_count <= policy.query_all_below else policy.stride
    return list(range(0, chunk_count, step))[: policy.max_queries]


def best_match(
    chunk: str, candidates: Iterable[Candidate], min_snippet_chars: int = 30
) -> Optional[ChunkMatch]:
    """
    Highest-similarity candidate that also passes the substantiality gate.
    Snippets shorter than `min_snippet_chars` are ignored.
    """
    best: Optional[ChunkMatch] = None
    top = 0.0
    for c in candidates:
        snippet = c.snippet or ""
        if len(snippet) < min_snippet_chars:
            continue
        score = similarity(chunk, snippet)
        if score > top and is_substantial(chunk, snippet):
            top = score
            best = ChunkMatch(candidate=c, score=score)
    return best


class SourceQuerySampler:
    """
    Runs the sampled search queries for one document, one at a time and in
    chunk order, pacing consecutive queries.
    """

    def __init__(
        self,
        search: SearchProvider,
        policy: SamplingPolicy = SamplingPolicy(),
        pacer: Optional[Pacer] = None,
    ) -> None:
        self._search = search
        self._policy = policy
        self._pacer = pacer or Pacer(0)

    @property
    def policy(self) -> SamplingPolicy:
        return self._policy

    async def _candidates(self, index: int, chunk: str) -> List[Candidate]:
        try:
            return list(await self._search.query(chunk))
        except Exception as e:
            # A failed lookup means "no matches" for this chunk only.
            logger.warning("sampler.query.error chunk=%d err=%s", index, type(e).__name__)
            return []

    async def scan(self, chunks: Sequence[str]) -> DocumentScan:
        selected = select_query_chunks(len(chunks), self._policy)
        matches: List[Optional[ChunkMatch]] = [None] * len(chunks)
        self._pacer.reset()
        for idx in selected:
            await self._pacer.wait()
            candidates = await self._candidates(idx, chunks[idx])
            self._pacer.done()
            matches[idx] = best_match(
                chunks[idx], candidates, self._policy.min_snippet_chars
            )
        found = sum(1 for m in matches if m is not None)
        logger.info(
            "sampler.scan chunks=%d queried=%d matched=%d",
            len(chunks),
            len(selected),
            found,
        )
        return DocumentScan(chunks=list(chunks), matches=matches, queried=selected)
