"""Shared fixtures and fakes for the analysis engine tests."""
from __future__ import annotations

import os

# Settings are read at import time; give them a complete test environment first.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("ALLOWED_ORIGIN", "http://localhost:3000")
os.environ.setdefault("BATCH_STORE", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Callable, Dict, List, Optional

import pytest

from core.entities import Candidate, Detection
from core.sampler import SamplingPolicy
from repository.batch_repository import InMemoryBatchRepository
from repository.usage_repository import InMemoryUsageRepository
from service.plagiarism_service import DocumentAnalyzer
from service.usage_service import UsageService


class FakeClock:
    """Deterministic clock: time only moves when something sleeps or `advance` is called."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self._t = 0.0
        self._start = start
        self.sleeps: List[float] = []

    def monotonic(self) -> float:
        return self._t

    def now(self) -> float:
        return self._start + self._t

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(round(seconds, 6))
        self._t += seconds

    def advance(self, seconds: float) -> None:
        self._t += seconds


class FakeSearch:
    """Returns canned candidates for queries containing a trigger word."""

    def __init__(self, results: Optional[Dict[str, List[Candidate]]] = None, fail: bool = False) -> None:
        self.results = results or {}
        self.fail = fail
        self.calls: List[str] = []

    async def query(self, text: str) -> List[Candidate]:
        self.calls.append(text)
        if self.fail:
            raise RuntimeError("search backend down")
        lowered = text.lower()
        out: List[Candidate] = []
        for trigger, candidates in self.results.items():
            if trigger in lowered:
                out.extend(candidates)
        return out


class FakeDetector:
    def __init__(
        self,
        score: int = 40,
        fail: bool = False,
        on_detect: Optional[Callable[[str], object]] = None,
    ) -> None:
        self.score = score
        self.fail = fail
        self.on_detect = on_detect
        self.calls = 0

    async def detect(self, text: str) -> Detection:
        self.calls += 1
        if self.on_detect is not None:
            await self.on_detect(text)
        if self.fail:
            raise RuntimeError("detector unavailable")
        return Detection(score=self.score, reason="fake", language="English")


PHOTOSYNTHESIS = (
    "Photosynthesis converts light energy into chemical energy stored in glucose molecules "
    "inside the chloroplasts of green plants."
)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def policy() -> SamplingPolicy:
    return SamplingPolicy(stride=2, query_all_below=20, max_queries=30, min_snippet_chars=30)


@pytest.fixture
def search() -> FakeSearch:
    return FakeSearch(
        {
            "photosynthesis": [
                Candidate(title="Too short", url="https://short.example", snippet="photosynthesis"),
                Candidate(
                    title="Photosynthesis - Wikipedia",
                    url="https://en.wikipedia.org/wiki/Photosynthesis",
                    snippet=PHOTOSYNTHESIS,
                ),
            ]
        }
    )


@pytest.fixture
def detector() -> FakeDetector:
    return FakeDetector(score=80)


@pytest.fixture
def usage_store() -> InMemoryUsageRepository:
    return InMemoryUsageRepository()


@pytest.fixture
def usage(usage_store) -> UsageService:
    return UsageService(usage_store)


@pytest.fixture
def analyzer(search, detector, policy, clock) -> DocumentAnalyzer:
    return DocumentAnalyzer(
        search, detector, policy=policy, clock=clock, query_delay=0.2, chunk_size=300, threshold=0.30
    )


@pytest.fixture
def batch_repo(clock) -> InMemoryBatchRepository:
    return InMemoryBatchRepository(ttl_seconds=3600, clock=clock)
