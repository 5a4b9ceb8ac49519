from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, List, Optional, TypeVar
import logging

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """One search result considered as a possible source for a chunk."""

    title: str
    url: str
    snippet: str


@dataclass(frozen=True)
class ChunkMatch:
    candidate: Candidate
    score: float  # combined similarity, 0..1


@dataclass(frozen=True)
class Detection:
    score: int  # 0..100
    reason: str
    language: str


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Result of a call to a collaborator that is allowed to fail.
    Exactly one of `value` / `error` is meaningful.
    """

    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap_or(self, default: T) -> T:
        if self.error is not None or self.value is None:
            return default
        return self.value


async def capture(label: str, call: Callable[[], Awaitable[T]]) -> Outcome[T]:
    """Await `call()` and fold any exception into an error Outcome."""
    try:
        return Outcome(value=await call())
    except Exception as e:
        logger.warning("%s.failed err=%s", label, type(e).__name__)
        return Outcome(error=str(e) or type(e).__name__)


@dataclass
class DocumentScan:
    """Per-document plagiarism outcome before the AI score is blended in."""

    chunks: List[str]
    matches: List[Optional[ChunkMatch]]
    queried: List[int] = field(default_factory=list)
