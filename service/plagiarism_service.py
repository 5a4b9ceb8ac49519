import logging
from typing import Callable, Optional
from uuid import uuid4
from config.settings import settings
from core.aggregator import combined_risk_score
from core.ai_detector import AiDetector
from core.entities import Detection, Outcome, capture
from core.plagiarism_pipeline import DocumentReport, analyze_document
from core.sampler import SamplingPolicy, SourceQuerySampler
from core.search_client import SearchProvider
from model.analysis import AnalysisResult, GamificationInfo, UsageInfo
from service.usage_service import UsageService
from util.constants import DEFAULT_LANGUAGE, UNAVAILABLE_REASON
from util.enums import ErrorMessage
from util.errors import AppError, UsageLimitError
from util.timing import Clock, Pacer, SystemClock

logger = logging.getLogger(__name__)

UNAVAILABLE_DETECTION = Detection(score=0, reason=UNAVAILABLE_REASON, language=DEFAULT_LANGUAGE)


def default_policy() -> SamplingPolicy:
    return SamplingPolicy(
        stride=settings.QUERY_SAMPLE_STRIDE,
        query_all_below=settings.QUERY_ALL_BELOW,
        max_queries=settings.MAX_QUERIED_CHUNKS,
        min_snippet_chars=settings.MIN_SNIPPET_CHARS,
    )


class DocumentAnalyzer:
    """
    Shared by single checks and batch items: the plagiarism scan plus an
    independent AI-detection call, each failing on its own.
    """

    def __init__(
        self,
        search: SearchProvider,
        detector: AiDetector,
        *,
        policy: Optional[SamplingPolicy] = None,
        clock: Optional[Clock] = None,
        query_delay: float = settings.QUERY_DELAY_SECONDS,
        chunk_size: int = settings.CHUNK_SIZE,
        threshold: float = settings.PLAGIARISM_THRESHOLD,
    ) -> None:
        self._search = search
        self._detector = detector
        self._policy = policy or default_policy()
        self._clock = clock or SystemClock()
        self._query_delay = query_delay
        self._chunk_size = chunk_size
        self._threshold = threshold

    def _sampler(self) -> SourceQuerySampler:
        # One pacer per document so concurrent documents never share timing state.
        return SourceQuerySampler(
            self._search, self._policy, Pacer(self._query_delay, self._clock)
        )

    async def scan(self, text: str) -> DocumentReport:
        return await analyze_document(
            text,
            sampler=self._sampler(),
            chunk_size=self._chunk_size,
            threshold=self._threshold,
        )

    async def detect(self, text: str) -> Outcome[Detection]:
        return await capture("ai.detect", lambda: self._detector.detect(text))


class PlagiarismService:
    def __init__(
        self,
        analyzer: DocumentAnalyzer,
        usage: UsageService,
        id_factory: Callable[[], str] = lambda: uuid4().hex,
    ) -> None:
        self._analyzer = analyzer
        self._usage = usage
        self._new_id = id_factory

    async def check(self, user_id: str, text: str) -> AnalysisResult:
        """
        Single-document analysis.
        Rejects empty text (400) and declined usage (403) before any chunking.
        """
        if not text or not text.strip():
            raise AppError.of(ErrorMessage.TEXT_REQUIRED)

        decision = await self._usage.authorize(user_id)
        if not decision.allowed:
            logger.info("check.denied user=%s reason=%s", user_id, decision.reason)
            raise UsageLimitError(decision.reason, decision.limit, decision.remaining)

        logger.info("check.start user=%s chars=%d", user_id, len(text))
        report = await self._analyzer.scan(text)

        recorded = await capture("usage.record", lambda: self._usage.record_usage(user_id))
        usage, gamification = recorded.unwrap_or((UsageInfo(), GamificationInfo()))

        detection = (await self._analyzer.detect(text)).unwrap_or(UNAVAILABLE_DETECTION)
        risk = combined_risk_score(report.plagiarism_score, detection.score)

        result = AnalysisResult(
            id=self._new_id(),
            overallScore=risk,
            plagiarismScore=report.plagiarism_score,
            aiScore=detection.score,
            aiReason=detection.reason or UNAVAILABLE_REASON,
            language=detection.language or DEFAULT_LANGUAGE,
            highlights=report.highlights,
            matches=report.sources,
            usage=usage,
            gamification=gamification,
        )
        logger.info(
            "check.done user=%s id=%s overall=%d plagiarism=%d ai=%d",
            user_id,
            result.id,
            risk,
            report.plagiarism_score,
            detection.score,
        )
        return result
