import logging
from typing import List, Optional, Sequence
from config.settings import settings
from core.aggregator import combined_risk_score
from model.batch import Batch, BatchItemResult
from repository.batch_repository import BatchRepository, new_batch
from service.batch_worker import BatchWorker
from service.plagiarism_service import UNAVAILABLE_DETECTION, DocumentAnalyzer
from service.usage_service import UsageService
from util.enums import ErrorMessage
from util.errors import AppError, UsageLimitError
from util.timing import Clock, Pacer, SystemClock, timed, utc_now

logger = logging.getLogger(__name__)


class BatchService:
    """
    Asynchronous bulk analysis. `submit` stores the batch and hands it to the
    worker; items are then processed strictly one after another in submission
    order, and callers poll `status`.
    """

    def __init__(
        self,
        batches: BatchRepository,
        analyzer: DocumentAnalyzer,
        usage: UsageService,
        *,
        clock: Optional[Clock] = None,
        item_delay: float = settings.ITEM_DELAY_SECONDS,
        max_items: int = settings.MAX_BATCH_ITEMS,
        max_item_chars: int = settings.MAX_BATCH_ITEM_CHARS,
        clean_threshold: int = settings.BATCH_CLEAN_THRESHOLD,
    ) -> None:
        self._batches = batches
        self._analyzer = analyzer
        self._usage = usage
        self._clock = clock or SystemClock()
        self._item_delay = item_delay
        self._max_items = max_items
        self._max_item_chars = max_item_chars
        self._clean_threshold = clean_threshold
        self.worker = BatchWorker(self.process, on_crash=self._mark_failed)

    # ---------------- Submission & reads ----------------

    async def submit(
        self, owner_id: str, texts: Sequence[str], filenames: Optional[Sequence[str]] = None
    ) -> Batch:
        if not texts:
            raise AppError.of(ErrorMessage.TEXTS_REQUIRED)
        if len(texts) > self._max_items:
            raise AppError(
                f"Maximum {self._max_items} texts per batch",
                ErrorMessage.BATCH_TOO_LARGE.value.http_status,
            )

        decision = await self._usage.authorize(owner_id)
        if not decision.allowed:
            raise UsageLimitError(decision.reason, decision.limit, decision.remaining)

        batch = new_batch(
            owner_id,
            texts,
            filenames,
            now=utc_now(self._clock),
            max_chars=self._max_item_chars,
        )
        await self._batches.put(batch)
        logger.info("batch.created batch=%s owner=%s items=%d", batch.id, owner_id, batch.totalItems)
        self.worker.start(batch.id)
        return batch

    async def status(self, batch_id: str, owner_id: str) -> Batch:
        batch = await self._batches.get(batch_id)
        if batch is None:
            raise AppError.of(ErrorMessage.BATCH_NOT_FOUND)
        if batch.ownerId != str(owner_id):
            logger.warning("batch.access.denied batch=%s user=%s", batch_id, owner_id)
            raise AppError.of(ErrorMessage.ACCESS_DENIED)
        return batch

    async def list_for_owner(self, owner_id: str) -> List[Batch]:
        return await self._batches.list_for_owner(str(owner_id))

    async def delete(self, batch_id: str, owner_id: str) -> bool:
        batch = await self.status(batch_id, owner_id)
        if self.worker.running(batch.id):
            raise AppError.of(ErrorMessage.BATCH_BUSY)
        deleted = await self._batches.delete(batch.id)
        logger.info("batch.deleted batch=%s ok=%s", batch.id, deleted)
        return deleted

    # ---------------- Processing ----------------

    async def analyze_item(self, text: str) -> BatchItemResult:
        if not text.strip():
            raise ValueError("Text is empty")
        report = await self._analyzer.scan(text)
        detection = (await self._analyzer.detect(text)).unwrap_or(UNAVAILABLE_DETECTION)
        return BatchItemResult(
            plagiarismScore=report.plagiarism_score,
            aiScore=detection.score,
            overallScore=combined_risk_score(report.plagiarism_score, detection.score),
        )

    async def process(self, batch_id: str) -> None:
        batch = await self._batches.get(batch_id)
        if batch is None:
            logger.warning("batch.process.missing batch=%s", batch_id)
            return

        batch.start()
        await self._batches.put(batch)
        pacer = Pacer(self._item_delay, self._clock)

        with timed(logger, "batch.process", batch=batch_id, items=batch.totalItems):
            for index, item in enumerate(batch.items):
                if item.finished:
                    continue
                await pacer.wait()
                try:
                    result = await self.analyze_item(item.text)
                except Exception as e:
                    logger.error("batch.item.failed batch=%s item=%d err=%s", batch_id, index, type(e).__name__)
                    batch.record_item(
                        index,
                        error=str(e) or type(e).__name__,
                        now=utc_now(self._clock),
                        clean_threshold=self._clean_threshold,
                    )
                else:
                    batch.record_item(
                        index,
                        result=result,
                        now=utc_now(self._clock),
                        clean_threshold=self._clean_threshold,
                    )
                    logger.info(
                        "batch.item.done batch=%s item=%d plagiarism=%d ai=%d",
                        batch_id,
                        index,
                        result.plagiarismScore,
                        result.aiScore,
                    )
                pacer.done()
                await self._batches.put(batch)

        logger.info(
            "batch.completed batch=%s processed=%d failed=%d",
            batch_id,
            batch.processedItems,
            batch.summary.failedItems if batch.summary else 0,
        )

    async def _mark_failed(self, batch_id: str, error: BaseException) -> None:
        batch = await self._batches.get(batch_id)
        if batch is None or batch.terminal:
            return
        batch.fail(utc_now(self._clock))
        await self._batches.put(batch)
        logger.error("batch.failed batch=%s err=%s", batch_id, type(error).__name__)
