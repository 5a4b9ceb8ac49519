from datetime import datetime
from pydantic import BaseModel, Field
from util.functions import percent, round_half_up
from util.types import BatchStatus, ItemStatus


class BatchItemResult(BaseModel):
    plagiarismScore: int
    aiScore: int
    overallScore: int


class BatchItem(BaseModel):
    id: str
    text: str
    filename: str
    status: ItemStatus = "pending"
    result: BatchItemResult | None = None
    error: str | None = None

    @property
    def finished(self) -> bool:
        return self.status in ("completed", "failed")


class BatchSummary(BaseModel):
    avgPlagiarismScore: int = 0
    avgAiScore: int = 0
    totalPlagiarized: int = 0
    totalClean: int = 0
    totalProcessed: int = 0
    failedItems: int = 0


class Batch(BaseModel):
    id: str
    ownerId: str
    status: BatchStatus = "pending"
    createdAt: datetime
    completedAt: datetime | None = None
    totalItems: int = 0
    processedItems: int = 0
    items: list[BatchItem] = Field(default_factory=list)
    summary: BatchSummary | None = None

    @property
    def progress(self) -> int:
        return percent(self.processedItems, self.totalItems)

    @property
    def terminal(self) -> bool:
        return self.status in ("completed", "failed")

    def start(self) -> None:
        if self.status == "pending":
            self.status = "processing"

    def record_item(
        self,
        index: int,
        *,
        result: BatchItemResult | None = None,
        error: str | None = None,
        now: datetime,
        clean_threshold: int = 20,
    ) -> BatchItem:
        """
        Move item `index` to its terminal state (once) and refresh the counters.
        Completes the batch when every item has finished.
        """
        item = self.items[index]
        if item.finished:
            raise ValueError(f"item {item.id} already {item.status}")
        if error is not None:
            item.status, item.error, item.result = "failed", error, None
        else:
            item.status, item.result, item.error = "completed", result, None

        self.processedItems = sum(1 for i in self.items if i.finished)
        if self.processedItems == self.totalItems:
            self.status = "completed"
            self.completedAt = now
            self.summary = summarize(self.items, clean_threshold)
        return item

    def fail(self, now: datetime) -> None:
        self.status = "failed"
        self.completedAt = now
        self.summary = summarize(self.items)


def summarize(items: list[BatchItem], clean_threshold: int = 20) -> BatchSummary:
    results = [i.result for i in items if i.result is not None]
    failed = sum(1 for i in items if i.status == "failed")
    if not results:
        return BatchSummary(failedItems=failed)
    n = len(results)
    plagiarized = sum(1 for r in results if r.plagiarismScore > clean_threshold)
    return BatchSummary(
        avgPlagiarismScore=round_half_up(sum(r.plagiarismScore for r in results) / n),
        avgAiScore=round_half_up(sum(r.aiScore for r in results) / n),
        totalPlagiarized=plagiarized,
        totalClean=n - plagiarized,
        totalProcessed=n,
        failedItems=failed,
    )


class BatchItemView(BaseModel):
    id: str
    filename: str
    status: ItemStatus
    result: BatchItemResult | None = None
    error: str | None = None


class BatchStatusView(BaseModel):
    id: str
    status: BatchStatus
    progress: int
    processedItems: int
    totalItems: int
    items: list[BatchItemView]
    summary: BatchSummary | None = None
    createdAt: datetime
    completedAt: datetime | None = None

    @classmethod
    def of(cls, batch: Batch) -> "BatchStatusView":
        return cls(
            id=batch.id,
            status=batch.status,
            progress=batch.progress,
            processedItems=batch.processedItems,
            totalItems=batch.totalItems,
            items=[
                BatchItemView(
                    id=i.id, filename=i.filename, status=i.status, result=i.result, error=i.error
                )
                for i in batch.items
            ],
            summary=batch.summary,
            createdAt=batch.createdAt,
            completedAt=batch.completedAt,
        )


class BatchListEntry(BaseModel):
    id: str
    status: BatchStatus
    totalItems: int
    processedItems: int
    createdAt: datetime
    completedAt: datetime | None = None
    summary: BatchSummary | None = None

    @classmethod
    def of(cls, batch: Batch) -> "BatchListEntry":
        return cls(
            id=batch.id,
            status=batch.status,
            totalItems=batch.totalItems,
            processedItems=batch.processedItems,
            createdAt=batch.createdAt,
            completedAt=batch.completedAt,
            summary=batch.summary,
        )
