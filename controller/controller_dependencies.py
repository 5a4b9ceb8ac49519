from functools import lru_cache
from fastapi import Header
from fastapi_limiter.depends import RateLimiter
from config.settings import settings
from core.ai_detector import GeminiDetector
from core.search_client import default_search_provider
from repository.batch_repository import InMemoryBatchRepository, RedisBatchRepository
from repository.usage_repository import InMemoryUsageRepository, UsageRepository
from service.batch_service import BatchService
from service.plagiarism_service import DocumentAnalyzer, PlagiarismService
from service.usage_service import UsageService
from util.constants import Headers
from util.enums import BatchStore, ErrorMessage
from util.errors import AppError

rate_limit = RateLimiter(times=settings.RATE_LIMIT_TIMES, seconds=settings.RATE_LIMIT_SECONDS)


def _in_memory() -> bool:
    return settings.BATCH_STORE == BatchStore.MEMORY


async def get_current_user(
    x_user_id: str | None = Header(default=None, alias=Headers.USER_ID),
) -> str:
    # Authentication happens upstream; we only need a stable caller id.
    if not x_user_id or not x_user_id.strip():
        raise AppError.of(ErrorMessage.USER_REQUIRED)
    return x_user_id.strip()


@lru_cache(maxsize=1)
def get_usage_service() -> UsageService:
    store = InMemoryUsageRepository() if _in_memory() else UsageRepository()
    return UsageService(store)


@lru_cache(maxsize=1)
def get_document_analyzer() -> DocumentAnalyzer:
    return DocumentAnalyzer(default_search_provider(), GeminiDetector())


def get_plagiarism_service() -> PlagiarismService:
    return PlagiarismService(get_document_analyzer(), get_usage_service())


@lru_cache(maxsize=1)
def get_batch_service() -> BatchService:
    # Singleton: the worker's task registry must outlive individual requests.
    repo = InMemoryBatchRepository() if _in_memory() else RedisBatchRepository()
    return BatchService(repo, get_document_analyzer(), get_usage_service())
