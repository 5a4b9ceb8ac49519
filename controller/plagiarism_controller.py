from fastapi import APIRouter, Depends, status
from controller.controller_dependencies import (
    get_batch_service,
    get_current_user,
    get_plagiarism_service,
    rate_limit,
)
from model.analysis import AnalysisResult
from model.api import BulkCheckRequest, BulkCheckResponse, CheckRequest, DeleteResponse
from model.batch import BatchListEntry, BatchStatusView
from service.batch_service import BatchService
from service.plagiarism_service import PlagiarismService
from util.constants import InternalURIs

plagiarism_router = APIRouter(dependencies=[Depends(rate_limit)])


@plagiarism_router.post(InternalURIs.CHECK, response_model=AnalysisResult)
async def check_plagiarism(
    payload: CheckRequest,
    user_id: str = Depends(get_current_user),
    service: PlagiarismService = Depends(get_plagiarism_service),
) -> AnalysisResult:
    return await service.check(user_id, payload.text)


@plagiarism_router.post(
    InternalURIs.BULK,
    response_model=BulkCheckResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def bulk_check(
    payload: BulkCheckRequest,
    user_id: str = Depends(get_current_user),
    service: BatchService = Depends(get_batch_service),
) -> BulkCheckResponse:
    batch = await service.submit(user_id, payload.texts, payload.filenames)
    return BulkCheckResponse(
        batchId=batch.id,
        status="processing",
        totalItems=batch.totalItems,
        message=f"Batch processing started. Poll {InternalURIs.BULK}/{batch.id} for progress.",
    )


@plagiarism_router.get(InternalURIs.BULK, response_model=list[BatchListEntry])
async def list_batches(
    user_id: str = Depends(get_current_user),
    service: BatchService = Depends(get_batch_service),
) -> list[BatchListEntry]:
    return [BatchListEntry.of(b) for b in await service.list_for_owner(user_id)]


@plagiarism_router.get(InternalURIs.BULK_ITEM, response_model=BatchStatusView)
async def batch_status(
    batch_id: str,
    user_id: str = Depends(get_current_user),
    service: BatchService = Depends(get_batch_service),
) -> BatchStatusView:
    return BatchStatusView.of(await service.status(batch_id, user_id))


@plagiarism_router.delete(InternalURIs.BULK_ITEM, response_model=DeleteResponse)
async def delete_batch(
    batch_id: str,
    user_id: str = Depends(get_current_user),
    service: BatchService = Depends(get_batch_service),
) -> DeleteResponse:
    return DeleteResponse(ok=await service.delete(batch_id, user_id))
