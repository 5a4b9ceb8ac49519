from pydantic import BaseModel, Field
from util.types import BatchStatus


class CheckRequest(BaseModel):
    text: str = ""


class BulkCheckRequest(BaseModel):
    texts: list[str] = Field(default_factory=list)
    filenames: list[str] | None = None


class BulkCheckResponse(BaseModel):
    batchId: str
    status: BatchStatus
    totalItems: int
    message: str


class DeleteResponse(BaseModel):
    ok: bool
