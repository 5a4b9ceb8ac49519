from typing import Optional
from fastapi import HTTPException, status
from util.enums import ErrorMessage


class AppError(HTTPException):
    # Flow: raise AppError to short-circuit with a typed status & message.
    def __init__(
        self, message: str, http_status: int = status.HTTP_400_BAD_REQUEST
    ) -> None:
        super().__init__(status_code=http_status, detail=message)

    @classmethod
    def of(cls, error: ErrorMessage) -> "AppError":
        return cls(error.value.message, error.value.http_status)


class UsageLimitError(AppError):
    """
    Raised when the usage policy declines an analysis.
    The response body keeps the decision fields so clients can show the limit.
    """

    def __init__(
        self, reason: Optional[str], limit: Optional[int], remaining: Optional[int]
    ) -> None:
        super().__init__(
            ErrorMessage.LIMIT_REACHED.value.message,
            ErrorMessage.LIMIT_REACHED.value.http_status,
        )
        self.reason = reason
        self.limit = limit
        self.remaining = remaining
        self.detail = {
            "error": ErrorMessage.LIMIT_REACHED.value.message,
            "reason": reason,
            "limit": limit,
            "remaining": remaining,
        }
