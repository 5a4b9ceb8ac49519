# util/enums.py
from enum import Enum
from typing import NamedTuple
from fastapi import status


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    BOLD = "\033[1m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    PROD = "prod"


class BatchStore(str, Enum):
    REDIS = "redis"
    MEMORY = "memory"


class HighlightType(str, Enum):
    plagiarized = "plagiarized"
    safe = "safe"


class UsageReason(str, Enum):
    FREE_LIMIT_REACHED = "FREE_LIMIT_REACHED"
    DAILY_LIMIT_REACHED = "DAILY_LIMIT_REACHED"
    SUBSCRIPTION_PAUSED = "SUBSCRIPTION_PAUSED"
    SUBSCRIPTION_SUSPENDED = "SUBSCRIPTION_SUSPENDED"
    SUBSCRIPTION_EXPIRED = "SUBSCRIPTION_EXPIRED"


class ErrorInfo(NamedTuple):
    message: str
    http_status: int


class ErrorMessage(Enum):
    TEXT_REQUIRED = ErrorInfo("Text is required", status.HTTP_400_BAD_REQUEST)
    TEXTS_REQUIRED = ErrorInfo("Texts array is required", status.HTTP_400_BAD_REQUEST)
    BATCH_TOO_LARGE = ErrorInfo("Too many texts in batch", status.HTTP_400_BAD_REQUEST)
    USER_REQUIRED = ErrorInfo("Missing user identity", status.HTTP_401_UNAUTHORIZED)
    LIMIT_REACHED = ErrorInfo("Limit reached", status.HTTP_403_FORBIDDEN)
    ACCESS_DENIED = ErrorInfo("Access denied", status.HTTP_403_FORBIDDEN)
    BATCH_NOT_FOUND = ErrorInfo("Batch not found", status.HTTP_404_NOT_FOUND)
    BATCH_BUSY = ErrorInfo("Batch is still processing", status.HTTP_409_CONFLICT)
    INTERNAL_ERROR = ErrorInfo("Internal Error", status.HTTP_502_BAD_GATEWAY)
