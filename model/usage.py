from datetime import date, datetime
from pydantic import BaseModel, Field
from model.analysis import Badge
from util.types import SubscriptionStatus, SubscriptionTier


class UsageDecision(BaseModel):
    allowed: bool
    reason: str | None = None
    limit: int | None = None
    remaining: int | None = None
    isDaily: bool = False


class UsageRecord(BaseModel):
    """Per-user counters consulted by the usage policy."""

    userId: str
    tier: SubscriptionTier = "free"
    subscriptionStatus: SubscriptionStatus = "active"
    subscriptionExpiry: datetime | None = None
    usageCount: int = 0
    dailyUsageCount: int = 0
    lastUsageDate: date | None = None

    # gamification
    currentStreak: int = 0
    longestStreak: int = 0
    totalAnalyses: int = 0
    lastAnalysisDate: date | None = None
    badges: list[Badge] = Field(default_factory=list)
