import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Dict, Optional, Protocol
from model.analysis import Badge, GamificationInfo, UsageInfo
from model.usage import UsageDecision, UsageRecord
from util.enums import UsageReason

logger = logging.getLogger(__name__)

FREE_TOTAL_LIMIT = 5

# None means unlimited.
DAILY_LIMITS: Dict[str, Optional[int]] = {
    "monthly": 100,
    "quarterly": 200,
    "biannual": 350,
    "annual": None,
}


@dataclass(frozen=True)
class BadgeRule:
    id: str
    name: str
    description: str
    icon: str
    earned: Callable[[UsageRecord], bool]


BADGES = (
    BadgeRule("first_analysis", "First Steps", "Complete your first analysis", "🎯", lambda u: u.totalAnalyses >= 1),
    BadgeRule("analysis_10", "Getting Started", "Complete 10 analyses", "📊", lambda u: u.totalAnalyses >= 10),
    BadgeRule("analysis_50", "Power User", "Complete 50 analyses", "💪", lambda u: u.totalAnalyses >= 50),
    BadgeRule("analysis_100", "Century Club", "Complete 100 analyses", "💯", lambda u: u.totalAnalyses >= 100),
    BadgeRule("streak_3", "On Fire", "Maintain a 3-day streak", "🔥", lambda u: u.longestStreak >= 3),
    BadgeRule("streak_7", "Week Warrior", "Maintain a 7-day streak", "⚡", lambda u: u.longestStreak >= 7),
    BadgeRule("streak_30", "Monthly Master", "Maintain a 30-day streak", "👑", lambda u: u.longestStreak >= 30),
)


class UsageStore(Protocol):
    async def get(self, user_id: str) -> UsageRecord: ...

    async def put(self, record: UsageRecord) -> None: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def evaluate(record: UsageRecord, now: datetime) -> UsageDecision:
    """Pure usage check; the record's daily counter is reset in place on a new day."""
    if record.tier == "free":
        allowed = record.usageCount < FREE_TOTAL_LIMIT
        return UsageDecision(
            allowed=allowed,
            reason=None if allowed else UsageReason.FREE_LIMIT_REACHED.value,
            remaining=max(0, FREE_TOTAL_LIMIT - record.usageCount),
            limit=FREE_TOTAL_LIMIT,
            isDaily=False,
        )

    if record.subscriptionStatus == "paused":
        return UsageDecision(allowed=False, reason=UsageReason.SUBSCRIPTION_PAUSED.value, remaining=0, limit=0)
    if record.subscriptionStatus == "suspended":
        return UsageDecision(allowed=False, reason=UsageReason.SUBSCRIPTION_SUSPENDED.value, remaining=0, limit=0)
    if record.subscriptionExpiry is None or record.subscriptionExpiry <= now:
        return UsageDecision(allowed=False, reason=UsageReason.SUBSCRIPTION_EXPIRED.value, remaining=0, limit=0)

    _reset_daily(record, now.date())
    daily = DAILY_LIMITS.get(record.tier)
    if daily is None:
        return UsageDecision(allowed=True, isDaily=True)
    if record.dailyUsageCount >= daily:
        return UsageDecision(
            allowed=False,
            reason=UsageReason.DAILY_LIMIT_REACHED.value,
            remaining=0,
            limit=daily,
            isDaily=True,
        )
    return UsageDecision(
        allowed=True, remaining=daily - record.dailyUsageCount, limit=daily, isDaily=True
    )


def _reset_daily(record: UsageRecord, today: date) -> None:
    if record.lastUsageDate != today:
        record.dailyUsageCount = 0
        record.lastUsageDate = today


def update_streak(record: UsageRecord, today: date) -> None:
    last = record.lastAnalysisDate
    if last != today:
        if last is not None and (today - last).days > 1:
            record.currentStreak = 1
        else:
            record.currentStreak += 1
        record.longestStreak = max(record.longestStreak, record.currentStreak)
        record.lastAnalysisDate = today
    record.totalAnalyses += 1


def award_badges(record: UsageRecord, now: datetime) -> list[Badge]:
    earned = {b.id for b in record.badges}
    new = [
        Badge(id=r.id, name=r.name, description=r.description, icon=r.icon, earnedAt=now.isoformat())
        for r in BADGES
        if r.id not in earned and r.earned(record)
    ]
    record.badges.extend(new)
    return new


class UsageService:
    """
    Usage policy collaborator: authorizes analyses against tier limits and
    records consumption together with streaks and badges.
    """

    def __init__(self, store: UsageStore, now: Callable[[], datetime] = _utcnow) -> None:
        self._store = store
        self._now = now

    async def authorize(self, user_id: str) -> UsageDecision:
        record = await self._store.get(user_id)
        decision = evaluate(record, self._now())
        logger.info(
            "usage.authorize user=%s tier=%s allowed=%s reason=%s",
            user_id,
            record.tier,
            decision.allowed,
            decision.reason,
        )
        return decision

    async def record_usage(self, user_id: str) -> tuple[UsageInfo, GamificationInfo]:
        now = self._now()
        record = await self._store.get(user_id)
        record.usageCount += 1
        _reset_daily(record, now.date())
        record.dailyUsageCount += 1
        record.lastUsageDate = now.date()

        update_streak(record, now.date())
        new_badges = award_badges(record, now)
        await self._store.put(record)

        decision = evaluate(record, now)
        logger.info(
            "usage.recorded user=%s total=%d daily=%d badges=%d",
            user_id,
            record.usageCount,
            record.dailyUsageCount,
            len(new_badges),
        )
        usage = UsageInfo(
            remaining=decision.remaining,
            limit=decision.limit,
            isDaily=decision.isDaily,
            dailyUsageCount=record.dailyUsageCount,
            totalUsageCount=record.usageCount,
        )
        gamification = GamificationInfo(
            currentStreak=record.currentStreak,
            longestStreak=record.longestStreak,
            totalAnalyses=record.totalAnalyses,
            newBadges=new_badges,
        )
        return usage, gamification
