from pydantic import BaseModel, Field, SerializerFunctionWrapHandler, model_serializer
from util.enums import HighlightType


class Highlight(BaseModel):
    text: str
    type: HighlightType
    source: str | None = None
    url: str | None = None
    score: int = Field(ge=0, le=100)

    @model_serializer(mode="wrap")
    def _drop_missing_source(self, handler: SerializerFunctionWrapHandler) -> dict:
        # Safe chunks carry no source; omit the keys rather than sending nulls.
        data = handler(self)
        for key in ("source", "url"):
            if data.get(key) is None:
                data.pop(key, None)
        return data


class SourceMatch(BaseModel):
    title: str
    url: str
    snippet: str


class UsageInfo(BaseModel):
    remaining: int | None = None
    limit: int | None = None
    isDaily: bool = False
    dailyUsageCount: int = 0
    totalUsageCount: int = 0


class Badge(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    earnedAt: str | None = None


class GamificationInfo(BaseModel):
    currentStreak: int = 0
    longestStreak: int = 0
    totalAnalyses: int = 0
    newBadges: list[Badge] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    id: str
    overallScore: int = Field(ge=0, le=100)
    plagiarismScore: int = Field(ge=0, le=100)
    aiScore: int = Field(ge=0, le=100)
    aiReason: str
    language: str
    highlights: list[Highlight]
    matches: list[SourceMatch]
    usage: UsageInfo = Field(default_factory=UsageInfo)
    gamification: GamificationInfo = Field(default_factory=GamificationInfo)
