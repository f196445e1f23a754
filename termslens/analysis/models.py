from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Severity(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SectionKind(StrEnum):
    PRIVACY = "Privacy Policy"
    DATA_SHARING = "Data Sharing"
    USER_RESPONSIBILITIES = "User Responsibilities"
    ERROR = "Error"


AI_IDENTIFIED_TAGS = ("ai-identified",)
FAILED_TAGS = ("error", "analysis-failed")


class Section(BaseModel):
    """One labeled sub-analysis of the document."""

    title: SectionKind
    content: str = Field(min_length=1)

    model_config = ConfigDict(frozen=True)


class Risk(BaseModel):
    """One identified liability or obligation."""

    severity: Severity
    description: str = Field(min_length=1)
    tags: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))


class AnalysisResult(BaseModel):
    """Assembled output of one analyze_document call."""

    summary: str
    sections: list[Section] = Field(min_length=1)
    risks: list[Risk] = Field(min_length=1)

    model_config = ConfigDict(frozen=True)


class RateGateStatus(BaseModel):
    """Point-in-time view of the shared rate gate counters."""

    request_count: int
    requests_per_day: int
    delay_between_requests_ms: int
    daily_limit_exceeded: bool
