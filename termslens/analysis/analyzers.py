from __future__ import annotations

import logging
from typing import Any, Optional

from termslens.analysis.errors import (
    ExtractionError,
    NoValidRisksError,
    ResponseValidationError,
    TransportError,
)
from termslens.analysis.extractor import extract_json_object
from termslens.analysis.models import (
    AI_IDENTIFIED_TAGS,
    FAILED_TAGS,
    Risk,
    Section,
    SectionKind,
    Severity,
)
from termslens.analysis.prompts import (
    build_risks_prompt,
    build_section_prompt,
    build_summary_prompt,
)
from termslens.llm.client import ModelGateway
from termslens.observability.events import EventSink, LoggingEventSink

# Failures an analyzer absorbs into its fallback. Anything else is a bug and
# is left for the orchestrator's safety net.
CONTAINED_ERRORS = (TransportError, ExtractionError, ResponseValidationError)

SUMMARY_FALLBACK = (
    "Unable to generate summary due to an error. "
    "Please try again or review the document manually."
)
SECTION_TOPICS: dict[SectionKind, str] = {
    SectionKind.PRIVACY: "privacy policy",
    SectionKind.DATA_SHARING: "data sharing",
    SectionKind.USER_RESPONSIBILITIES: "user responsibilities",
}
RISK_FALLBACK_DESCRIPTION = (
    "Unable to analyze risks due to an error. "
    "Please try again or review the document manually."
)
VALID_SEVERITIES = {s.value for s in Severity}


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def fallback_section(kind: SectionKind) -> Section:
    topic = SECTION_TOPICS.get(kind, kind.value.lower())
    return Section(
        title=kind,
        content=(
            f"Unable to analyze {topic} due to an error. "
            "Please try again or review the document manually."
        ),
    )


def fallback_risk() -> Risk:
    return Risk(
        severity=Severity.HIGH,
        description=RISK_FALLBACK_DESCRIPTION,
        tags=list(FAILED_TAGS),
    )


class SummaryAnalyzer:
    """Produces the short plain-language summary."""

    step = "summary"

    def __init__(self, gateway: ModelGateway, events: Optional[EventSink] = None) -> None:
        self.gateway = gateway
        self.events = events or LoggingEventSink()

    async def analyze(self, document_text: str) -> str:
        try:
            raw = await self.gateway.complete(build_summary_prompt(document_text))
            data = extract_json_object(raw)
            summary = data.get("summary")
            if not _non_empty_str(summary):
                raise ResponseValidationError("Invalid response structure - missing summary")
            return summary
        except CONTAINED_ERRORS as exc:
            self.events.emit(
                "analysis.summary_fallback",
                level=logging.WARNING,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return SUMMARY_FALLBACK


class SectionAnalyzer:
    """One titled section (privacy, data sharing or user responsibilities)."""

    def __init__(
        self,
        kind: SectionKind,
        gateway: ModelGateway,
        events: Optional[EventSink] = None,
    ) -> None:
        if kind not in SECTION_TOPICS:
            raise ValueError(f"Unsupported section kind: {kind}")
        self.kind = kind
        self.gateway = gateway
        self.events = events or LoggingEventSink()

    @property
    def step(self) -> str:
        return self.kind.value

    def parse(self, data: dict[str, Any]) -> Section:
        title = data.get("title")
        content = data.get("content")
        if not _non_empty_str(title) or not _non_empty_str(content):
            raise ResponseValidationError("Invalid response structure - missing title or content")
        # Title vocabulary is fixed; the model's spelling is not trusted.
        return Section(title=self.kind, content=content)

    async def analyze(self, document_text: str) -> Section:
        try:
            raw = await self.gateway.complete(build_section_prompt(self.kind, document_text))
            return self.parse(extract_json_object(raw))
        except CONTAINED_ERRORS as exc:
            self.events.emit(
                "analysis.section_fallback",
                level=logging.WARNING,
                section=self.kind.value,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return fallback_section(self.kind)


class RiskAnalyzer:
    """Risk list with per-item filtering; never returns an empty list."""

    step = "risks"

    def __init__(self, gateway: ModelGateway, events: Optional[EventSink] = None) -> None:
        self.gateway = gateway
        self.events = events or LoggingEventSink()

    def _is_valid(self, item: Any) -> bool:
        if not isinstance(item, dict):
            return False
        severity = item.get("severity")
        return (
            isinstance(severity, str)
            and severity.strip().lower() in VALID_SEVERITIES
            and _non_empty_str(item.get("description"))
        )

    def parse(self, data: dict[str, Any]) -> list[Risk]:
        items = data.get("risks")
        if not isinstance(items, list):
            raise ResponseValidationError("Invalid response structure - missing risks array")

        risks: list[Risk] = []
        for idx, item in enumerate(items):
            if not self._is_valid(item):
                self.events.emit("analysis.risk_rejected", level=logging.DEBUG, index=idx, item=repr(item)[:200])
                continue
            risks.append(
                Risk(
                    severity=Severity(item["severity"].strip().lower()),
                    description=item["description"],
                    tags=list(AI_IDENTIFIED_TAGS),
                )
            )

        if not risks:
            raise NoValidRisksError(f"No valid risks in response ({len(items)} rejected)")
        return risks

    async def analyze(self, document_text: str) -> list[Risk]:
        try:
            raw = await self.gateway.complete(build_risks_prompt(document_text))
            return self.parse(extract_json_object(raw))
        except CONTAINED_ERRORS as exc:
            self.events.emit(
                "analysis.risks_fallback",
                level=logging.WARNING,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return [fallback_risk()]
