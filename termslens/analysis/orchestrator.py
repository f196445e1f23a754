from __future__ import annotations

import logging
from typing import Optional

from termslens.analysis.analyzers import (
    RISK_FALLBACK_DESCRIPTION,
    SUMMARY_FALLBACK,
    RiskAnalyzer,
    SectionAnalyzer,
    SummaryAnalyzer,
    fallback_section,
)
from termslens.analysis.errors import EmptyInputError
from termslens.analysis.models import (
    FAILED_TAGS,
    AnalysisResult,
    Risk,
    Section,
    SectionKind,
    Severity,
)
from termslens.llm.client import ModelGateway
from termslens.observability.events import EventSink, LoggingEventSink


def degraded_result(exc: BaseException) -> AnalysisResult:
    """Well-formed result returned when an unexpected error escapes the pipeline."""
    return AnalysisResult(
        summary=f"Analysis failed: {exc}",
        sections=[
            Section(
                title=SectionKind.ERROR,
                content="Failed to analyze document. Please try again later.",
            )
        ],
        risks=[
            Risk(
                severity=Severity.HIGH,
                description="Analysis incomplete due to technical issues.",
                tags=list(FAILED_TAGS),
            )
        ],
    )


def _count_fallbacks(result: AnalysisResult) -> int:
    count = int(result.summary == SUMMARY_FALLBACK)
    count += sum(1 for s in result.sections if s == fallback_section(s.title))
    count += sum(1 for r in result.risks if r.description == RISK_FALLBACK_DESCRIPTION)
    return count


class AnalysisOrchestrator:
    """Runs the five analysis steps back-to-back and assembles the result.

    Steps run strictly in order (summary, privacy, data sharing, user
    responsibilities, risks); spacing between them comes from the gate behind
    ``gateway``. Only empty input raises; every other failure produces a
    well-formed AnalysisResult.
    """

    def __init__(self, gateway: ModelGateway, events: Optional[EventSink] = None) -> None:
        self.events = events or LoggingEventSink()
        self.summary = SummaryAnalyzer(gateway, self.events)
        self.privacy = SectionAnalyzer(SectionKind.PRIVACY, gateway, self.events)
        self.sharing = SectionAnalyzer(SectionKind.DATA_SHARING, gateway, self.events)
        self.responsibilities = SectionAnalyzer(
            SectionKind.USER_RESPONSIBILITIES, gateway, self.events
        )
        self.risks = RiskAnalyzer(gateway, self.events)

    async def _run(self, document_text: str) -> AnalysisResult:
        self.events.emit("analysis.step", step=self.summary.step)
        summary = await self.summary.analyze(document_text)

        sections: list[Section] = []
        for analyzer in (self.privacy, self.sharing, self.responsibilities):
            self.events.emit("analysis.step", step=analyzer.step)
            sections.append(await analyzer.analyze(document_text))

        self.events.emit("analysis.step", step=self.risks.step)
        risks = await self.risks.analyze(document_text)

        return AnalysisResult(summary=summary, sections=sections, risks=risks)

    async def analyze_document(self, document_text: str) -> AnalysisResult:
        if not document_text or not document_text.strip():
            raise EmptyInputError("Empty content provided")

        self.events.emit("analysis.started", document_chars=len(document_text))
        try:
            result = await self._run(document_text)
        except Exception as exc:
            self.events.emit(
                "analysis.failed",
                level=logging.ERROR,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return degraded_result(exc)

        self.events.emit(
            "analysis.completed",
            risk_count=len(result.risks),
            fallbacks=_count_fallbacks(result),
        )
        return result
