from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from termslens.analysis.orchestrator import AnalysisOrchestrator
from termslens.analysis.query import QueryService
from termslens.llm.client import ModelGateway, build_generator
from termslens.llm.rate_gate import RateGate
from termslens.observability.events import LoggingEventSink
from termslens.settings.config import load_config


@dataclass
class AnalysisServices:
    """Process-wide services; analysis and query share one rate gate."""

    gate: RateGate
    orchestrator: AnalysisOrchestrator
    query_service: QueryService


def build_services() -> AnalysisServices:
    config = load_config()
    events = LoggingEventSink()
    gate = RateGate.from_config(config.rate_limit, events=events)
    gateway = ModelGateway(build_generator(config), gate, events)
    return AnalysisServices(
        gate=gate,
        orchestrator=AnalysisOrchestrator(gateway, events),
        query_service=QueryService(gateway, events),
    )


@lru_cache(maxsize=1)
def get_services() -> AnalysisServices:
    return build_services()
