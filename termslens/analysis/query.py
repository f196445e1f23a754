from __future__ import annotations

import logging
from typing import Optional

from termslens.analysis.prompts import build_query_prompt
from termslens.llm.client import ModelGateway
from termslens.observability.events import EventSink, LoggingEventSink

QUERY_FAILED_MESSAGE = "Error: Unable to process query due to rate limits. Please try again later."


class QueryService:
    """Free-form question answering over one document. Never raises."""

    def __init__(self, gateway: ModelGateway, events: Optional[EventSink] = None) -> None:
        self.gateway = gateway
        self.events = events or LoggingEventSink()

    async def query(self, document_text: str, question: str) -> str:
        try:
            return await self.gateway.complete(build_query_prompt(document_text, question))
        except Exception as exc:
            self.events.emit(
                "query.failed",
                level=logging.ERROR,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return QUERY_FAILED_MESSAGE
