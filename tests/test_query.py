"""Unit tests for free-form document questions."""

import asyncio

from conftest import make_gateway
from termslens.analysis.errors import ThrottledError
from termslens.analysis.orchestrator import AnalysisOrchestrator
from termslens.analysis.query import QUERY_FAILED_MESSAGE, QueryService
from termslens.observability.events import RecordingEventSink

DOCUMENT = "Subscriptions renew automatically unless cancelled 24 hours before renewal."


class TestQueryService:
    def test_returns_raw_reply(self):
        gateway, generator = make_gateway(["Yes, {not json} and that's fine."])
        answer = asyncio.run(QueryService(gateway).query(DOCUMENT, "Does it auto-renew?"))
        assert answer == "Yes, {not json} and that's fine."
        assert "Does it auto-renew?" in generator.prompts[0]
        assert DOCUMENT in generator.prompts[0]

    def test_throttle_retry_then_answer(self):
        gateway, generator = make_gateway([ThrottledError("429"), "It renews monthly."])
        answer = asyncio.run(QueryService(gateway).query(DOCUMENT, "How often?"))
        assert answer == "It renews monthly."
        assert len(generator.prompts) == 2

    def test_failure_returns_sentinel(self):
        events = RecordingEventSink()
        gateway, _ = make_gateway([ThrottledError("429"), ThrottledError("429")], events=events)
        answer = asyncio.run(QueryService(gateway, events).query(DOCUMENT, "How often?"))
        assert answer == QUERY_FAILED_MESSAGE
        assert events.of("query.failed")[0].fields["error_type"] == "ThrottledError"

    def test_analysis_and_query_share_one_gate(self):
        gateway, generator = make_gateway(
            [
                '{"summary": "Auto-renewing subscription terms."}',
                '{"title": "Privacy Policy", "content": "Not covered."}',
                "It renews monthly.",
                '{"title": "Data Sharing", "content": "Not covered."}',
                '{"title": "User Responsibilities", "content": "Cancel in time."}',
                '{"risks": [{"severity": "low", "description": "Automatic renewal."}]}',
            ]
        )
        orchestrator = AnalysisOrchestrator(gateway, RecordingEventSink())
        service = QueryService(gateway, RecordingEventSink())

        async def run():
            analysis = asyncio.create_task(orchestrator.analyze_document(DOCUMENT))
            answer = asyncio.create_task(service.query(DOCUMENT, "How often?"))
            return await analysis, await answer

        result, answer = asyncio.run(run())

        assert answer == "It renews monthly."
        assert "How often?" in generator.prompts[2]
        assert result.summary == "Auto-renewing subscription terms."
        assert [s.content for s in result.sections] == ["Not covered.", "Not covered.", "Cancel in time."]
        assert gateway.gate.request_count == 6
        assert gateway.gate.clock.sleeps == [30.0] * 5
