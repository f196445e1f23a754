from __future__ import annotations

import json
import logging
import os
from typing import Any, Optional, Protocol

import anthropic

from termslens.analysis.errors import ThrottledError, TransportError
from termslens.analysis.models import SectionKind
from termslens.analysis.prompts import (
    DOCUMENT_MARKER,
    build_risks_prompt,
    build_section_prompt,
    build_summary_prompt,
)
from termslens.llm.rate_gate import RateGate
from termslens.observability.events import EventSink, LoggingEventSink
from termslens.settings.config import AnalysisConfig, ModelConfig

logger = logging.getLogger(__name__)


def _get_mode() -> str:
    return os.environ.get("ANALYSIS_MODE", "mock")


def _get_model(config: ModelConfig) -> str:
    return os.environ.get("CLAUDE_MODEL", config.model)


class TextGenerator(Protocol):
    """Opaque text-generation endpoint: prompt in, unstructured text out."""

    async def generate(self, prompt: str) -> str: ...


# ---------------------------------------------------------------------------
# Mock implementation
# ---------------------------------------------------------------------------

MOCK_REPLIES: dict[str, Any] = {
    "summary": {
        "summary": (
            "These terms govern use of the service, describe how account data is "
            "collected and shared, and limit the provider's liability."
        ),
    },
    SectionKind.PRIVACY: {
        "title": "Privacy Policy",
        "content": "The service collects account and usage data and retains it while the account is active.",
    },
    SectionKind.DATA_SHARING: {
        "title": "Data Sharing",
        "content": "Data may be shared with service providers and affiliates under confidentiality terms.",
    },
    SectionKind.USER_RESPONSIBILITIES: {
        "title": "User Responsibilities",
        "content": "Users must keep credentials secure and comply with the acceptable use policy.",
    },
    "risks": {
        "risks": [
            {"severity": "high", "description": "Users indemnify the provider against third-party claims."},
            {"severity": "medium", "description": "Accounts may be terminated without prior notice."},
        ],
    },
}

MOCK_ANSWER = "The document does not address this question directly."


def _instructions(prompt: str) -> str:
    return prompt.partition(DOCUMENT_MARKER)[0]


def _mock_reply_table() -> dict[str, str]:
    table = {
        _instructions(build_summary_prompt("")): json.dumps(MOCK_REPLIES["summary"]),
        _instructions(build_risks_prompt("")): json.dumps(MOCK_REPLIES["risks"]),
    }
    for kind in (SectionKind.PRIVACY, SectionKind.DATA_SHARING, SectionKind.USER_RESPONSIBILITIES):
        table[_instructions(build_section_prompt(kind, ""))] = (
            "Here is the analysis:\n" + json.dumps(MOCK_REPLIES[kind])
        )
    return table


class MockGenerator:
    """Deterministic replies chosen by which analysis prompt was sent.

    Only the instruction text before DOCUMENT_MARKER is compared, so the
    document or question never changes the reply. Anything that is not one
    of the analysis prompts gets MOCK_ANSWER.
    """

    model = "mock"

    def __init__(self) -> None:
        self._replies = _mock_reply_table()

    async def generate(self, prompt: str) -> str:
        return self._replies.get(_instructions(prompt), MOCK_ANSWER)


# ---------------------------------------------------------------------------
# Live implementation
# ---------------------------------------------------------------------------


class AnthropicGenerator:
    """Claude Messages API behind the TextGenerator protocol."""

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 1024,
        temperature: float = 0.0,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client = None

    @property
    def client(self):
        if self._client is None:
            # SDK retries are off; RateGate owns the throttle policy.
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key, max_retries=0)
        return self._client

    async def generate(self, prompt: str) -> str:
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            messages=[{"role": "user", "content": prompt}],
        )
        blocks = getattr(response, "content", None) or []
        if not blocks:
            return ""
        return getattr(blocks[0], "text", "") or ""


def build_generator(config: Optional[AnalysisConfig] = None) -> TextGenerator:
    """Pick mock or live generation based on the ANALYSIS_MODE env var."""
    config = config or AnalysisConfig()
    if _get_mode() != "live":
        return MockGenerator()

    api_key = os.environ.get("ANTHROPIC_API_KEY")
    if not api_key:
        raise RuntimeError("ANTHROPIC_API_KEY environment variable is required for live mode")
    return AnthropicGenerator(
        api_key=api_key,
        model=_get_model(config.model),
        max_tokens=config.model.max_tokens,
        temperature=config.model.temperature,
    )


# ---------------------------------------------------------------------------
# Gateway
# ---------------------------------------------------------------------------


def is_throttle_error(exc: BaseException) -> bool:
    """True when the failure carries a too-many-requests signal."""
    if getattr(exc, "status_code", None) == 429:
        return True
    message = str(exc).lower()
    return "429" in message or "rate limit" in message


class ModelGateway:
    """Every outbound model call goes through here, and so through the gate."""

    def __init__(
        self,
        generator: TextGenerator,
        gate: RateGate,
        events: Optional[EventSink] = None,
    ) -> None:
        self.generator = generator
        self.gate = gate
        self.events = events or LoggingEventSink()

    async def _invoke(self, prompt: str) -> str:
        try:
            text = await self.generator.generate(prompt)
        except TransportError:
            raise
        except Exception as exc:
            if is_throttle_error(exc):
                raise ThrottledError(str(exc)) from exc
            logger.error("Model call failed: %s: %s", type(exc).__name__, exc)
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc
        self.events.emit("model.response", level=logging.DEBUG, chars=len(text or ""))
        return text

    async def complete(self, prompt: str) -> str:
        return await self.gate.call(lambda: self._invoke(prompt))
