"""Shared fakes: a manual clock and a scripted text generator."""

from __future__ import annotations

import asyncio
from typing import Callable, Union

import pytest

from termslens.llm.client import ModelGateway
from termslens.llm.rate_gate import RateGate
from termslens.observability.events import RecordingEventSink


class FakeClock:
    """Clock whose sleep advances time instantly and records each wait."""

    def __init__(self, start: float = 1000.0) -> None:
        self.current = start
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self.current

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += seconds
        await asyncio.sleep(0)


Reply = Union[str, BaseException, Callable[[str], str]]


class ScriptedGenerator:
    """Returns queued replies in order; exceptions in the queue are raised."""

    def __init__(self, replies: list[Reply] | None = None) -> None:
        self.replies = list(replies or [])
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.replies:
            raise AssertionError("ScriptedGenerator ran out of replies")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            return reply(prompt)
        return reply


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def events() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture()
def gate(clock, events) -> RateGate:
    return RateGate(clock=clock, events=events)


def make_gateway(replies, clock=None, events=None, **gate_kwargs):
    clock = clock or FakeClock()
    events = events or RecordingEventSink()
    generator = ScriptedGenerator(replies)
    gate = RateGate(clock=clock, events=events, **gate_kwargs)
    return ModelGateway(generator, gate, events), generator
