from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class RateLimitConfig(BaseModel):
    """Spacing and throttle-retry settings for outbound model calls."""

    delay_between_requests_ms: int = Field(default=30_000, ge=0)
    requests_per_minute: int = Field(default=2, gt=0)  # informational only
    requests_per_day: int = Field(default=50, gt=0)  # counted, never enforced
    max_attempts: int = Field(default=2, ge=1)
    backoff_multiplier: float = Field(default=2.0, ge=0)
    jitter_ms: int = Field(default=0, ge=0)


class ModelConfig(BaseModel):
    """Generation parameters for the live model."""

    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = Field(default=1024, gt=0)
    temperature: float = Field(default=0.0, ge=0, le=1)


class AnalysisConfig(BaseModel):
    """Top-level config loaded from analysis.json."""

    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    model: ModelConfig = Field(default_factory=ModelConfig)


def _default_path() -> Path:
    env = os.environ.get("TERMSLENS_CONFIG")
    if env:
        return Path(env)
    return Path(__file__).resolve().parent.parent.parent / "config" / "analysis.json"


def load_config(path: Optional[str | Path] = None) -> AnalysisConfig:
    """Load analysis config from a JSON file. Falls back to built-in defaults."""
    path = _default_path() if path is None else Path(path)

    if not path.exists():
        return AnalysisConfig()

    with open(path) as f:
        raw = json.load(f)
    return AnalysisConfig(**raw)
