"""Canonical analysis, simulation, notification, and vault models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Generic, Literal, TypeVar

T = TypeVar("T")

DetectedLanguage = Literal["en", "ru", "zh"]
Intent = Literal["content_generation", "explanation", "translation", "general_query"]
SimulationMode = Literal["live", "dry", "healing", "preview"]
PreviewOutcome = Literal["success", "failure"]
EventStatus = Literal["success", "failure", "retrying", "simulated", "previewed"]
ToastType = Literal["success", "error", "info"]

SIMULATION_MODES: tuple[SimulationMode, ...] = ("live", "dry", "healing", "preview")
PREVIEW_OUTCOMES: tuple[PreviewOutcome, ...] = ("success", "failure")
TOAST_TYPES: tuple[ToastType, ...] = ("success", "error", "info")


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class PromptAnalysis:
    """Immutable snapshot of one raw prompt and every signal derived from it."""

    original: str
    cleaned: str
    detected_language: DetectedLanguage
    intent: Intent
    missing_pieces: tuple[str, ...]
    clarity_score: int
    vague_words: tuple[str, ...]
    word_count: int
    has_vague_terms: bool
    has_actionable_verbs: bool
    is_specific: bool
    is_concise: int
    recommendations: tuple[str, ...]


@dataclass(frozen=True)
class EnhancedPrompt:
    """Section-formatted meta prompt plus the reasoning trace that built it."""

    meta_prompt: str
    reasoning: tuple[str, ...] = ()

    def to_payload(self) -> dict[str, object]:
        return {"metaPrompt": self.meta_prompt, "reasoning": list(self.reasoning)}


@dataclass(frozen=True)
class StubData(Generic[T]):
    """Canned preview outcome: one success value and one failure error."""

    success: T
    failure: Exception

    def __repr__(self) -> str:
        return f"StubData(success={self.success!r}, failure={str(self.failure)!r})"


@dataclass(frozen=True)
class SimulatedEvent:
    """Append-only log record for one simulate() attempt."""

    id: int
    label: str
    mode: SimulationMode
    status: EventStatus
    operation: str
    attempts: int
    timestamp: str = field(default_factory=_utc_now_iso)
    result: Any = None
    error: str | None = None
    stub: StubData[Any] | None = None


@dataclass(frozen=True)
class ToastMessage:
    """Ephemeral user notification."""

    id: int
    type: ToastType
    title: str
    message: str


@dataclass(frozen=True)
class VaultEntry:
    """One saved raw prompt with its enhancement."""

    ts: int
    raw: str
    meta: EnhancedPrompt

    def to_payload(self) -> dict[str, object]:
        return {"ts": self.ts, "raw": self.raw, "meta": self.meta.to_payload()}


@dataclass(frozen=True)
class PromptQualityBreakdown:
    """Five-trait quality estimate for a prompt, each in [0, 100]."""

    clarity: float
    depth: float
    empathy: float
    creativity: float
    structure: float
