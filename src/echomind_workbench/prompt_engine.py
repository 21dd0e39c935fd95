"""Rule-based prompt analysis and meta prompt synthesis.

Both entry points are pure: the same input always produces the same output,
and no input string is ever rejected.
"""

from __future__ import annotations

import re

from echomind_workbench.models import DetectedLanguage, EnhancedPrompt, Intent, PromptAnalysis

_CYRILLIC_PATTERN = re.compile("[\u0400-\u04FF]")
_CJK_PATTERN = re.compile("[\u4E00-\u9FFF]")

# Checked in order against the lower-cased text; first hit wins.
_INTENT_FAMILIES: tuple[tuple[Intent, re.Pattern[str]], ...] = (
    ("content_generation", re.compile(r"create|generate|write")),
    ("explanation", re.compile(r"summarize|explain|simplify")),
    ("translation", re.compile(r"translate")),
)

_WH_WORD_PATTERN = re.compile(r"\b(?:why|how|what|who|when|where)\b", re.IGNORECASE | re.ASCII)
_MODAL_PATTERN = re.compile(r"\b(?:should|could|would|can)\b", re.IGNORECASE | re.ASCII)
_PLEASE_PATTERN = re.compile(r"\bplease\b", re.IGNORECASE | re.ASCII)
_ENDING_PUNCTUATION_PATTERN = re.compile(r"[.!?]\Z")
_TONE_PATTERN = re.compile(r"\b(?:tone|style|format)\b", re.IGNORECASE | re.ASCII)
_AUDIENCE_PATTERN = re.compile(r"\b(?:target audience|reader|user)\b", re.IGNORECASE | re.ASCII)
_ACTIONABLE_VERB_PATTERN = re.compile(
    r"\b(?:create|generate|write|summarize|explain|translate)\b",
    re.IGNORECASE | re.ASCII,
)
_VAGUE_TERM_PATTERN = re.compile(r"\b(?:vague|general|unspecific)\b", re.IGNORECASE | re.ASCII)
_VAGUE_WORD_PATTERN = re.compile(r"\b(?:vague|general|unspecific)\b", re.ASCII)

MISSING_PUNCTUATION = "Add ending punctuation."
MISSING_TONE = "Specify tone/style/format."
MISSING_AUDIENCE = "Define target audience."
LOW_CLARITY_RECOMMENDATION = "Add more detail to raise clarity."

LENGTH_SCORE_CAP = 60
WH_WORD_BONUS = 15
MODAL_BONUS = 10
PLEASE_BONUS = 5
MISSING_PIECE_PENALTY = 5
LOW_CLARITY_THRESHOLD = 60
CONCISE_WORD_LIMIT = 20


def guess_language(text: str) -> DetectedLanguage:
    """Guess the script family of text; Latin, mixed, and empty input default to English."""
    if _CYRILLIC_PATTERN.search(text):
        return "ru"
    if _CJK_PATTERN.search(text):
        return "zh"
    return "en"


def classify_intent(text: str) -> Intent:
    lowered = text.lower()
    for intent, pattern in _INTENT_FAMILIES:
        if pattern.search(lowered):
            return intent
    return "general_query"


def score_clarity(text: str) -> int:
    """Score text length and question signals, capped at 100 before any penalty."""
    score = min(len(text), LENGTH_SCORE_CAP)
    if _WH_WORD_PATTERN.search(text):
        score += WH_WORD_BONUS
    if _MODAL_PATTERN.search(text):
        score += MODAL_BONUS
    if _PLEASE_PATTERN.search(text):
        score += PLEASE_BONUS
    return min(100, score)


def detect_missing(text: str) -> list[str]:
    missing: list[str] = []
    if not _ENDING_PUNCTUATION_PATTERN.search(text.strip()):
        missing.append(MISSING_PUNCTUATION)
    if not _TONE_PATTERN.search(text):
        missing.append(MISSING_TONE)
    if not _AUDIENCE_PATTERN.search(text):
        missing.append(MISSING_AUDIENCE)
    return missing


def analyze_prompt(raw: str) -> PromptAnalysis:
    """Analyze raw prompt text into a PromptAnalysis snapshot."""
    original = str(raw or "")
    cleaned = original.strip()
    missing_pieces = detect_missing(cleaned)
    word_count = len(cleaned.split())
    raw_score = score_clarity(cleaned) - len(missing_pieces) * MISSING_PIECE_PENALTY
    has_vague_terms = bool(_VAGUE_TERM_PATTERN.search(cleaned))

    recommendations: list[str] = []
    # Threshold is checked before flooring at 0.
    if raw_score < LOW_CLARITY_THRESHOLD:
        recommendations.append(LOW_CLARITY_RECOMMENDATION)
    recommendations.extend(missing_pieces)

    return PromptAnalysis(
        original=original,
        cleaned=cleaned,
        detected_language=guess_language(cleaned),
        intent=classify_intent(cleaned),
        missing_pieces=tuple(missing_pieces),
        clarity_score=max(0, raw_score),
        vague_words=tuple(_VAGUE_WORD_PATTERN.findall(cleaned)) if has_vague_terms else (),
        word_count=word_count,
        has_vague_terms=has_vague_terms,
        has_actionable_verbs=bool(_ACTIONABLE_VERB_PATTERN.search(cleaned)),
        is_specific=not has_vague_terms,
        is_concise=1 if word_count <= CONCISE_WORD_LIMIT else 0,
        recommendations=tuple(recommendations),
    )


def enhance_prompt(analysis: PromptAnalysis) -> EnhancedPrompt:
    """Render the meta prompt and reasoning trace for a prior analysis."""
    lines: list[str] = [
        "# Task",
        analysis.intent.replace("_", " ", 1).upper(),
        "",
        "# Original Prompt",
        analysis.cleaned,
        "",
    ]
    if analysis.missing_pieces:
        lines.append("# Clarifications Added")
        lines.extend(f"- {piece}" for piece in analysis.missing_pieces)
        lines.append("")
    lines.extend(
        [
            "# Output Format",
            "- Clear, structured answer",
            "- Use markdown where appropriate",
            "",
            "# Tone",
            "- Professional but approachable",
        ]
    )

    reasoning = [
        f"Detected language: {analysis.detected_language}",
        f"Intent classified as: {analysis.intent}",
        f"Clarity score: {analysis.clarity_score}",
    ]
    reasoning.extend(f"Recommendation: {item}" for item in analysis.recommendations)
    return EnhancedPrompt(meta_prompt="\n".join(lines), reasoning=tuple(reasoning))
