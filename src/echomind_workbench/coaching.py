"""Heuristic prompt coaching: tips, cognition level, quality traits, and refinement."""

from __future__ import annotations

import re
from typing import Callable, Literal

from echomind_workbench.models import PromptQualityBreakdown

CognitionLevel = Literal["Reactive", "Curious", "Strategic", "Meta-Cognitive", "Divine"]
RefinementFocus = Literal["clarity", "depth", "empathy", "creativity", "structure"]

REFINEMENT_FOCUSES: tuple[RefinementFocus, ...] = ("clarity", "depth", "empathy", "creativity", "structure")

SHORT_PROMPT_CHARS = 40

_PURPOSE_PATTERN = re.compile(r"why|how|purpose|goal|intended", re.IGNORECASE)
_PERSONA_PATTERN = re.compile(r"assume|pretend|role|perspective", re.IGNORECASE)
_TONE_PATTERN = re.compile(r"emotional|empathetic|tone|voice", re.IGNORECASE)

PURPOSE_TIP = (
    "Consider explaining the purpose behind your question\u2014what are you trying to create, "
    "solve, or transform?"
)
PERSONA_TIP = "Try asking the AI to take on a specific persona or perspective to widen the depth of insight."
SHORT_PROMPT_TIP = "Your prompt is short. What assumptions are being left unsaid that the AI may miss?"
TONE_TIP = (
    "You haven\u2019t specified tone\u2014consider if you want confidence, warmth, humility, "
    "or authority in the response."
)
STANDING_TIPS = (
    "What outcome would surprise you? Ask the AI to help you think beyond your current framing.",
    "If this question could be automated forever, what would that system need to know or handle?",
)

_REFLECTIVE_PATTERN = re.compile(r"reflect|awareness|bias|assumption|meta|how am i", re.IGNORECASE)
_STRATEGIC_PATTERN = re.compile(r"goal|optimize|process|framework|structure", re.IGNORECASE)
_EMPATHIC_PATTERN = re.compile(r"emotion|ethic|integrity|impact|human", re.IGNORECASE)
_CREATIVE_PATTERN = re.compile(r"system|transcend|transformation|legacy|divine", re.IGNORECASE)
_CURIOUS_PATTERN = re.compile(r"why|how|what|can", re.IGNORECASE)

# (keyword family, score when present, score when absent)
_QUALITY_RULES: dict[str, tuple[re.Pattern[str], float, float]] = {
    "clarity": (
        re.compile(r"who|what|when|where|why|how|define|explain|step-by-step|clearly"),
        50.0,
        40.0,
    ),
    "depth": (re.compile(r"system|principle|philosophy|impact|consequence|unseen"), 60.0, 30.0),
    "empathy": (re.compile(r"emotion|empathy|tone|inclusive|compassion|human"), 70.0, 25.0),
    "creativity": (re.compile(r"metaphor|story|imagine|vision|invent|transform|alchemy"), 65.0, 35.0),
    "structure": (re.compile(r"format|sections|bullets|numbered|framework"), 60.0, 30.0),
}

_REFINEMENT_INJECTIONS: dict[RefinementFocus, str] = {
    "clarity": " Clarify the goal and reduce ambiguity. Define terms clearly.",
    "depth": " Go deeper into principles, unseen layers, and long-term implications.",
    "empathy": " Adjust tone for compassion, respect, and human emotional context.",
    "creativity": " Add imaginative elements like metaphor, story, or analogy.",
    "structure": " Organize the response into headings, bullets, or frameworks.",
}


def cognitive_tips(prompt: str) -> list[str]:
    """Return coaching questions for a prompt; blank prompts get none."""
    if not prompt.strip():
        return []

    tips: list[str] = []
    if not _PURPOSE_PATTERN.search(prompt):
        tips.append(PURPOSE_TIP)
    if not _PERSONA_PATTERN.search(prompt):
        tips.append(PERSONA_TIP)
    if len(prompt) < SHORT_PROMPT_CHARS:
        tips.append(SHORT_PROMPT_TIP)
    if not _TONE_PATTERN.search(prompt):
        tips.append(TONE_TIP)
    tips.extend(STANDING_TIPS)
    return tips


def cognition_level(prompt: str) -> CognitionLevel:
    text = prompt.strip().lower()
    reflective = bool(_REFLECTIVE_PATTERN.search(text))
    strategic = bool(_STRATEGIC_PATTERN.search(text))
    empathic = bool(_EMPATHIC_PATTERN.search(text))
    creative = bool(_CREATIVE_PATTERN.search(text))

    if reflective and strategic and empathic and creative:
        return "Divine"
    if reflective or (strategic and empathic):
        return "Meta-Cognitive"
    if strategic:
        return "Strategic"
    if _CURIOUS_PATTERN.search(text):
        return "Curious"
    return "Reactive"


def analyze_quality(prompt: str) -> PromptQualityBreakdown:
    """Estimate five quality traits from keyword families and prompt length."""
    lowered = prompt.lower()
    length_bonus = len(prompt) * 0.1
    scores: dict[str, float] = {}
    for trait, (pattern, present_base, absent_score) in _QUALITY_RULES.items():
        if pattern.search(lowered):
            scores[trait] = min(100.0, present_base + length_bonus)
        else:
            scores[trait] = absent_score
    return PromptQualityBreakdown(**scores)


def refine_prompt(original: str, focus: RefinementFocus) -> str:
    """Append the instruction that pushes a prompt toward one quality trait."""
    try:
        injection = _REFINEMENT_INJECTIONS[focus]
    except KeyError as exc:
        raise ValueError(f"Unsupported refinement focus: {focus}") from exc
    return f"{original.strip()}{injection}"


def _inject_context(prompt: str) -> str:
    if not re.search(r"assume the role", prompt, re.IGNORECASE):
        return (
            "Assume the role of a divine, emotionally intelligent, and omniscient AI assistant. "
            f"{prompt}"
        )
    return prompt


def _clarify_purpose(prompt: str) -> str:
    if not re.search(r"purpose|intent|goal", prompt, re.IGNORECASE):
        return f"{prompt} Make sure to clarify the user's intent and expand it into a clear mission."
    return prompt


def _append(sentence: str) -> Callable[[str], str]:
    def rule(prompt: str) -> str:
        return f"{prompt} {sentence}"

    return rule


ENHANCER_PIPELINE: tuple[Callable[[str], str], ...] = (
    _inject_context,
    _clarify_purpose,
    _append(
        "Present your response using structured formatting: titles, bullet points, numbered steps, and summaries."
    ),
    _append("Tailor the tone to be confident, encouraging, and human-centered with emotional intelligence."),
    _append("Identify and explain how to handle potential edge cases, risks, or breakdown scenarios."),
    _append("Briefly explain your reasoning process so the user can learn how decisions were made."),
    _append("Anticipate future needs or extensions the user may not realize and suggest them proactively."),
    _append(
        "Reinforce user understanding by summarizing what they should learn and how they can apply it independently."
    ),
)


def apply_enhancer_pipeline(raw: str) -> str:
    """Run the trimmed prompt through every enhancer rule in order."""
    prompt = raw.strip()
    for rule in ENHANCER_PIPELINE:
        prompt = rule(prompt)
    return prompt
