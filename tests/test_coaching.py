"""Prompt coaching heuristics tests."""

from __future__ import annotations

import pytest

from echomind_workbench.coaching import (
    PERSONA_TIP,
    PURPOSE_TIP,
    SHORT_PROMPT_TIP,
    STANDING_TIPS,
    TONE_TIP,
    analyze_quality,
    apply_enhancer_pipeline,
    cognition_level,
    cognitive_tips,
    refine_prompt,
)


def test_cognitive_tips_empty_for_blank_prompt() -> None:
    assert cognitive_tips("   ") == []


def test_cognitive_tips_for_bare_prompt() -> None:
    assert cognitive_tips("Write a poem") == [
        PURPOSE_TIP,
        PERSONA_TIP,
        SHORT_PROMPT_TIP,
        TONE_TIP,
        *STANDING_TIPS,
    ]


def test_cognitive_tips_skip_covered_concerns() -> None:
    prompt = "Assume the role of an editor; my goal is a warm tone for a long wedding speech draft."

    assert cognitive_tips(prompt) == list(STANDING_TIPS)


@pytest.mark.parametrize(
    ("prompt", "expected"),
    [
        ("hello there", "Reactive"),
        ("What is this?", "Curious"),
        ("Optimize the process", "Strategic"),
        ("Reflect on bias", "Meta-Cognitive"),
        ("Set a goal with human impact", "Meta-Cognitive"),
        ("Reflect on the goal, human impact and legacy system", "Divine"),
    ],
)
def test_cognition_level(prompt: str, expected: str) -> None:
    assert cognition_level(prompt) == expected


def test_analyze_quality_scores_present_and_absent_traits() -> None:
    quality = analyze_quality("Explain the system in numbered sections")

    assert quality.clarity == pytest.approx(53.9)
    assert quality.depth == pytest.approx(63.9)
    assert quality.empathy == 25.0
    assert quality.creativity == 35.0
    assert quality.structure == pytest.approx(63.9)


def test_analyze_quality_caps_at_one_hundred() -> None:
    quality = analyze_quality("explain " * 200)

    assert quality.clarity == 100.0


def test_refine_prompt_appends_focus_instruction() -> None:
    assert refine_prompt("  Draft a plan ", "clarity") == (
        "Draft a plan Clarify the goal and reduce ambiguity. Define terms clearly."
    )


def test_refine_prompt_rejects_unknown_focus() -> None:
    with pytest.raises(ValueError, match="Unsupported refinement focus"):
        refine_prompt("Draft", "speed")  # type: ignore[arg-type]


def test_enhancer_pipeline_injects_role_and_purpose() -> None:
    enhanced = apply_enhancer_pipeline("  Help me plan a trip ")

    assert enhanced.startswith("Assume the role of a divine, emotionally intelligent")
    assert "Help me plan a trip Make sure to clarify the user's intent" in enhanced
    assert enhanced.endswith("how they can apply it independently.")


def test_enhancer_pipeline_respects_existing_role_and_goal() -> None:
    prompt = "Assume the role of a coach. My goal is fitness."

    enhanced = apply_enhancer_pipeline(prompt)

    assert enhanced.startswith(prompt + " Present your response using structured formatting")
    assert "clarify the user's intent" not in enhanced


def test_cognitive_tips_keep_original_wording() -> None:
    tips = cognitive_tips("tell me about tone")

    assert tips[0] == (
        "Consider explaining the purpose behind your question—what are you trying to create, "
        "solve, or transform?"
    )
    assert TONE_TIP not in tips
    assert "You haven’t specified tone—consider if" in TONE_TIP
