"""Workbench flow tests: analysis, enhancement, vault, rewrite, launch, users."""

from __future__ import annotations

import asyncio

import pytest

import echomind_workbench.workbench as workbench_module
from echomind_workbench.config import AppConfig
from echomind_workbench.llm_client import LLMResponse
from echomind_workbench.persistence import LAST_USER_KEY, KeyValueStore, load_vault
from echomind_workbench.simulation import UNKNOWN_ERROR_MESSAGE, SimulationRunner
from echomind_workbench.workbench import PromptWorkbench, suggest_completion


async def _no_sleep(seconds: float) -> None:
    return None


def _workbench(tmp_path, mode: str = "live", **config_overrides) -> PromptWorkbench:
    config = AppConfig(store_path=tmp_path / "storage.json", **config_overrides)
    runner = SimulationRunner(mode=mode, sleep=_no_sleep)  # type: ignore[arg-type]
    return PromptWorkbench(runner, KeyValueStore(config.store_path), config)


def _toast_titles(workbench: PromptWorkbench) -> list[str]:
    return [toast.title for toast in workbench.runner.toasts.active()]


def test_update_input_analyzes_and_clears_for_blank(tmp_path) -> None:
    workbench = _workbench(tmp_path)

    analysis = workbench.update_input("Translate this text to French.")
    assert analysis is not None
    assert analysis.intent == "translation"

    assert workbench.update_input("   ") is None
    assert workbench.analysis is None
    assert workbench.suggestion == ""


def test_suggest_completion_targets_trailing_filler() -> None:
    assert suggest_completion("Tell me about stuff") == "Tell me about specify the stuff"
    assert suggest_completion("Write something nice") == ""
    assert suggest_completion("No filler here") == ""


def test_accept_suggestion_replaces_raw(tmp_path) -> None:
    workbench = _workbench(tmp_path)
    workbench.update_input("Describe the thing")

    assert workbench.accept_suggestion() is True
    assert workbench.raw == "Describe the specify the thing"
    assert workbench.suggestion == ""
    assert workbench.accept_suggestion() is False


def test_enhance_without_analysis_does_nothing(tmp_path) -> None:
    workbench = _workbench(tmp_path)

    assert asyncio.run(workbench.enhance()) is None
    assert workbench.runner.events == []


def test_enhance_in_live_mode_saves_to_vault(tmp_path) -> None:
    workbench = _workbench(tmp_path, mode="live")
    workbench.update_input("Translate this text to French.")

    result = asyncio.run(workbench.enhance())

    assert result is not None
    assert result.meta_prompt.startswith("# Task\nTRANSLATION")
    assert workbench.enhanced == result
    assert workbench.runner.events[0].status == "success"
    stored = load_vault(workbench.store)
    assert len(stored) == 1
    assert stored[0].raw == "Translate this text to French."
    assert stored[0].meta == result
    assert "Enhanced" in _toast_titles(workbench)


def test_enhance_in_dry_mode_saves_nothing(tmp_path) -> None:
    workbench = _workbench(tmp_path, mode="dry")
    workbench.update_input("Translate this text to French.")

    assert asyncio.run(workbench.enhance()) is None
    assert workbench.vault == []
    assert load_vault(workbench.store) == []
    assert workbench.runner.events[0].status == "simulated"


def test_enhance_in_preview_mode_saves_stub(tmp_path) -> None:
    workbench = _workbench(tmp_path, mode="preview")
    workbench.update_input("Translate this text to French.")

    result = asyncio.run(workbench.enhance())

    assert result is not None
    assert result.meta_prompt == "stub"
    assert workbench.vault[0].meta.meta_prompt == "stub"


def test_enhance_preview_failure_propagates(tmp_path) -> None:
    workbench = _workbench(tmp_path, mode="preview")
    workbench.runner.set_preview_outcome("failure")
    workbench.update_input("Translate this text to French.")

    with pytest.raises(RuntimeError, match="fail"):
        asyncio.run(workbench.enhance())
    assert workbench.vault == []


def test_enhance_posts_entry_when_endpoint_configured(monkeypatch, tmp_path) -> None:
    posted: list[tuple[str, str]] = []

    async def fake_post_vault_entry(entry, *, url, client=None, timeout=10.0):
        posted.append((entry.raw, url))
        return False

    monkeypatch.setattr(workbench_module, "post_vault_entry", fake_post_vault_entry)
    workbench = _workbench(tmp_path, vault_endpoint_url="https://example.test/api/vault")
    workbench.update_input("Write a story.")

    assert asyncio.run(workbench.enhance()) is not None
    assert posted == [("Write a story.", "https://example.test/api/vault")]
    assert len(workbench.vault) == 1


def test_vault_is_loaded_and_capped_across_sessions(tmp_path) -> None:
    first = _workbench(tmp_path)
    first.update_input("Write a story.")
    for _ in range(3):
        asyncio.run(first.enhance())

    second = _workbench(tmp_path)

    assert len(second.vault) == 3


def test_rewrite_without_backends_reports_failure(tmp_path) -> None:
    workbench = _workbench(tmp_path)
    workbench.update_input("make poem")

    assert asyncio.run(workbench.rewrite()) is None
    assert workbench.raw == "make poem"
    assert _toast_titles(workbench) == ["GPT-Rewrite", "GPT-Rewrite Failed"]


def test_rewrite_uses_endpoint_when_configured(monkeypatch, tmp_path) -> None:
    async def fake_request_rewrite(prompt, *, url, client=None, timeout=10.0):
        assert url == "https://example.test/api/rewriter"
        return f"Please {prompt} about autumn for children."

    monkeypatch.setattr(workbench_module, "request_rewrite", fake_request_rewrite)
    workbench = _workbench(tmp_path, rewriter_endpoint_url="https://example.test/api/rewriter")
    workbench.update_input("write a poem")

    rewritten = asyncio.run(workbench.rewrite())

    assert rewritten == "Please write a poem about autumn for children."
    assert workbench.raw == rewritten
    assert workbench.analysis is not None
    assert workbench.analysis.cleaned == rewritten
    assert _toast_titles(workbench)[-1] == "GPT-Rewrite Complete"


def test_rewrite_falls_back_to_llm_client(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(
        workbench_module.LLMClient,
        "rewrite_prompt",
        lambda self, prompt: LLMResponse(text=f"{prompt}!", model_used="test-model"),
    )
    workbench = _workbench(tmp_path, openai_api_key="test-key")
    workbench.update_input("write a poem")

    assert asyncio.run(workbench.rewrite()) == "write a poem!"


def test_rewrite_ignores_blank_input(tmp_path) -> None:
    workbench = _workbench(tmp_path)

    assert asyncio.run(workbench.rewrite()) is None
    assert _toast_titles(workbench) == []


def test_launch_url_requires_enhanced_prompt(tmp_path) -> None:
    workbench = _workbench(tmp_path, launch_base_url="https://chat.example/?prompt=")
    assert workbench.launch_url() is None

    workbench.update_input("Write a story.")
    asyncio.run(workbench.enhance())

    url = workbench.launch_url()
    assert url is not None
    assert url.startswith("https://chat.example/?prompt=%23%20Task%0ACONTENT%20GENERATION")


def test_create_user_in_live_mode_records_last_user(tmp_path) -> None:
    workbench = _workbench(tmp_path, mode="live")

    result = asyncio.run(workbench.create_user("Ada Lovelace"))

    assert result is not None
    assert result["success"] is True
    assert workbench.store.get(LAST_USER_KEY) == "Ada Lovelace"
    assert workbench.runner.events[0].label == "Create User: Ada Lovelace"
    toast = workbench.runner.toasts.active()[-1]
    assert toast.message == "User creation for Ada Lovelace completed via live mode."


def test_create_user_in_dry_mode_skips_storage(tmp_path) -> None:
    workbench = _workbench(tmp_path, mode="dry")

    assert asyncio.run(workbench.create_user("Ada")) is None
    assert workbench.store.get(LAST_USER_KEY) is None


def test_create_user_preview_failure_toasts_and_returns_none(tmp_path) -> None:
    workbench = _workbench(tmp_path, mode="preview")
    workbench.runner.set_preview_outcome("failure")

    assert asyncio.run(workbench.create_user("Ada")) is None

    toast = workbench.runner.toasts.active()[-1]
    assert (toast.type, toast.title, toast.message) == ("error", "Operation Failed", "Invalid user name")


def test_from_config_wires_runner_and_store(tmp_path) -> None:
    config = AppConfig(
        store_path=tmp_path / "state" / "storage.json",
        simulation_mode="healing",
        retry_base_delay=0.5,
        toast_lifetime=2.0,
    )

    workbench = PromptWorkbench.from_config(config)

    assert workbench.runner.mode == "healing"
    assert workbench.runner.base_delay_seconds == 0.5
    assert workbench.runner.toasts.lifetime_seconds == 2.0
    assert workbench.store.path == tmp_path / "state" / "storage.json"


def test_create_user_failure_without_message_uses_fallback_text(monkeypatch, tmp_path) -> None:
    workbench = _workbench(tmp_path, mode="live")

    async def failing_simulate(label, operation, *, retries=0, stub=None):
        raise RuntimeError()

    monkeypatch.setattr(workbench.runner, "simulate", failing_simulate)

    assert asyncio.run(workbench.create_user("Ada")) is None
    toast = workbench.runner.toasts.active()[-1]
    assert toast.title == "Operation Failed"
    assert toast.message == UNKNOWN_ERROR_MESSAGE


def test_suggest_completion_uses_ascii_word_boundaries() -> None:
    assert suggest_completion("Describe éstuff") == "Describe éspecify the stuff"


def test_enhance_saves_raw_text_captured_at_start(monkeypatch, tmp_path) -> None:
    workbench = _workbench(tmp_path, mode="live")
    workbench.update_input("Translate this text to French.")
    original_simulate = workbench.runner.simulate

    async def simulate_with_concurrent_edit(label, operation, *, retries=0, stub=None):
        workbench.update_input("A completely different prompt.")
        return await original_simulate(label, operation, retries=retries, stub=stub)

    monkeypatch.setattr(workbench.runner, "simulate", simulate_with_concurrent_edit)

    result = asyncio.run(workbench.enhance())

    assert result is not None
    assert result.meta_prompt.startswith("# Task\nTRANSLATION")
    assert workbench.vault[0].raw == "Translate this text to French."
