"""Workbench flow: live analysis, enhancement into the vault, rewrite, and launch."""

from __future__ import annotations

import asyncio
import logging
import re
import time

from echomind_workbench.config import AppConfig, get_config
from echomind_workbench.llm_client import LLMClient, LLMError
from echomind_workbench.models import EnhancedPrompt, PromptAnalysis, StubData, VaultEntry
from echomind_workbench.notifications import ToastQueue
from echomind_workbench.persistence import (
    LAST_USER_KEY,
    KeyValueStore,
    append_vault_entry,
    load_vault,
    save_vault,
)
from echomind_workbench.prompt_engine import analyze_prompt, enhance_prompt
from echomind_workbench.remote import RewriteError, build_launch_url, post_vault_entry, request_rewrite
from echomind_workbench.simulation import SimulationRunner, error_message

LOGGER = logging.getLogger("echomind_workbench.workbench")

_TRAILING_FILLER_PATTERN = re.compile(
    r"\b(?:kind of|sort of|a bit|thing|stuff|something)\b", re.IGNORECASE | re.ASCII
)

ENHANCE_STUB: StubData[EnhancedPrompt] = StubData(
    success=EnhancedPrompt(meta_prompt="stub", reasoning=()),
    failure=RuntimeError("fail"),
)
CREATE_USER_STUB: StubData[dict[str, object]] = StubData(
    success={"success": True, "userId": "usr_stub_123"},
    failure=ValueError("Invalid user name"),
)


def suggest_completion(text: str) -> str:
    """Offer a rewrite when the text ends on a vague filler phrase, else ''."""
    match = _TRAILING_FILLER_PATTERN.search(text)
    if match is None or not text.endswith(match.group(0)):
        return ""
    filler = match.group(0)
    return f"{text[: -len(filler)]}specify the {filler}"


class PromptWorkbench:
    """Caller-side state for one editing session."""

    def __init__(
        self,
        runner: SimulationRunner,
        store: KeyValueStore,
        config: AppConfig | None = None,
    ) -> None:
        self.runner = runner
        self.store = store
        self.config = config or AppConfig()
        self.raw = ""
        self.analysis: PromptAnalysis | None = None
        self.enhanced: EnhancedPrompt | None = None
        self.suggestion = ""
        self.vault: list[VaultEntry] = load_vault(store)

    @classmethod
    def from_config(cls, config: AppConfig | None = None) -> PromptWorkbench:
        resolved = config or get_config()
        runner = SimulationRunner(
            mode=resolved.simulation_mode,
            base_delay_seconds=resolved.retry_base_delay,
            toasts=ToastQueue(lifetime_seconds=resolved.toast_lifetime),
        )
        return cls(runner, KeyValueStore(resolved.store_path), resolved)

    def update_input(self, raw: str) -> PromptAnalysis | None:
        """Re-analyze after an edit; blank input clears the analysis."""
        self.raw = raw
        if not raw.strip():
            self.analysis = None
            self.suggestion = ""
            return None
        self.analysis = analyze_prompt(raw)
        self.suggestion = suggest_completion(raw)
        return self.analysis

    def accept_suggestion(self) -> bool:
        if not self.suggestion:
            return False
        self.update_input(self.suggestion)
        self.suggestion = ""
        return True

    async def enhance(self) -> EnhancedPrompt | None:
        """Enhance the current analysis and save the result to the vault."""
        analysis = self.analysis
        raw = self.raw
        if analysis is None:
            return None

        async def build() -> EnhancedPrompt:
            return enhance_prompt(analysis)

        result = await self.runner.simulate("Enhance Prompt", build, stub=ENHANCE_STUB)
        if result is None:
            # dry mode and healed failures produce nothing to save
            return None

        self.enhanced = result
        entry = VaultEntry(ts=int(time.time() * 1000), raw=raw, meta=result)
        self.vault = append_vault_entry(self.vault, entry)
        save_vault(self.store, self.vault)
        self.runner.add_toast("success", "Enhanced", "Prompt saved to vault.")
        if self.config.vault_endpoint_url:
            await post_vault_entry(
                entry,
                url=self.config.vault_endpoint_url,
                timeout=self.config.request_timeout,
            )
        return result

    async def _rewrite_text(self, prompt: str) -> str:
        if self.config.rewriter_endpoint_url:
            return await request_rewrite(
                prompt,
                url=self.config.rewriter_endpoint_url,
                timeout=self.config.request_timeout,
            )
        if self.config.openai_api_key:
            response = await asyncio.to_thread(LLMClient(self.config).rewrite_prompt, prompt)
            return response.text
        raise RewriteError("No rewrite endpoint or OpenAI key configured.")

    async def rewrite(self) -> str | None:
        """Replace the raw prompt with an external rewrite; failures only toast."""
        if not self.raw.strip():
            return None
        self.runner.add_toast("info", "GPT-Rewrite", "Contacting LLM...")
        try:
            rewritten = await self._rewrite_text(self.raw)
        except (RewriteError, LLMError) as exc:
            LOGGER.warning("rewrite_failed error=%s", exc.message)
            self.runner.add_toast("error", "GPT-Rewrite Failed", exc.message)
            return None
        self.update_input(rewritten)
        self.runner.add_toast("success", "GPT-Rewrite Complete", "Prompt updated.")
        return rewritten

    def launch_url(self) -> str | None:
        if self.enhanced is None or not self.enhanced.meta_prompt:
            return None
        return build_launch_url(self.enhanced.meta_prompt, self.config.launch_base_url)

    async def create_user(self, name: str) -> dict[str, object] | None:
        """Register a user through the simulator; failures are toasted and return None."""

        async def register() -> dict[str, object]:
            self.store.set(LAST_USER_KEY, name)
            return {"success": True, "userId": f"usr_{int(time.time() * 1000)}"}

        mode = self.runner.mode
        try:
            result = await self.runner.simulate(
                f"Create User: {name}",
                register,
                retries=2,
                stub=CREATE_USER_STUB,
            )
        except Exception as exc:
            LOGGER.warning("create_user_failed name=%s error=%s", name, error_message(exc))
            self.runner.add_toast("error", "Operation Failed", error_message(exc))
            return None
        self.runner.add_toast(
            "success",
            "Operation Succeeded",
            f"User creation for {name} completed via {mode} mode.",
        )
        return result
