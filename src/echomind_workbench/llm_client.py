"""OpenAI-backed prompt rewrite client with normalized API errors."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Literal

from echomind_workbench.config import AppConfig

ErrorCategory = Literal["auth", "rate_limit", "network", "invalid_request", "server", "unknown"]

LOGGER = logging.getLogger("echomind_workbench.llm_client")
if not LOGGER.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    LOGGER.addHandler(handler)
LOGGER.setLevel(logging.INFO)
LOGGER.propagate = False

REWRITE_SYSTEM_TEXT = (
    "You are a senior prompt engineer. Rewrite the user's prompt so it is clear, specific, "
    "and actionable. Keep the original intent and language. "
    "Return only the rewritten prompt with no commentary."
)


@dataclass(frozen=True)
class LLMResponse:
    """Normalized response contract for generation calls."""

    text: str
    model_used: str
    request_id: str | None = None
    usage_input_tokens: int | None = None
    usage_output_tokens: int | None = None


class LLMError(Exception):
    """Normalized error carrying a user-readable message and category."""

    def __init__(self, message: str, category: ErrorCategory) -> None:
        super().__init__(message)
        self.message = message
        self.category = category


class LLMClient:
    """Chat-completions client used when no rewrite endpoint is configured."""

    def __init__(self, config: AppConfig, timeout_seconds: float = 30.0, max_retries: int = 2) -> None:
        self.config = config
        self.timeout_seconds = timeout_seconds
        self.max_retries = max(0, max_retries)

    def _log_request(
        self,
        *,
        model: str,
        user_text: str,
        outcome: Literal["success", "error"],
        error_category: ErrorCategory | None,
    ) -> None:
        LOGGER.info(
            "llm_request model=%s prompt_chars=%d outcome=%s error_category=%s",
            model,
            len(user_text),
            outcome,
            error_category or "none",
        )

    @staticmethod
    def _extract_token_count(usage: object, primary_key: str, fallback_key: str) -> int | None:
        if usage is None:
            return None
        value = getattr(usage, primary_key, None)
        if value is None:
            value = getattr(usage, fallback_key, None)
        return value if isinstance(value, int) else None

    @staticmethod
    def _compact_error_message(error: BaseException, *, max_chars: int = 320) -> str:
        compact = " ".join(str(error).split())
        if len(compact) <= max_chars:
            return compact
        return f"{compact[: max_chars - 3]}..."

    def generate_text(
        self,
        *,
        user_text: str,
        system_text: str = "",
        temperature: float = 0.2,
        max_output_tokens: int = 800,
    ) -> LLMResponse:
        """Generate text with OpenAI and return normalized response data."""
        model = self.config.rewrite_model
        if not self.config.openai_api_key:
            raise LLMError("OPENAI_API_KEY is not configured.", "auth")

        try:
            from openai import (
                APIConnectionError,
                APIStatusError,
                APITimeoutError,
                AuthenticationError,
                BadRequestError,
                OpenAI,
                RateLimitError,
            )
        except ModuleNotFoundError as exc:
            raise LLMError(
                "OpenAI client dependency is missing. Install project requirements.",
                "unknown",
            ) from exc

        client = OpenAI(api_key=self.config.openai_api_key, timeout=self.timeout_seconds)

        messages: list[dict[str, str]] = []
        if system_text.strip():
            messages.append({"role": "system", "content": system_text})
        messages.append({"role": "user", "content": user_text})

        for attempt in range(self.max_retries + 1):
            try:
                completion = client.chat.completions.create(
                    model=model,
                    messages=messages,
                    temperature=temperature,
                    max_tokens=max_output_tokens,
                )
                text = completion.choices[0].message.content or ""
                request_id_raw = getattr(completion, "id", None)
                usage = getattr(completion, "usage", None)
                self._log_request(model=model, user_text=user_text, outcome="success", error_category=None)
                return LLMResponse(
                    text=text,
                    model_used=model,
                    request_id=str(request_id_raw) if request_id_raw is not None else None,
                    usage_input_tokens=self._extract_token_count(usage, "prompt_tokens", "input_tokens"),
                    usage_output_tokens=self._extract_token_count(usage, "completion_tokens", "output_tokens"),
                )
            except AuthenticationError as exc:
                self._log_request(model=model, user_text=user_text, outcome="error", error_category="auth")
                raise LLMError(
                    "Authentication failed. Check OPENAI_API_KEY and model access.",
                    "auth",
                ) from exc
            except BadRequestError as exc:
                self._log_request(
                    model=model, user_text=user_text, outcome="error", error_category="invalid_request"
                )
                detail = self._compact_error_message(exc)
                raise LLMError(f"Invalid request sent to OpenAI: {detail}", "invalid_request") from exc
            except RateLimitError as exc:
                if attempt < self.max_retries:
                    time.sleep(0.4 * (attempt + 1))
                    continue
                self._log_request(model=model, user_text=user_text, outcome="error", error_category="rate_limit")
                raise LLMError("Rate limit reached. Retry in a moment.", "rate_limit") from exc
            except (APIConnectionError, APITimeoutError) as exc:
                if attempt < self.max_retries:
                    time.sleep(0.4 * (attempt + 1))
                    continue
                self._log_request(model=model, user_text=user_text, outcome="error", error_category="network")
                raise LLMError("Network or timeout error while contacting OpenAI.", "network") from exc
            except APIStatusError as exc:
                status_code = getattr(exc, "status_code", None)
                if status_code is not None and status_code >= 500:
                    if attempt < self.max_retries:
                        time.sleep(0.4 * (attempt + 1))
                        continue
                    self._log_request(model=model, user_text=user_text, outcome="error", error_category="server")
                    raise LLMError("OpenAI server error.", "server") from exc
                detail = self._compact_error_message(exc)
                self._log_request(
                    model=model, user_text=user_text, outcome="error", error_category="invalid_request"
                )
                raise LLMError(f"OpenAI API error (status {status_code}): {detail}", "invalid_request") from exc
            except Exception as exc:
                self._log_request(model=model, user_text=user_text, outcome="error", error_category="unknown")
                raise LLMError("Unexpected LLM request failure.", "unknown") from exc

        self._log_request(model=model, user_text=user_text, outcome="error", error_category="unknown")
        raise LLMError("Unexpected LLM request failure.", "unknown")

    def rewrite_prompt(self, prompt: str) -> LLMResponse:
        """Rewrite a raw prompt into a clearer one."""
        response = self.generate_text(system_text=REWRITE_SYSTEM_TEXT, user_text=prompt)
        if not response.text.strip():
            raise LLMError("Rewrite returned empty content.", "unknown")
        return response
