"""Best-effort outbound calls: vault sync, prompt rewrite, and launch links."""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from echomind_workbench.config import DEFAULT_LAUNCH_BASE_URL
from echomind_workbench.models import VaultEntry

LOGGER = logging.getLogger("echomind_workbench.remote")

DEFAULT_TIMEOUT_SECONDS = 10.0
# Characters encodeURIComponent leaves unescaped besides alphanumerics.
_URI_COMPONENT_SAFE = "-_.!~*'()"


class RewriteError(Exception):
    """Rewrite request failure with user-facing message text."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


async def post_vault_entry(
    entry: VaultEntry,
    *,
    url: str,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> bool:
    """POST a vault entry; network and HTTP failures are logged, never raised."""
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout) as owned_client:
                response = await owned_client.post(url, json=entry.to_payload())
        else:
            response = await client.post(url, json=entry.to_payload())
        response.raise_for_status()
    except httpx.HTTPError as exc:
        LOGGER.warning("vault_sync outcome=error url=%s error=%s", url, exc)
        return False
    LOGGER.info("vault_sync outcome=success url=%s status=%d", url, response.status_code)
    return True


def _parse_rewrite_response(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError as exc:
        raise RewriteError("Rewrite endpoint returned invalid JSON.") from exc
    rewritten = payload.get("rewritten") if isinstance(payload, dict) else None
    if not isinstance(rewritten, str):
        raise RewriteError("Rewrite endpoint response is missing 'rewritten'.")
    return rewritten


async def request_rewrite(
    prompt: str,
    *,
    url: str,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> str:
    """Ask the rewrite endpoint to rewrite `prompt` and return the new text."""
    body = {"prompt": prompt}
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout) as owned_client:
                response = await owned_client.post(url, json=body)
        else:
            response = await client.post(url, json=body)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        LOGGER.warning("rewrite outcome=error url=%s status=%d", url, exc.response.status_code)
        raise RewriteError(f"Rewrite endpoint error (status {exc.response.status_code}).") from exc
    except httpx.HTTPError as exc:
        LOGGER.warning("rewrite outcome=error url=%s error=%s", url, exc)
        raise RewriteError("Endpoint unreachable.") from exc

    rewritten = _parse_rewrite_response(response)
    LOGGER.info("rewrite outcome=success url=%s chars=%d", url, len(rewritten))
    return rewritten


def build_launch_url(meta_prompt: str, base_url: str = DEFAULT_LAUNCH_BASE_URL) -> str:
    """Return a deep link that carries the meta prompt as an encoded query value."""
    return f"{base_url}{quote(meta_prompt, safe=_URI_COMPONENT_SAFE)}"
