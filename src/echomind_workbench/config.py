"""Runtime configuration loading from environment and optional .env file."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os

from echomind_workbench.models import SIMULATION_MODES, SimulationMode

DEFAULT_STORE_PATH = Path(".echomind/storage.json")
DEFAULT_LAUNCH_BASE_URL = "https://chat.openai.com/?prompt="
DEFAULT_REWRITE_MODEL = "gpt-4o-mini"


class ConfigError(Exception):
    """Configuration loading error with user-facing message text."""


@dataclass(frozen=True)
class AppConfig:
    """Application config contract for storage, simulation, and outbound calls."""

    store_path: Path = DEFAULT_STORE_PATH
    simulation_mode: SimulationMode = "dry"
    retry_base_delay: float = 0.15
    toast_lifetime: float = 5.0
    vault_endpoint_url: str | None = None
    rewriter_endpoint_url: str | None = None
    launch_base_url: str = DEFAULT_LAUNCH_BASE_URL
    openai_api_key: str | None = None
    rewrite_model: str = DEFAULT_REWRITE_MODEL
    request_timeout: float = 10.0

    def __repr__(self) -> str:
        redacted_key = "'***REDACTED***'" if self.openai_api_key else "None"
        return (
            "AppConfig("
            f"store_path={str(self.store_path)!r}, "
            f"simulation_mode={self.simulation_mode!r}, "
            f"retry_base_delay={self.retry_base_delay!r}, "
            f"toast_lifetime={self.toast_lifetime!r}, "
            f"vault_endpoint_url={self.vault_endpoint_url!r}, "
            f"rewriter_endpoint_url={self.rewriter_endpoint_url!r}, "
            f"launch_base_url={self.launch_base_url!r}, "
            f"openai_api_key={redacted_key}, "
            f"rewrite_model={self.rewrite_model!r}, "
            f"request_timeout={self.request_timeout!r})"
        )


def _parse_env_line(line: str) -> tuple[str, str] | None:
    stripped = line.strip()
    if not stripped or stripped.startswith("#") or "=" not in stripped:
        return None

    key, raw_value = stripped.split("=", 1)
    key = key.strip()
    value = raw_value.strip()
    if not key:
        return None

    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        value = value[1:-1]
    return key, value


def _load_dotenv(dotenv_path: Path) -> None:
    if not dotenv_path.exists():
        return

    for line in dotenv_path.read_text(encoding="utf-8").splitlines():
        parsed = _parse_env_line(line)
        if parsed is None:
            continue
        key, value = parsed
        os.environ.setdefault(key, value)


def _optional_env(name: str) -> str | None:
    value = os.environ.get(name)
    if value is None:
        return None
    normalized = value.strip()
    return normalized or None


def _float_env(name: str, default: float, *, minimum: float = 0.0) -> float:
    value = _optional_env(name)
    if value is None:
        return default
    try:
        parsed = float(value)
    except ValueError as exc:
        raise ConfigError(
            f"Configuration error: {name} must be a valid float, got {value!r}."
        ) from exc
    if parsed < minimum:
        raise ConfigError(f"Configuration error: {name} must be >= {minimum}, got {value!r}.")
    return parsed


def _mode_env(name: str, default: SimulationMode) -> SimulationMode:
    value = _optional_env(name)
    if value is None:
        return default
    normalized = value.lower()
    if normalized not in SIMULATION_MODES:
        supported = ", ".join(SIMULATION_MODES)
        raise ConfigError(
            f"Configuration error: {name} must be one of {supported}, got {value!r}."
        )
    return normalized  # type: ignore[return-value]


def get_config() -> AppConfig:
    """Load config from environment variables and `.env` in the working directory."""
    _load_dotenv(Path(".env"))

    store_path = _optional_env("ECHOMIND_STORE_PATH")
    return AppConfig(
        store_path=Path(store_path).expanduser() if store_path else DEFAULT_STORE_PATH,
        simulation_mode=_mode_env("ECHOMIND_SIMULATION_MODE", "dry"),
        retry_base_delay=_float_env("ECHOMIND_RETRY_BASE_DELAY", 0.15),
        toast_lifetime=_float_env("ECHOMIND_TOAST_LIFETIME", 5.0),
        vault_endpoint_url=_optional_env("VAULT_ENDPOINT_URL"),
        rewriter_endpoint_url=_optional_env("REWRITER_ENDPOINT_URL"),
        launch_base_url=_optional_env("LAUNCH_BASE_URL") or DEFAULT_LAUNCH_BASE_URL,
        openai_api_key=_optional_env("OPENAI_API_KEY"),
        rewrite_model=_optional_env("REWRITE_LLM_MODEL") or DEFAULT_REWRITE_MODEL,
        request_timeout=_float_env("ECHOMIND_REQUEST_TIMEOUT", 10.0),
    )
