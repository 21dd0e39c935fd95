"""EchoMind Workbench: prompt analysis and dry-run simulation core."""

from __future__ import annotations

__all__ = [
    "config",
    "models",
    "prompt_engine",
    "simulation",
    "notifications",
    "coaching",
    "persistence",
    "remote",
    "llm_client",
    "workbench",
    "logging_setup",
]
