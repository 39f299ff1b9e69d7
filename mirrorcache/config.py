"""
mirrorcache.config — YAML Configuration Loader
===============================================

Reads ``config.yaml`` for the soft settings of the gateway bridge.  Secrets
(``DISCORD_TOKEN``, ``DATABASE_URL``) are not kept here; they come from the
environment / ``.env``.

Usage::

    from mirrorcache.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.log_level)         # "INFO"
    print(cfg.intent_presences)  # True
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class MirrorConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    log_level: str = "INFO"

    # Gateway intents.  Members, presences and message content are
    # privileged and must also be enabled in the Developer Portal.
    intent_members: bool = True
    intent_presences: bool = True
    intent_message_content: bool = True

    # Run CREATE TABLE IF NOT EXISTS on startup.
    create_schema: bool = True

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> MirrorConfig:
    """Read *path* and return a :class:`MirrorConfig` instance.

    Missing keys fall back to the defaults above.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    ValueError
        If ``log_level`` is not a standard logging level name.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    log_level = str(raw.get("log_level", "INFO")).upper()
    if log_level not in _LOG_LEVELS:
        raise ValueError(f"Unknown log_level {log_level!r} in {config_path}")

    intents: dict = raw.get("intents") or {}
    return MirrorConfig(
        log_level=log_level,
        intent_members=bool(intents.get("members", True)),
        intent_presences=bool(intents.get("presences", True)),
        intent_message_content=bool(intents.get("message_content", True)),
        create_schema=bool(raw.get("create_schema", True)),
    )
