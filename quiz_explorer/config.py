"""
Runtime configuration for the quiz explorer.

Values come from ``QUIZ_*`` environment variables (a ``.env`` file in the
working directory is loaded first) and can then be overridden from the
command line.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Tuple

from dotenv import load_dotenv

ENV_PREFIX = "QUIZ_"

DEFAULT_BLOCKED_HOSTS: Tuple[str, ...] = (
    "https://analytics.google.com/",
    "https://analytics.tiktok.com/",
    "https://www.facebook.com/",
    "https://www.googletagmanager.com/",
    "https://td.doubleclick.net/",
    "https://googleads.g.doubleclick.net/",
    "https://www.inflektionshop.com/",
    "https://www.google.co.in/",
)


@dataclass(frozen=True)
class ExplorerConfig:
    start_url: str = "https://go-checkout.bioniq.com/section-intro"
    headless: bool = False
    state_file: str = "exploration_state.json"
    payload_dir: str = "captured_payloads"
    output_dir: str = "run_artifacts"
    max_artifacts: int | None = None
    capture_endpoint: str = "/formula_recommendations/from_answers"
    capture_pages: Tuple[str, ...] = ("e-mail",)
    root_page_id: str | None = None
    stall_limit: int = 2
    navigation_timeout_ms: int = 3000
    action_delay_ms: int = 200
    retry_attempts: int = 3
    checkpoint_every: int = 0
    blocked_hosts: Tuple[str, ...] = field(default=DEFAULT_BLOCKED_HOSTS)
    resume: bool = True

    # ------------------------------------------------------------------
    @classmethod
    def from_env(cls, env: Dict[str, str] | None = None, dotenv_path: str | None = None) -> "ExplorerConfig":
        """Build a config from ``QUIZ_*`` variables in ``env`` (``os.environ`` by default)."""
        if env is None:
            load_dotenv(dotenv_path)
            env = dict(os.environ)
        values: Dict[str, Any] = {}
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            values[f.name] = _coerce(f.name, raw)
        config = cls(**values)
        config.validate()
        return config

    def with_overrides(self, **overrides: Any) -> "ExplorerConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        config = replace(self, **changes)
        config.validate()
        return config

    def validate(self) -> None:
        errors = []
        if not self.start_url:
            errors.append("start_url must be set")
        if self.max_artifacts is not None and self.max_artifacts < 0:
            errors.append("max_artifacts must not be negative")
        if self.stall_limit < 1:
            errors.append("stall_limit must be at least 1")
        if self.retry_attempts < 1:
            errors.append("retry_attempts must be at least 1")
        if self.navigation_timeout_ms <= 0:
            errors.append("navigation_timeout_ms must be positive")
        if self.checkpoint_every < 0:
            errors.append("checkpoint_every must not be negative")
        if errors:
            raise ValueError("Configuration errors: " + "; ".join(errors))


_BOOL_FIELDS = {"headless", "resume"}
_INT_FIELDS = {"stall_limit", "navigation_timeout_ms", "action_delay_ms", "retry_attempts", "checkpoint_every"}
_TUPLE_FIELDS = {"capture_pages", "blocked_hosts"}
# page ids are always lower-case (see page_identity)
_PAGE_ID_FIELDS = {"capture_pages", "root_page_id"}


def _coerce(name: str, raw: str) -> Any:
    raw = raw.strip()
    if name in _BOOL_FIELDS:
        return raw.lower() in ("1", "true", "yes", "on")
    if name in _INT_FIELDS:
        return int(raw)
    if name == "max_artifacts":
        return int(raw) if raw else None
    if name in _PAGE_ID_FIELDS:
        raw = raw.lower()
    if name in _TUPLE_FIELDS:
        return tuple(part.strip() for part in raw.split(",") if part.strip())
    return raw
