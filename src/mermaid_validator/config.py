"""Renderer configuration.

Everything here comes from invocation arguments or environment
variables; the server keeps no configuration file and no state.
"""

from __future__ import annotations

import os
import shlex
import shutil
from dataclasses import dataclass, field
from pathlib import Path


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_TIMEOUT = 30.0
DEFAULT_BACKGROUND = "transparent"
NPX_COMMAND = ("npx", "--yes", "@mermaid-js/mermaid-cli")

ENV_COMMAND = "MERMAID_VALIDATOR_COMMAND"
ENV_TIMEOUT = "MERMAID_VALIDATOR_TIMEOUT"
ENV_THEME = "MERMAID_VALIDATOR_THEME"
ENV_PUPPETEER_CONFIG = "MERMAID_VALIDATOR_PUPPETEER_CONFIG"


def default_command() -> list[str]:
    """Prefer a globally installed ``mmdc``; otherwise go through ``npx``."""
    mmdc = shutil.which("mmdc")
    if mmdc:
        return [mmdc]
    return list(NPX_COMMAND)


@dataclass
class RendererConfig:
    """How to launch the Mermaid CLI."""

    command: list[str] = field(default_factory=default_command)
    timeout: float = DEFAULT_TIMEOUT
    theme: str | None = None
    puppeteer_config: Path | None = None
    background: str = DEFAULT_BACKGROUND

    def __post_init__(self) -> None:
        if not self.command:
            raise ValueError("renderer command must not be empty")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

    @classmethod
    def from_env(cls, **overrides: object) -> "RendererConfig":
        """Build a config from ``MERMAID_VALIDATOR_*`` variables.

        Keyword arguments that are not *None* win over the environment.
        """
        values: dict[str, object] = {}

        command = os.environ.get(ENV_COMMAND)
        if command:
            values["command"] = shlex.split(command)
        timeout = os.environ.get(ENV_TIMEOUT)
        if timeout:
            values["timeout"] = float(timeout)
        theme = os.environ.get(ENV_THEME)
        if theme:
            values["theme"] = theme
        puppeteer = os.environ.get(ENV_PUPPETEER_CONFIG)
        if puppeteer:
            values["puppeteer_config"] = Path(puppeteer)

        values.update({k: v for k, v in overrides.items() if v is not None})
        if isinstance(values.get("command"), str):
            values["command"] = shlex.split(values["command"])  # type: ignore[arg-type]
        return cls(**values)  # type: ignore[arg-type]
