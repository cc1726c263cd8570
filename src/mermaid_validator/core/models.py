"""Pydantic models for render requests and their outcomes.

A ``RenderRequest`` goes in, a ``RenderResult`` comes out.  Both are
frozen: they are built once per tool invocation and thrown away after
the response has been sent.
"""

from __future__ import annotations

import base64
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class OutputFormat(str, Enum):
    """Image formats the Mermaid CLI can produce for us."""
    PNG = "png"
    SVG = "svg"

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES[self]

    @property
    def is_raster(self) -> bool:
        return self is OutputFormat.PNG


_MIME_TYPES: dict[OutputFormat, str] = {
    OutputFormat.PNG: "image/png",
    OutputFormat.SVG: "image/svg+xml",
}

DEFAULT_FORMAT = OutputFormat.PNG


class FailureKind(str, Enum):
    """Why a render did not produce an image."""
    SPAWN = "spawn"        # renderer binary missing or not launchable
    TIMEOUT = "timeout"    # renderer ran past the allotted time
    EXIT = "exit"          # renderer exited non-zero (usually a parse error)
    OUTPUT = "output"      # exit 0 but no readable output file


# ---------------------------------------------------------------------------
# Request / result
# ---------------------------------------------------------------------------

class RenderRequest(BaseModel):
    """A single diagram to validate or render."""
    model_config = ConfigDict(frozen=True)

    diagram: str
    format: OutputFormat = DEFAULT_FORMAT


class RenderResult(BaseModel):
    """Outcome of one renderer invocation.

    Exactly one of ``data`` (non-empty image bytes) and ``error`` is set.
    ``details`` carries whatever the renderer wrote to stderr, verbatim.
    """
    model_config = ConfigDict(frozen=True)

    success: bool
    data: bytes = b""
    mime_type: str = ""
    error: Optional[str] = None
    details: Optional[str] = None
    kind: Optional[FailureKind] = None

    @model_validator(mode="after")
    def _check_outcome(self) -> "RenderResult":
        has_image = len(self.data) > 0
        has_error = self.error is not None
        if has_image == has_error:
            raise ValueError("a render result carries either image data or an error, not both")
        if self.success != has_image:
            raise ValueError("success flag does not match the result payload")
        return self

    @classmethod
    def ok(cls, data: bytes, fmt: OutputFormat) -> "RenderResult":
        return cls(success=True, data=data, mime_type=fmt.mime_type)

    @classmethod
    def fail(
        cls,
        kind: FailureKind,
        error: str,
        details: str | None = None,
    ) -> "RenderResult":
        return cls(success=False, error=error, details=details or None, kind=kind)

    @property
    def encoded(self) -> str:
        """Image bytes as base64 text, the form MCP image content expects."""
        return base64.b64encode(self.data).decode("ascii")
