"""Tests for the request/result models."""

from __future__ import annotations

import base64

import pytest
from pydantic import ValidationError

from mermaid_validator.core.models import (
    DEFAULT_FORMAT,
    FailureKind,
    OutputFormat,
    RenderRequest,
    RenderResult,
)


class TestOutputFormat:
    def test_mime_types(self):
        assert OutputFormat.PNG.mime_type == "image/png"
        assert OutputFormat.SVG.mime_type == "image/svg+xml"

    def test_only_png_is_raster(self):
        assert OutputFormat.PNG.is_raster
        assert not OutputFormat.SVG.is_raster

    def test_default_is_png(self):
        assert DEFAULT_FORMAT is OutputFormat.PNG

    def test_from_string(self):
        assert OutputFormat("svg") is OutputFormat.SVG
        with pytest.raises(ValueError):
            OutputFormat("gif")


class TestRenderRequest:
    def test_defaults_to_png(self):
        req = RenderRequest(diagram="graph TD; A-->B;")
        assert req.format is OutputFormat.PNG

    def test_is_frozen(self):
        req = RenderRequest(diagram="graph TD; A-->B;")
        with pytest.raises(ValidationError):
            req.diagram = "other"


class TestRenderResult:
    def test_ok(self):
        result = RenderResult.ok(b"<svg/>", OutputFormat.SVG)
        assert result.success
        assert result.mime_type == "image/svg+xml"
        assert result.error is None
        assert result.kind is None

    def test_fail(self):
        result = RenderResult.fail(FailureKind.EXIT, "exited with code 1", "Parse error")
        assert not result.success
        assert result.data == b""
        assert result.error == "exited with code 1"
        assert result.details == "Parse error"
        assert result.kind is FailureKind.EXIT

    def test_fail_blank_details_dropped(self):
        result = RenderResult.fail(FailureKind.TIMEOUT, "timed out", "")
        assert result.details is None

    def test_encoded(self):
        result = RenderResult.ok(b"\x89PNGdata", OutputFormat.PNG)
        assert base64.b64decode(result.encoded) == b"\x89PNGdata"

    def test_rejects_image_and_error(self):
        with pytest.raises(ValidationError):
            RenderResult(success=True, data=b"png", error="boom")

    def test_rejects_neither_image_nor_error(self):
        with pytest.raises(ValidationError):
            RenderResult(success=True)

    def test_rejects_empty_success(self):
        with pytest.raises(ValidationError):
            RenderResult.ok(b"", OutputFormat.PNG)

    def test_rejects_mismatched_flag(self):
        with pytest.raises(ValidationError):
            RenderResult(success=False, data=b"png")

    def test_is_frozen(self):
        result = RenderResult.ok(b"png", OutputFormat.PNG)
        with pytest.raises(ValidationError):
            result.success = False
