"""Shared fixtures: a stand-in for ``mmdc`` that runs on the test interpreter."""

from __future__ import annotations

import sys
import textwrap
from pathlib import Path

import pytest

from mermaid_validator.config import RendererConfig
from mermaid_validator.mermaid_renderer import MermaidRenderer


# ---------------------------------------------------------------------------
# Fake Mermaid CLI
# ---------------------------------------------------------------------------

# Accepts the same flags as mmdc.  Diagram text decides the behaviour:
#   starts with graph/flowchart/sequenceDiagram -> writes an image, exit 0
#   contains "%% hang"                          -> never finishes
#   contains "%% no output"                     -> exit 0, writes nothing
#   anything else                               -> parse error, exit 1
FAKE_MMDC = textwrap.dedent('''
    import argparse
    import hashlib
    import sys
    import time

    parser = argparse.ArgumentParser()
    for flag in ("-i", "-o", "-e", "-b", "-t", "-p"):
        parser.add_argument(flag)
    args = parser.parse_args()

    with open(args.i, encoding="utf-8") as fh:
        text = fh.read()

    if "%% hang" in text:
        time.sleep(600)
    if "%% no output" in text:
        sys.exit(0)
    if not text.lstrip().startswith(("graph", "flowchart", "sequenceDiagram")):
        sys.stderr.write(
            "Error: Parse error on line 1:\\n"
            + (text.splitlines() or [""])[0] + "\\n"
            + "^\\nExpecting 'NEWLINE', 'SPACE', got 'ALPHA'\\n"
        )
        sys.exit(1)

    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
    if args.e == "svg":
        body = '<svg xmlns="http://www.w3.org/2000/svg" data-hash="%s"/>' % digest
        data = body.encode("utf-8")
    else:
        data = b"\\x89PNG\\r\\n\\x1a\\n" + digest.encode("ascii") + (args.b or "").encode("ascii")
    with open(args.o, "wb") as fh:
        fh.write(data)
''')

VALID_DIAGRAM = "graph TD; A-->B;"
INVALID_DIAGRAM = "not a real diagram"
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


@pytest.fixture
def fake_mmdc(tmp_path: Path) -> list[str]:
    script = tmp_path / "fake_mmdc.py"
    script.write_text(FAKE_MMDC, encoding="utf-8")
    return [sys.executable, str(script)]


@pytest.fixture
def renderer_config(fake_mmdc: list[str]) -> RendererConfig:
    return RendererConfig(command=fake_mmdc, timeout=10.0)


@pytest.fixture
def renderer(renderer_config: RendererConfig) -> MermaidRenderer:
    return MermaidRenderer(renderer_config)


@pytest.fixture
def scratch_dirs(monkeypatch) -> list[Path]:
    """Record every scratch directory the renderer creates."""
    import mermaid_validator.mermaid_renderer as mod

    created: list[Path] = []
    real_mkdtemp = mod.tempfile.mkdtemp

    def _spy(*args, **kwargs):
        path = real_mkdtemp(*args, **kwargs)
        created.append(Path(path))
        return path

    monkeypatch.setattr(mod.tempfile, "mkdtemp", _spy)
    return created
