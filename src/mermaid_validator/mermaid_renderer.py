"""Run the Mermaid CLI (``mmdc``) against a diagram and collect the image.

Each call to :meth:`MermaidRenderer.invoke` owns a private scratch
directory holding ``input.mmd`` and the output file, spawns one
``mmdc`` process, and waits for it with a timeout.  The scratch
directory is removed before ``invoke`` returns, whatever the outcome.

Nothing is shared between calls, so concurrent invocations are safe.
Failures are reported as :class:`RenderResult` values, never raised.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
import shutil
import signal
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from .config import RendererConfig
from .core.models import DEFAULT_FORMAT, FailureKind, OutputFormat, RenderResult

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_SCRATCH_PREFIX = "mermaid_validator_"
_INPUT_NAME = "input.mmd"
_OUTPUT_STEM = "output"

# The renderer runs in its own process group so a timeout kills npx, mmdc
# and Chromium together.
_OWN_PROCESS_GROUP = os.name == "posix"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _decode(stream: bytes | None) -> str:
    return (stream or b"").decode("utf-8", errors="replace")


@asynccontextmanager
async def _scratch_dir() -> AsyncIterator[Path]:
    """A fresh directory that is removed on exit, best effort."""
    path = Path(await asyncio.to_thread(tempfile.mkdtemp, prefix=_SCRATCH_PREFIX))
    try:
        yield path
    finally:
        try:
            await asyncio.to_thread(shutil.rmtree, path)
        except OSError as exc:
            logger.warning("Could not remove scratch directory %s: %s", path, exc)


def _error_summary(stderr: str) -> str:
    """Pick the line of mmdc's stderr that best describes the failure."""
    lines = [line.strip() for line in stderr.splitlines() if line.strip()]
    for line in lines:
        if "error" in line.lower():
            return line
    return lines[0] if lines else ""


# ---------------------------------------------------------------------------
# Main renderer
# ---------------------------------------------------------------------------

class MermaidRenderer:
    """Render Mermaid diagrams by shelling out to the Mermaid CLI.

    Parameters
    ----------
    config
        Command, timeout and styling flags.  Defaults to
        :meth:`RendererConfig.from_env`.
    """

    def __init__(self, config: RendererConfig | None = None) -> None:
        self.config = config or RendererConfig.from_env()

    def build_command(self, input_path: Path, output_path: Path, fmt: OutputFormat) -> list[str]:
        """Full argv for one render."""
        cmd = list(self.config.command)
        cmd.extend([
            "-i", str(input_path),
            "-o", str(output_path),
            "-e", fmt.value,
        ])
        if fmt.is_raster:
            cmd.extend(["-b", self.config.background])
        if self.config.theme:
            cmd.extend(["-t", self.config.theme])
        if self.config.puppeteer_config:
            cmd.extend(["-p", str(self.config.puppeteer_config)])
        return cmd

    async def invoke(self, diagram: str, fmt: OutputFormat = DEFAULT_FORMAT) -> RenderResult:
        """Render *diagram* to *fmt* and return the outcome."""
        async with _scratch_dir() as scratch:
            result = await self._run(scratch, diagram, fmt)

        if result.success:
            logger.info("Rendered mermaid diagram (%s, %d bytes)", fmt.value, len(result.data))
        else:
            logger.warning("Mermaid render failed (%s): %s", result.kind.value, result.error)
        return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _run(self, scratch: Path, diagram: str, fmt: OutputFormat) -> RenderResult:
        input_path = scratch / _INPUT_NAME
        output_path = scratch / f"{_OUTPUT_STEM}.{fmt.value}"
        cmd = self.build_command(input_path, output_path, fmt)
        logger.debug("Running %s", shlex.join(cmd))

        try:
            # lone surrogates are passed through; mmdc reports them as a parse error
            input_path.write_text(diagram, encoding="utf-8", errors="surrogatepass")
        except (OSError, UnicodeError) as exc:
            return RenderResult.fail(FailureKind.SPAWN, f"Failed to write diagram input: {exc}")

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=_OWN_PROCESS_GROUP,
            )
        except OSError as exc:
            return RenderResult.fail(FailureKind.SPAWN, f"Failed to start mermaid-cli: {exc}")

        try:
            _stdout, stderr = await asyncio.wait_for(
                proc.communicate(), timeout=self.config.timeout,
            )
        except asyncio.TimeoutError:
            return RenderResult.fail(
                FailureKind.TIMEOUT,
                f"mermaid-cli process timed out after {self.config.timeout:g} seconds",
            )
        finally:
            # timed out, or the calling task was cancelled
            if proc.returncode is None:
                await self._kill(proc)

        errors = _decode(stderr)
        if proc.returncode != 0:
            message = f"mermaid-cli process exited with code {proc.returncode}"
            summary = _error_summary(errors)
            if summary:
                message = f"{message}: {summary}"
            return RenderResult.fail(FailureKind.EXIT, message, errors.strip())

        try:
            data = output_path.read_bytes()
        except OSError as exc:
            logger.debug("Could not read %s: %s", output_path, exc)
            data = b""
        if not data:
            return RenderResult.fail(
                FailureKind.OUTPUT,
                "mermaid-cli exited successfully but produced no output",
                errors.strip(),
            )
        return RenderResult.ok(data, fmt)

    @staticmethod
    async def _kill(proc: asyncio.subprocess.Process) -> None:
        try:
            if _OWN_PROCESS_GROUP:
                os.killpg(proc.pid, signal.SIGKILL)
            else:
                proc.kill()
        except ProcessLookupError:
            pass
        await proc.wait()
