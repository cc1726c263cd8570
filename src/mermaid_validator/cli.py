"""mcp-mermaid-validator CLI.

Usage:
    mcp-mermaid-validator                   # serve MCP over stdio
    mcp-mermaid-validator validate <file>
    mcp-mermaid-validator render <file> -o diagram.svg -f svg
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from . import __version__
from .config import ENV_COMMAND, ENV_PUPPETEER_CONFIG, ENV_THEME, ENV_TIMEOUT, RendererConfig
from .core.models import DEFAULT_FORMAT, OutputFormat
from .mermaid_renderer import MermaidRenderer
from .server import MermaidValidatorServer
from .tools.mermaid_tools import INVALID_TEXT, VALID_TEXT, ValidateMermaidTool

# stdout is reserved for the MCP stream
console = Console(stderr=True)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _read_diagram(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="mcp-mermaid-validator")
@click.option(
    "--command",
    "command",
    envvar=ENV_COMMAND,
    default=None,
    help="Renderer command line (default: mmdc, or npx @mermaid-js/mermaid-cli).",
)
@click.option(
    "--timeout",
    type=float,
    envvar=ENV_TIMEOUT,
    default=None,
    help="Seconds to wait for the renderer (default: 30).",
)
@click.option(
    "--theme",
    envvar=ENV_THEME,
    default=None,
    help="Mermaid theme passed to the renderer (default, dark, forest, neutral).",
)
@click.option(
    "--puppeteer-config",
    "puppeteer_config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar=ENV_PUPPETEER_CONFIG,
    default=None,
    help="Puppeteer JSON config for the renderer's headless browser.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Debug logging.")
@click.pass_context
def main(
    ctx: click.Context,
    command: str | None,
    timeout: float | None,
    theme: str | None,
    puppeteer_config: Path | None,
    verbose: bool,
):
    """mcp-mermaid-validator: validate and render Mermaid diagrams for MCP clients."""
    _setup_logging(verbose)
    try:
        ctx.obj = RendererConfig.from_env(
            command=command,
            timeout=timeout,
            theme=theme,
            puppeteer_config=puppeteer_config,
        )
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc

    if ctx.invoked_subcommand is None:
        ctx.invoke(serve)


@main.command()
@click.pass_obj
def serve(config: RendererConfig):
    """Serve the MCP tools over stdin/stdout."""
    asyncio.run(MermaidValidatorServer(config).run_stdio())


@main.command()
@click.argument("source", type=click.Path(allow_dash=True))
@click.pass_obj
def validate(config: RendererConfig, source: str):
    """Check whether SOURCE (a .mmd file, or - for stdin) is a valid diagram."""
    tool = ValidateMermaidTool(MermaidRenderer(config))
    content = asyncio.run(tool.execute({"diagram": _read_diagram(source)}))

    texts = [item.text for item in content]
    if texts and texts[0] == VALID_TEXT:
        console.print(f"[green]✓[/green] {VALID_TEXT}")
        return

    title, *body = texts or [INVALID_TEXT]
    console.print(Panel(Text("\n\n".join(body) or title), title=escape(title), border_style="red"))
    sys.exit(1)


@main.command()
@click.argument("source", type=click.Path(allow_dash=True))
@click.option(
    "-o", "--output",
    "output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Where to write the rendered image.",
)
@click.option(
    "-f", "--format",
    "fmt",
    type=click.Choice([f.value for f in OutputFormat], case_sensitive=False),
    default=DEFAULT_FORMAT.value,
    help="Output format (default: png).",
)
@click.pass_obj
def render(config: RendererConfig, source: str, output: Path, fmt: str):
    """Render SOURCE to an image file."""
    renderer = MermaidRenderer(config)
    result = asyncio.run(renderer.invoke(_read_diagram(source), OutputFormat(fmt.lower())))

    if not result.success:
        console.print(f"[red]✗[/red] {INVALID_TEXT}: {escape(result.error or '')}")
        if result.details:
            console.print(Panel(Text(result.details), title="Detailed error output", border_style="red"))
        sys.exit(1)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(result.data)
    console.print(f"[green]✓[/green] Wrote {output} ({result.mime_type}, {len(result.data):,} bytes)")


if __name__ == "__main__":
    main()
