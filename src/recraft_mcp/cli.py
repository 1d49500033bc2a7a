import asyncio
import logging
from pathlib import Path
from typing import Any, Dict

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from typing_extensions import Annotated

from recraft_mcp import __version__
from recraft_mcp.config import Settings, load_settings
from recraft_mcp.core import ToolDispatcher
from recraft_mcp.errors import ConfigurationError, RecraftError
from recraft_mcp.models import ImageSegment
from recraft_mcp.providers.recraft_provider import RecraftProvider
from recraft_mcp.server import run_stdio_server
from recraft_mcp.styles import MODEL_V3, MODELS, STYLES, substyles_for
from recraft_mcp.utils import generate_filename

app = typer.Typer(
    name="recraft-mcp",
    help="🎨 MCP server and command line client for the Recraft image API.",
    add_completion=False,
)
console = Console()
# stdout carries the MCP stdio framing, so diagnostics go to stderr.
err_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _settings_or_exit() -> Settings:
    try:
        return load_settings()
    except ConfigurationError as e:
        err_console.print(f"[bold red]Configuration error:[/bold red] {e}")
        raise typer.Exit(code=1)


def version_callback(value: bool):
    if value:
        console.print(f"recraft-mcp Version: [bold green]{__version__}[/bold green]")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Enable debug logging.", is_flag=True)
    ] = False,
):
    configure_logging(verbose)


@app.command()
def serve():
    """Run the MCP server over stdio."""
    settings = _settings_or_exit()
    dispatcher = ToolDispatcher(RecraftProvider(settings))
    asyncio.run(run_stdio_server(dispatcher))


@app.command(name="user-info")
def user_info():
    """Show the account behind the configured API key."""
    settings = _settings_or_exit()

    async def _fetch():
        async with RecraftProvider(settings) as provider:
            return await provider.get_user_info()

    try:
        info = asyncio.run(_fetch())
    except RecraftError as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)
    console.print(
        Panel(
            f"{info.name} ({info.email})\nCredits: [bold green]{info.credits}[/bold green]",
            title="Recraft account",
            expand=False,
        )
    )


@app.command()
def styles(
    model: Annotated[str, typer.Option(help="Model version (recraftv2 or recraftv3).")] = MODEL_V3,
):
    """List the styles and substyles a model version accepts."""
    if model not in MODELS:
        err_console.print(
            f"[bold red]Error:[/bold red] Unknown model '{model}'. Choose one of: {', '.join(MODELS)}"
        )
        raise typer.Exit(code=1)
    table = Table(title=f"Styles for {model}")
    table.add_column("Style", style="cyan", no_wrap=True)
    table.add_column("Substyles", style="green")
    for style in STYLES:
        table.add_row(style, ", ".join(substyles_for(model, style)) or "-")
    console.print(table)


@app.command()
def generate(
    prompt: Annotated[
        str,
        typer.Option(
            "--prompt",
            "-p",
            help="The text prompt for image generation. If not provided, you will be asked to enter it.",
            show_default=False,
        ),
    ] = None,
    n: Annotated[
        int, typer.Option("--num-images", "-n", min=1, max=6, help="Number of images to generate.")
    ] = 1,
    style: Annotated[str, typer.Option(help="Base style, e.g. digital_illustration.")] = None,
    substyle: Annotated[str, typer.Option(help="Substyle of the chosen style.")] = None,
    size: Annotated[str, typer.Option(help="Image size, e.g. 1024x1024.")] = None,
    model: Annotated[str, typer.Option(help="recraftv2 or recraftv3.")] = None,
    response_format: Annotated[
        str, typer.Option(help="Response format ('url' or 'b64_json').")
    ] = None,
    output_dir: Annotated[
        Path,
        typer.Option("--output-dir", "-o", help="Directory to save the first image into."),
    ] = None,
    filename: Annotated[
        str,
        typer.Option(help="File name without extension. Generated from the prompt if omitted."),
    ] = None,
):
    """Generate an image and optionally save it."""
    settings = _settings_or_exit()
    if prompt is None:
        prompt = typer.prompt("Please enter the prompt for image generation")

    arguments: Dict[str, Any] = {
        k: v
        for k, v in {
            "prompt": prompt,
            "n": n,
            "style": style,
            "substyle": substyle,
            "size": size,
            "model": model,
            "response_format": response_format,
        }.items()
        if v is not None
    }
    if output_dir is not None:
        arguments.update(
            save_to_disk=True,
            output_path=str(output_dir.expanduser().resolve()),
            filename=filename or generate_filename(prompt),
        )

    async def _generate():
        dispatcher = ToolDispatcher(RecraftProvider(settings))
        try:
            return await dispatcher.dispatch("generate_image", arguments)
        finally:
            await dispatcher.close()

    console.print(f'📜 Prompt: "{prompt}"')
    try:
        with console.status("[spinner]Processing...", spinner="dots"):
            result = asyncio.run(_generate())
    except RecraftError as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)

    for segment in result.content:
        if isinstance(segment, ImageSegment):
            console.print(f"[dim]Inline {segment.mime_type} image, {len(segment.data)} bytes[/dim]")
        else:
            console.print(
                Panel(segment.text, title="[bold green]Success ✨[/bold green]", expand=False)
            )


if __name__ == "__main__":
    app()
