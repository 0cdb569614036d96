# gemini_studio/cli.py
"""
CLI interface for gemini-studio.

Thin presentation layer over the tools/ service layer.
All commands delegate to the same functions that MCP wraps.
"""

import asyncio
import logging
import sys
import time

import typer
from fastmcp.exceptions import ToolError

app = typer.Typer(
    name="gemini-studio",
    help="Queue prompt-driven image generations and manage the resulting gallery.",
    no_args_is_help=True,
)


def _fmt_duration(seconds: float) -> str:
    """Format seconds as human-readable duration (e.g. '1m05s', '42s')."""
    s = int(seconds)
    if s < 60:
        return f"{s}s"
    m, s = divmod(s, 60)
    return f"{m}m{s:02d}s"


def _run(coro):
    """Run async function from sync CLI context."""
    return asyncio.run(coro)


def _configure_cli_logging(verbose: bool) -> None:
    """Simple human-readable logging to stderr for CLI mode."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter("%(asctime)s  %(levelname)-7s  %(message)s", datefmt="%H:%M:%S")
    )
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.INFO if verbose else logging.WARNING)


async def _open_session():
    """Open a session over the on-disk gallery (no processor loop needed)."""
    from gemini_studio.config.loader import get_db_path, load_config
    from gemini_studio.models.sqlite_store import SQLiteKeyValueStore
    from gemini_studio.provider.factory import create_provider
    from gemini_studio.session import StudioSession

    config = load_config()
    store = SQLiteKeyValueStore(str(get_db_path(config)))
    await store.initialize()
    session = StudioSession(
        create_provider(config), store=store, gallery_key=config.storage.gallery_key
    )
    await session.load()
    return session, config


async def _close_session(session) -> None:
    await session.provider.aclose()
    await session.store.close()


def _status_color(status: str) -> str:
    """Return ANSI color for job status."""
    colors = {
        "completed": typer.colors.GREEN,
        "processing": typer.colors.YELLOW,
        "pending": typer.colors.CYAN,
        "failed": typer.colors.RED,
    }
    return colors.get(status, typer.colors.WHITE)


@app.command()
def generate(
    prompt: str = typer.Argument(..., help="Text describing the desired image"),
    aspect_ratio: str = typer.Option("1:1", "--aspect-ratio", "-a", help="1:1, 16:9, 9:16, 4:3 or 3:4"),
    refs: list[str] = typer.Option(None, "--ref", "-r", help="Reference image file (repeatable, max 4)"),
    out: str = typer.Option(None, "--out", "-o", help="Directory to save the image (default: downloads_dir)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show log output"),
):
    """Generate one image inline and save it to disk."""
    from rich.console import Console
    from rich.status import Status

    from gemini_studio.background.worker import QueueProcessor
    from gemini_studio.provider.data_url import file_to_data_url
    from gemini_studio.tools.download_image import download_image
    from gemini_studio.tools.enqueue_job import enqueue_job
    from gemini_studio.tools.reference_images import stage_reference_images

    _configure_cli_logging(verbose)
    console = Console(stderr=True)

    try:
        images = [file_to_data_url(path) for path in refs or []]
    except (OSError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    async def _generate():
        session, config = await _open_session()
        try:
            if images:
                staged = stage_reference_images(images, session=session)
                if staged["dropped"]:
                    console.print(
                        f"[yellow]Only 4 reference images are supported; "
                        f"{staged['dropped']} dropped.[/yellow]"
                    )

            queued = enqueue_job(prompt, aspect_ratio, session=session, config=config)
            for warning in queued["warnings"]:
                console.print(f"[yellow]{warning}[/yellow]")

            processor = QueueProcessor(session.queue, session.gallery, session.provider)
            start = time.monotonic()
            with Status("[dim]Generating image...[/dim]", console=console, spinner="dots"):
                await processor.tick()
            elapsed = time.monotonic() - start

            job = session.queue.get(queued["job_id"])
            if job is not None:
                return None, job.error, elapsed

            item = session.gallery_items[0]
            saved = download_image(
                item.item_id, out or config.output.downloads_dir, session=session
            )
            return saved, None, elapsed
        finally:
            await _close_session(session)

    try:
        saved, error, elapsed = _run(_generate())
    except ToolError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except KeyboardInterrupt:
        typer.echo("\nCancelled.", err=True)
        raise typer.Exit(130)

    if error:
        typer.echo(typer.style(f"✗ Failed: {error}", fg=typer.colors.RED), err=True)
        raise typer.Exit(1)

    typer.echo(
        typer.style("✓ Done", fg=typer.colors.GREEN)
        + f"  item: {saved['item_id']}  time: {_fmt_duration(elapsed)}"
    )
    typer.echo(f"Saved: {saved['file_path']}")


@app.command("gallery")
def list_gallery_cmd(
    limit: int = typer.Option(None, "--limit", "-n", help="Show at most N items"),
):
    """List gallery images, newest first."""
    from gemini_studio.tools.gallery import list_gallery

    async def _list():
        session, _ = await _open_session()
        try:
            return list_gallery(session=session, limit=limit)
        finally:
            await _close_session(session)

    result = _run(_list())
    items = result["items"]

    if not items:
        typer.echo("Gallery is empty.")
        return

    typer.echo(f"{'ITEM ID':<14} {'TYPE':<11} {'SIZE':>9}  PROMPT")
    typer.echo("-" * 80)
    for item in items:
        prompt = item["prompt"]
        if len(prompt) > 40:
            prompt = prompt[:39] + "…"
        size_kb = f"{item['size_bytes'] / 1024:.0f}KB"
        typer.echo(f"{item['item_id']:<14} {item['mime_type']:<11} {size_kb:>9}  {prompt}")

    if result["total"] > len(items):
        typer.echo(f"... {result['total'] - len(items)} more")


@app.command()
def upscale(
    item_id: str = typer.Argument(..., help="Gallery item ID to upscale"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show log output"),
):
    """Upscale a gallery image to 4x resolution, replacing it in place."""
    from rich.console import Console
    from rich.status import Status

    from gemini_studio.tools.upscale_image import upscale_image

    _configure_cli_logging(verbose)
    console = Console(stderr=True)

    async def _upscale():
        session, _ = await _open_session()
        try:
            with Status("[dim]Upscaling...[/dim]", console=console, spinner="dots"):
                return await upscale_image(item_id, session=session)
        finally:
            await _close_session(session)

    try:
        result = _run(_upscale())
    except ToolError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(
        typer.style("✓ Upscaled", fg=typer.colors.GREEN)
        + f"  {result['item_id']}  ({result['size_bytes'] / 1024:.0f}KB)"
    )


@app.command()
def download(
    item_id: str = typer.Argument(..., help="Gallery item ID to save"),
    out: str = typer.Option(None, "--out", "-o", help="Target directory (default: downloads_dir)"),
):
    """Save a gallery image to disk."""
    from gemini_studio.tools.download_image import download_image

    async def _download():
        session, config = await _open_session()
        try:
            return download_image(item_id, out or config.output.downloads_dir, session=session)
        finally:
            await _close_session(session)

    try:
        result = _run(_download())
    except ToolError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Saved: {result['file_path']}")


@app.command()
def serve():
    """Start the MCP server (stdio transport)."""
    from gemini_studio.__main__ import main

    asyncio.run(main())


if __name__ == "__main__":
    app()
