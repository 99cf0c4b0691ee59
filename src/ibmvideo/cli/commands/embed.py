"""CLI commands for parsing IBM Video embed URLs and caching their thumbnails."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ibmvideo.config.settings import Settings, get_settings
from ibmvideo.models.embed import DefaultQuality, EmbedReference, EmbedUrlParameters, WMode
from ibmvideo.services.thumbnails import ThumbnailCache, ThumbnailCacheConfigurationError
from ibmvideo.utils.validation import (
    EMBED_URL_SCHEMES,
    InvalidEmbedUrlError,
    assemble_embed_url,
    parse_embed_url,
)
from ibmvideo.utils.video_data import generate_thumbnail_reference_id, serialize_video_data


class EmbedExitCode:
    """Mapping of meaningful CLI exit codes."""

    SUCCESS = 0
    INVALID_INPUT = 1
    THUMBNAIL_UNAVAILABLE = 2
    CONFIGURATION_ERROR = 3


def register(app: typer.Typer, console: Console) -> None:
    """Register CLI commands for embed URLs, stored video data and thumbnails."""

    @lru_cache(maxsize=1)
    def get_cli_settings() -> Settings:
        return get_settings()

    def parse_or_exit(url: str) -> EmbedReference:
        try:
            return parse_embed_url(url.strip())
        except InvalidEmbedUrlError as exc:
            console.print(f"[red]Error:[/red] {exc}")
            raise typer.Exit(code=EmbedExitCode.INVALID_INPUT) from exc

    @app.command("parse")
    def parse(
        url: str = typer.Argument(..., help="IBM Video embed URL to parse"),
        json_output: bool = typer.Option(False, "--json", help="Output the reference as JSON"),
    ) -> None:
        reference = parse_or_exit(url)
        if json_output:
            typer.echo(json.dumps(reference.model_dump(mode="json"), ensure_ascii=False, indent=2))
            return

        table = Table(title="IBM Video embed", show_header=False)
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        table.add_row("Kind", "recorded video" if reference.is_recorded else "live stream (channel)")
        table.add_row("ID", reference.id)
        table.add_row("Canonical URL", assemble_embed_url(reference, "https://"))
        console.print(table)

    @app.command("embed")
    def embed(
        url: str = typer.Argument(..., help="IBM Video embed URL to rebuild"),
        scheme: Optional[str] = typer.Option(None, "--scheme", help='URL scheme prefix, e.g. "https://" or "//"'),
        autoplay: Optional[bool] = typer.Option(None, "--autoplay/--no-autoplay", help="Start playing on load"),
        volume: Optional[int] = typer.Option(None, "--volume", min=0, max=100, help="Initial volume (0-100)"),
        quality: Optional[DefaultQuality] = typer.Option(None, "--quality", help="Default playback quality"),
        wmode: Optional[WMode] = typer.Option(None, "--wmode", help="Flash window mode"),
        no_params: bool = typer.Option(False, "--no-params", help="Emit the bare URL without a query string"),
    ) -> None:
        reference = parse_or_exit(url)
        settings = get_cli_settings()

        scheme = settings.embed_scheme if scheme is None else scheme.lower()
        if scheme not in EMBED_URL_SCHEMES:
            allowed = ", ".join(repr(value) for value in EMBED_URL_SCHEMES)
            console.print(f"[red]Error:[/red] Unsupported scheme {scheme!r}; expected one of {allowed}.")
            raise typer.Exit(code=EmbedExitCode.INVALID_INPUT)

        if no_params:
            typer.echo(assemble_embed_url(reference, scheme))
            return

        overrides: Dict[str, Any] = {
            "use_autoplay": autoplay,
            "initial_volume": volume,
            "default_quality": quality,
            "wmode": wmode,
        }
        try:
            parameters = EmbedUrlParameters.model_validate(
                {
                    **settings.player.model_dump(),
                    **{key: value for key, value in overrides.items() if value is not None},
                }
            )
        except ValidationError as exc:
            console.print(f"[red]Error:[/red] Invalid player parameters: {exc}")
            raise typer.Exit(code=EmbedExitCode.INVALID_INPUT) from exc

        typer.echo(assemble_embed_url(reference, scheme, parameters))

    @app.command("video-data")
    def video_data(
        url: str = typer.Argument(..., help="IBM Video embed URL to store"),
        reference_id: Optional[str] = typer.Option(
            None, "--reference-id", help="Reuse an existing thumbnail reference ID instead of minting one"
        ),
    ) -> None:
        reference = parse_or_exit(url)
        try:
            typer.echo(serialize_video_data(reference, reference_id))
        except ValueError as exc:
            console.print(f"[red]Error:[/red] {exc}")
            raise typer.Exit(code=EmbedExitCode.INVALID_INPUT) from exc

    @app.command("thumbnail")
    def thumbnail(
        url: str = typer.Argument(..., help="IBM Video embed URL whose thumbnail should be cached"),
        reference_id: Optional[str] = typer.Option(
            None, "--reference-id", help="Thumbnail reference ID (a fresh one forces a new download)"
        ),
        directory: Optional[Path] = typer.Option(
            None, "--directory", "-d", help="Thumbnails directory (defaults to IBM_VIDEO_THUMBNAILS_DIRECTORY)"
        ),
    ) -> None:
        reference = parse_or_exit(url)
        if reference_id is not None and not reference_id:
            console.print("[red]Error:[/red] Thumbnail reference ID must not be empty.")
            raise typer.Exit(code=EmbedExitCode.INVALID_INPUT)
        if reference_id is None:
            reference_id = generate_thumbnail_reference_id()

        try:
            with ThumbnailCache(settings=get_cli_settings(), console=console, directory=directory) as cache:
                result = cache.resolve(reference.id, reference.is_recorded, reference_id)
        except ThumbnailCacheConfigurationError as exc:
            console.print(f"[red]Configuration error:[/red] {exc}")
            raise typer.Exit(code=EmbedExitCode.CONFIGURATION_ERROR) from exc

        if not result.available:
            detail = f" ({result.detail})" if result.detail else ""
            console.print(f"[yellow]No thumbnail available:[/yellow] {result.outcome.value}{detail}")
            raise typer.Exit(code=EmbedExitCode.THUMBNAIL_UNAVAILABLE)

        typer.echo(str(result.path))


__all__ = ["EmbedExitCode", "register"]
