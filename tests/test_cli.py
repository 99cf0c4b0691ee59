"""Tests for the ``ibm-video`` command-line interface."""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest
import typer
from rich.console import Console
from typer.testing import CliRunner

from ibmvideo.cli.commands.embed import EmbedExitCode
from ibmvideo.cli.main import create_app

RECORDED_URL = "https://video.ibm.com/embed/recorded/XyZ123?foo=bar"

runner = CliRunner()


@pytest.fixture
def cli_console() -> Console:
    return Console(file=io.StringIO(), width=200)


@pytest.fixture
def app(cli_console: Console) -> typer.Typer:
    return create_app(console=cli_console)


def test_no_command_prints_ready_message(app: typer.Typer, cli_console: Console) -> None:
    result = runner.invoke(app, [])

    assert result.exit_code == EmbedExitCode.SUCCESS
    assert "IBM Video CLI ready" in cli_console.file.getvalue()


def test_parse_json(app: typer.Typer) -> None:
    result = runner.invoke(app, ["parse", RECORDED_URL, "--json"])

    assert result.exit_code == EmbedExitCode.SUCCESS
    assert json.loads(result.stdout) == {"id": "XyZ123", "is_recorded": True}


def test_parse_table(app: typer.Typer, cli_console: Console) -> None:
    result = runner.invoke(app, ["parse", "//video.ibm.com/embed/42"])

    assert result.exit_code == EmbedExitCode.SUCCESS
    output = cli_console.file.getvalue()
    assert "live stream" in output
    assert "https://video.ibm.com/embed/42" in output


def test_parse_invalid_url(app: typer.Typer, cli_console: Console) -> None:
    result = runner.invoke(app, ["parse", "ftp://video.ibm.com/embed/abc"])

    assert result.exit_code == EmbedExitCode.INVALID_INPUT
    assert "Error:" in cli_console.file.getvalue()


def test_embed_without_params(app: typer.Typer) -> None:
    result = runner.invoke(app, ["embed", RECORDED_URL, "--scheme", "https://", "--no-params"])

    assert result.exit_code == EmbedExitCode.SUCCESS
    assert result.stdout.strip() == "https://video.ibm.com/embed/recorded/XyZ123"


def test_embed_with_overrides(app: typer.Typer) -> None:
    result = runner.invoke(
        app,
        ["embed", RECORDED_URL, "--scheme", "//", "--volume", "20", "--quality", "high", "--autoplay"],
    )

    assert result.exit_code == EmbedExitCode.SUCCESS
    url = result.stdout.strip()
    assert url.startswith("//video.ibm.com/embed/recorded/XyZ123?")
    assert "initialVolume=20" in url
    assert "useAutoplay=true" in url
    assert "defaultQuality=high" in url


def test_embed_rejects_unknown_scheme(app: typer.Typer) -> None:
    result = runner.invoke(app, ["embed", RECORDED_URL, "--scheme", "ftp://"])

    assert result.exit_code == EmbedExitCode.INVALID_INPUT


def test_video_data_with_reference_id(app: typer.Typer) -> None:
    result = runner.invoke(app, ["video-data", RECORDED_URL, "--reference-id", "token"])

    assert result.exit_code == EmbedExitCode.SUCCESS
    assert json.loads(result.stdout) == {"id": "XyZ123", "is_recorded": True, "thumbnail_reference_id": "token"}


def test_video_data_mints_reference_id(app: typer.Typer) -> None:
    result = runner.invoke(app, ["video-data", RECORDED_URL])

    assert result.exit_code == EmbedExitCode.SUCCESS
    assert json.loads(result.stdout)["thumbnail_reference_id"]


def test_thumbnail_with_unusable_directory(app: typer.Typer, tmp_path: Path) -> None:
    """A directory path occupied by a file is a configuration error."""

    occupied = tmp_path / "occupied"
    occupied.write_text("file", encoding="utf-8")

    result = runner.invoke(app, ["thumbnail", RECORDED_URL, "--reference-id", "token", "--directory", str(occupied)])

    assert result.exit_code == EmbedExitCode.CONFIGURATION_ERROR
