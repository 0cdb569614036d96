# tests/unit/test_cli.py
"""
CLI unit tests.

Tests each command via typer's CliRunner, using an in-memory session
and a fake provider to avoid network and config-directory side effects.
"""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from conftest import FakeProvider, UPSCALED_DATA_URL, make_data_url
from gemini_studio.cli import _fmt_duration, app
from gemini_studio.config.schema import StudioConfig
from gemini_studio.models.gallery import GalleryItem
from gemini_studio.models.store import InMemoryKeyValueStore
from gemini_studio.provider.base import GenerationError
from gemini_studio.session import StudioSession

runner = CliRunner()

ITEM_ID_1 = "abc123def456"
ITEM_ID_2 = "789012abcdef"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def config(tmp_path: Path) -> StudioConfig:
    return StudioConfig(output={"downloads_dir": str(tmp_path / "downloads")})


def _session_with_items(provider: FakeProvider | None = None, *items: GalleryItem) -> StudioSession:
    session = StudioSession(provider or FakeProvider(), store=InMemoryKeyValueStore())
    for item in reversed(items):
        asyncio.run(session.gallery.prepend(item))
    return session


def _patch_session(session: StudioSession, config: StudioConfig):
    """Patch the CLI's session helpers to use an in-memory session."""
    return (
        patch("gemini_studio.cli._open_session", AsyncMock(return_value=(session, config))),
        patch("gemini_studio.cli._close_session", AsyncMock()),
    )


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestHelp:
    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "Queue prompt-driven image generations" in result.output

    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("generate", "gallery", "upscale", "download", "serve"):
            assert command in result.output


class TestGenerate:
    def test_generate_saves_image(self, config):
        session = _session_with_items()
        open_patch, close_patch = _patch_session(session, config)

        with open_patch, close_patch as mock_close:
            result = runner.invoke(app, ["generate", "a paper boat", "-a", "16:9"])

        assert result.exit_code == 0, result.output
        assert "✓ Done" in result.output
        saved = list(Path(config.output.downloads_dir).iterdir())
        assert len(saved) == 1
        assert saved[0].name.startswith("gemini-studio-pro-")
        assert saved[0].read_bytes() == b"fake-png-bytes"
        assert session.gallery_items[0].prompt == "a paper boat"
        mock_close.assert_awaited_once()

    def test_generate_with_reference_files(self, config, tmp_path):
        ref = tmp_path / "ref.png"
        ref.write_bytes(b"reference-bytes")
        provider = FakeProvider()
        session = _session_with_items(provider)
        open_patch, close_patch = _patch_session(session, config)

        with open_patch, close_patch:
            result = runner.invoke(app, ["generate", "restyle", "-r", str(ref)])

        assert result.exit_code == 0, result.output
        assert provider.calls[0][2] == (make_data_url(b"reference-bytes"),)

    def test_generate_reference_not_an_image(self, config, tmp_path):
        notes = tmp_path / "notes.txt"
        notes.write_text("hello")

        result = runner.invoke(app, ["generate", "x", "-r", str(notes)])

        assert result.exit_code == 1
        assert "Not an image file" in result.output

    def test_generate_failure_exits_nonzero(self, config):
        provider = FakeProvider(results=[GenerationError("Request blocked: SAFETY.")])
        session = _session_with_items(provider)
        open_patch, close_patch = _patch_session(session, config)

        with open_patch, close_patch:
            result = runner.invoke(app, ["generate", "something"])

        assert result.exit_code == 1
        assert "Failed: Request blocked: SAFETY." in result.output
        assert session.gallery_items == []

    def test_generate_invalid_aspect_ratio(self, config):
        session = _session_with_items()
        open_patch, close_patch = _patch_session(session, config)

        with open_patch, close_patch:
            result = runner.invoke(app, ["generate", "x", "-a", "5:4"])

        assert result.exit_code == 1
        assert "Invalid aspect ratio" in result.output


class TestGallery:
    def test_gallery_empty(self, config):
        open_patch, close_patch = _patch_session(_session_with_items(), config)

        with open_patch, close_patch:
            result = runner.invoke(app, ["gallery"])

        assert result.exit_code == 0
        assert "Gallery is empty." in result.output

    def test_gallery_lists_items(self, config):
        session = _session_with_items(
            None,
            GalleryItem(ITEM_ID_1, make_data_url(), "newest image"),
            GalleryItem(ITEM_ID_2, make_data_url(b"j", "image/jpeg"), "older image"),
        )
        open_patch, close_patch = _patch_session(session, config)

        with open_patch, close_patch:
            result = runner.invoke(app, ["gallery"])

        assert result.exit_code == 0
        assert result.output.index(ITEM_ID_1) < result.output.index(ITEM_ID_2)
        assert "image/jpeg" in result.output

    def test_gallery_limit(self, config):
        session = _session_with_items(
            None,
            GalleryItem(ITEM_ID_1, make_data_url(), "one"),
            GalleryItem(ITEM_ID_2, make_data_url(), "two"),
        )
        open_patch, close_patch = _patch_session(session, config)

        with open_patch, close_patch:
            result = runner.invoke(app, ["gallery", "-n", "1"])

        assert ITEM_ID_2 not in result.output
        assert "... 1 more" in result.output


class TestUpscale:
    def test_upscale_replaces_image(self, config):
        session = _session_with_items(None, GalleryItem(ITEM_ID_1, make_data_url(), "p"))
        open_patch, close_patch = _patch_session(session, config)

        with open_patch, close_patch:
            result = runner.invoke(app, ["upscale", ITEM_ID_1])

        assert result.exit_code == 0, result.output
        assert "✓ Upscaled" in result.output
        assert session.gallery.get(ITEM_ID_1).src == UPSCALED_DATA_URL

    def test_upscale_unknown_item(self, config):
        open_patch, close_patch = _patch_session(_session_with_items(), config)

        with open_patch, close_patch:
            result = runner.invoke(app, ["upscale", ITEM_ID_1])

        assert result.exit_code == 1
        assert "not found" in result.output


class TestDownload:
    def test_download_to_directory(self, config, tmp_path):
        session = _session_with_items(None, GalleryItem(ITEM_ID_1, make_data_url(), "p"))
        open_patch, close_patch = _patch_session(session, config)

        with open_patch, close_patch:
            result = runner.invoke(app, ["download", ITEM_ID_1, "-o", str(tmp_path / "here")])

        assert result.exit_code == 0
        target = tmp_path / "here" / f"gemini-studio-pro-{ITEM_ID_1}.png"
        assert target.read_bytes() == b"fake-png-bytes"
        assert str(target) in result.output


@pytest.mark.parametrize(
    "seconds, expected",
    [(5, "5s"), (59.9, "59s"), (65, "1m05s"), (600, "10m00s")],
)
def test_fmt_duration(seconds, expected):
    assert _fmt_duration(seconds) == expected
