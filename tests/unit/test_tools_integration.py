# tests/unit/test_tools_integration.py
"""
Integration tests for the MCP tool layer.

Each tool runs against a real StudioSession (in-memory store, fake
provider) to check response shapes and ToolError mapping.
"""

import base64

import pytest
from fastmcp.exceptions import ToolError

from conftest import PNG_DATA_URL, UPSCALED_DATA_URL, FakeProvider, make_data_url
from gemini_studio.background.worker import QueueProcessor
from gemini_studio.config.schema import StudioConfig
from gemini_studio.models.gallery import GalleryItem
from gemini_studio.models.store import InMemoryKeyValueStore
from gemini_studio.provider.base import GenerationError
from gemini_studio.session import StudioSession
from gemini_studio.tools.download_image import FILENAME_PREFIX, download_image
from gemini_studio.tools.enqueue_job import enqueue_job
from gemini_studio.tools.gallery import list_gallery, select_image
from gemini_studio.tools.list_queue import list_queue, remove_job
from gemini_studio.tools.reference_images import (
    clear_reference_images,
    remove_reference_image,
    stage_reference_images,
)
from gemini_studio.tools.upscale_image import upscale_image

ITEM_ID = "gallery-item-0001"


@pytest.fixture
def config() -> StudioConfig:
    return StudioConfig()


async def _add_item(session: StudioSession, item_id: str = ITEM_ID, src: str = PNG_DATA_URL):
    await session.gallery.prepend(GalleryItem(item_id=item_id, src=src, prompt="a red fox"))


class TestReferenceImageTools:
    def test_stage_reports_accepted_and_dropped(self, session):
        images = [make_data_url(f"ref{n}".encode()) for n in range(6)]

        result = stage_reference_images(images, session=session)

        assert result == {"staged_count": 4, "accepted": 4, "dropped": 2, "remaining": 0}

    def test_malformed_image_past_capacity_is_dropped(self, session):
        images = [make_data_url(f"ref{n}".encode()) for n in range(4)] + ["not-a-data-url"]

        result = stage_reference_images(images, session=session)

        assert result["accepted"] == 4
        assert result["dropped"] == 1
        assert session.staged_images == tuple(images[:4])

    def test_full_staging_drops_without_validating(self, session):
        stage_reference_images([make_data_url(f"r{n}".encode()) for n in range(4)], session=session)

        result = stage_reference_images(["garbage"], session=session)

        assert result == {"staged_count": 4, "accepted": 0, "dropped": 1, "remaining": 0}

    def test_stage_rejects_malformed_data_url(self, session):
        with pytest.raises(ToolError, match="Reference image 2"):
            stage_reference_images([PNG_DATA_URL, "not-a-data-url"], session=session)
        assert session.staged_images == ()

    def test_stage_rejects_non_image_type(self, session):
        text_url = "data:text/plain;base64," + base64.b64encode(b"hi").decode()
        with pytest.raises(ToolError, match="non-image"):
            stage_reference_images([text_url], session=session)

    def test_remove_and_clear(self, session):
        stage_reference_images([make_data_url(b"a"), make_data_url(b"b")], session=session)

        result = remove_reference_image(0, session=session)
        assert result["staged_count"] == 1
        assert session.staged_images == (make_data_url(b"b"),)

        result = clear_reference_images(session=session)
        assert result["staged_count"] == 0
        assert result["remaining"] == 4

    def test_remove_out_of_range(self, session):
        with pytest.raises(ToolError):
            remove_reference_image(0, session=session)


class TestEnqueueJob:
    def test_enqueue_returns_position(self, session, config):
        first = enqueue_job("a castle", "1:1", session=session, config=config)
        second = enqueue_job("a moat", "16:9", session=session, config=config)

        assert first["status"] == "pending"
        assert first["position"] == 1
        assert second["position"] == 2
        assert second["aspect_ratio"] == "16:9"
        assert first["warnings"] == []

    def test_enqueue_captures_staged_images(self, session, config):
        stage_reference_images([make_data_url(b"a"), make_data_url(b"b")], session=session)

        result = enqueue_job("blend", "1:1", session=session, config=config)

        assert result["reference_images"] == 2
        assert session.staged_images == ()

    def test_enqueue_warns_when_provider_uses_fewer_refs(self, config):
        session = StudioSession(FakeProvider(max_refs=1), store=InMemoryKeyValueStore())
        stage_reference_images([make_data_url(b"a"), make_data_url(b"b")], session=session)

        result = enqueue_job("blend", "4:3", session=session, config=config)

        assert any("only the first 1 of 2" in w for w in result["warnings"])
        assert any("aspect ratio (4:3)" in w for w in result["warnings"])

    @pytest.mark.parametrize("prompt", ["", "   "])
    def test_empty_prompt_rejected(self, session, config, prompt):
        stage_reference_images([make_data_url(b"keep")], session=session)

        with pytest.raises(ToolError, match="empty"):
            enqueue_job(prompt, "1:1", session=session, config=config)

        assert session.jobs == []
        assert session.staged_images == (make_data_url(b"keep"),)

    def test_invalid_aspect_ratio_rejected(self, session, config):
        with pytest.raises(ToolError, match="Invalid aspect ratio"):
            enqueue_job("x", "21:9", session=session, config=config)

    def test_long_prompt_truncated(self, session):
        config = StudioConfig(queue={"max_prompt_length": 10})
        result = enqueue_job("x" * 50, "1:1", session=session, config=config)
        assert session.queue.get(result["job_id"]).prompt == "x" * 10
        assert "Prompt truncated from 50 to 10 characters." in result["warnings"]

    def test_prompt_within_limit_has_no_truncation_warning(self, session, config):
        result = enqueue_job("  padded prompt  ", "1:1", session=session, config=config)
        assert not any("truncated" in w for w in result["warnings"])


class TestQueueTools:
    @pytest.mark.asyncio
    async def test_list_queue_shows_failed_job(self, config):
        provider = FakeProvider(results=[GenerationError("Gemini API error 400: bad prompt")])
        session = StudioSession(provider, store=InMemoryKeyValueStore())
        queued = enqueue_job("y" * 100, "1:1", session=session, config=config)
        await QueueProcessor(session.queue, session.gallery, provider).tick()

        result = list_queue(session=session)

        assert result["total"] == 1
        assert result["pending"] == 0
        assert result["is_processing"] is False
        job = result["jobs"][0]
        assert job["job_id"] == queued["job_id"]
        assert job["status"] == "failed"
        assert job["error"] == "Gemini API error 400: bad prompt"
        assert len(job["prompt"]) == 80

    def test_remove_pending_job(self, session, config):
        queued = enqueue_job("x", "1:1", session=session, config=config)

        result = remove_job(queued["job_id"], session=session)

        assert result["removed"] is True
        assert list_queue(session=session)["total"] == 0

    def test_remove_processing_job_refused(self, session, config):
        queued = enqueue_job("x", "1:1", session=session, config=config)
        session.queue.mark_processing(queued["job_id"])

        result = remove_job(queued["job_id"], session=session)

        assert result["removed"] is False
        assert "processing" in result["message"]

    def test_remove_unknown_job(self, session):
        with pytest.raises(ToolError, match="not found"):
            remove_job("abcdef123456", session=session)

    @pytest.mark.parametrize("bad_id", ["short", "has spaces in it", "../../etc/passwd"])
    def test_remove_invalid_id(self, session, bad_id):
        with pytest.raises(ToolError, match="Invalid job ID"):
            remove_job(bad_id, session=session)


class TestGalleryTools:
    @pytest.mark.asyncio
    async def test_list_gallery_omits_src(self, session):
        await _add_item(session, "gallery-item-0001")
        await _add_item(session, "gallery-item-0002")

        result = list_gallery(session=session)

        assert result["total"] == 2
        assert [i["item_id"] for i in result["items"]] == [
            "gallery-item-0002",
            "gallery-item-0001",
        ]
        first = result["items"][0]
        assert "src" not in first
        assert first["mime_type"] == "image/png"
        assert first["size_bytes"] == len(b"fake-png-bytes")

    @pytest.mark.asyncio
    async def test_list_gallery_limit(self, session):
        for n in range(3):
            await _add_item(session, f"gallery-item-000{n}")

        result = list_gallery(session=session, limit=1)

        assert len(result["items"]) == 1
        assert result["total"] == 3

    @pytest.mark.asyncio
    async def test_select_image(self, session):
        await _add_item(session)

        result = select_image(ITEM_ID, session=session)

        assert result["src"] == PNG_DATA_URL
        assert session.selected_item.item_id == ITEM_ID

    def test_select_unknown(self, session):
        with pytest.raises(ToolError, match="not found"):
            select_image("missing-item-01", session=session)


class TestUpscaleTool:
    @pytest.mark.asyncio
    async def test_upscale_success(self, session):
        await _add_item(session)

        result = await upscale_image(ITEM_ID, session=session, include_src=True)

        assert result["src"] == UPSCALED_DATA_URL
        assert result["message"] == "Image upscaled."
        assert session.gallery.get(ITEM_ID).src == UPSCALED_DATA_URL

    @pytest.mark.asyncio
    async def test_upscale_provider_failure(self):
        provider = FakeProvider(upscale_result=GenerationError.blocked("SAFETY"))
        session = StudioSession(provider, store=InMemoryKeyValueStore())
        await _add_item(session)

        with pytest.raises(ToolError, match="Upscale failed: Request blocked: SAFETY."):
            await upscale_image(ITEM_ID, session=session)

        assert session.gallery.get(ITEM_ID).src == PNG_DATA_URL

    @pytest.mark.asyncio
    async def test_upscale_unknown_item(self, session):
        with pytest.raises(ToolError, match="not found"):
            await upscale_image("missing-item-01", session=session)


class TestDownloadTool:
    @pytest.mark.asyncio
    async def test_download_writes_file(self, session, tmp_path):
        await _add_item(session)

        result = download_image(ITEM_ID, tmp_path / "out", session=session)

        expected = tmp_path / "out" / f"{FILENAME_PREFIX}{ITEM_ID}.png"
        assert result["file_path"] == str(expected)
        assert expected.read_bytes() == b"fake-png-bytes"
        assert result["size_bytes"] == len(b"fake-png-bytes")

    @pytest.mark.asyncio
    async def test_download_uses_mime_extension(self, session, tmp_path):
        await _add_item(session, src=make_data_url(b"jpeg-bytes", "image/jpeg"))

        result = download_image(ITEM_ID, tmp_path, session=session)

        assert result["file_path"].endswith(".jpg")

    @pytest.mark.asyncio
    async def test_download_corrupt_payload(self, session, tmp_path):
        await _add_item(session, src="data:image/png;base64,***")

        with pytest.raises(ToolError, match="unreadable image"):
            download_image(ITEM_ID, tmp_path, session=session)

    def test_download_unknown(self, session, tmp_path):
        with pytest.raises(ToolError, match="not found"):
            download_image("missing-item-01", tmp_path, session=session)
