# gemini_studio/models/gallery.py
"""
Gallery of completed generations, synced to a key-value slot.

The in-memory list is authoritative. Every mutation is followed by a full
write of the collection; a failed write is logged and never rolled back.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, replace
from uuid import uuid4

from gemini_studio.models.store import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_GALLERY_KEY = "gemini-studio-gallery"


@dataclass
class GalleryItem:
    """One retained generation result."""

    item_id: str
    src: str  # data URL of the latest image (generated or upscaled)
    prompt: str

    def to_dict(self) -> dict:
        return {"id": self.item_id, "src": self.src, "prompt": self.prompt}

    @classmethod
    def from_dict(cls, data: dict) -> "GalleryItem":
        """
        Build an item from its serialized form.

        Raises:
            ValueError: If a field is missing or not a string
        """
        try:
            item_id, src, prompt = data["id"], data["src"], data["prompt"]
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed gallery entry: {e!r}") from e

        if not all(isinstance(v, str) for v in (item_id, src, prompt)):
            raise ValueError(f"Malformed gallery entry: non-string field in {item_id!r}")
        return cls(item_id=item_id, src=src, prompt=prompt)


def generate_item_id() -> str:
    """Generate a unique gallery item ID (independent of job IDs)."""
    return uuid4().hex[:12]


class GalleryStore:
    """
    Newest-first collection of GalleryItems.

    Writes are serialized by a lock and each write snapshots the collection
    after acquiring it, so the latest state always lands last.
    """

    def __init__(self, store: KeyValueStore, key: str = DEFAULT_GALLERY_KEY) -> None:
        """
        Initialize gallery store.

        Args:
            store: Persistence adapter holding the gallery slot
            key: Slot name for the serialized gallery
        """
        self._store = store
        self._key = key
        self._items: list[GalleryItem] = []
        self._write_lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._items)

    async def load(self) -> None:
        """
        Load the collection from the persistence adapter.

        Missing, corrupt, or unreadable data yields an empty gallery.
        """
        try:
            raw = await self._store.get(self._key)
        except Exception as e:
            logger.error(f"Failed to read gallery from storage: {e}")
            self._items = []
            return

        if raw is None:
            logger.info("No saved gallery found, starting empty")
            self._items = []
            return

        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"expected a list, got {type(data).__name__}")
            self._items = [GalleryItem.from_dict(entry) for entry in data]
        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            logger.error(f"Saved gallery is corrupt, starting empty: {e}")
            self._items = []
            return

        logger.info(f"Loaded {len(self._items)} gallery item(s)")

    def get(self, item_id: str) -> GalleryItem | None:
        for item in self._items:
            if item.item_id == item_id:
                return replace(item)
        return None

    def list_all(self) -> list[GalleryItem]:
        """Copies of all items, newest first."""
        return [replace(item) for item in self._items]

    async def prepend(self, item: GalleryItem) -> None:
        """Insert an item at the front, then persist."""
        self._items.insert(0, replace(item))
        logger.info(f"Added gallery item {item.item_id}")
        await self._persist()

    async def update_src(self, item_id: str, new_src: str) -> GalleryItem | None:
        """
        Replace one item's image in place, then persist.

        Returns:
            Copy of the updated item, or None if item_id is unknown
        """
        for item in self._items:
            if item.item_id == item_id:
                item.src = new_src
                logger.info(f"Updated image for gallery item {item_id}")
                await self._persist()
                return replace(item)

        logger.warning(f"update_src ignored: gallery item {item_id} not found")
        return None

    async def _persist(self) -> None:
        async with self._write_lock:
            payload = json.dumps([item.to_dict() for item in self._items])
            try:
                await self._store.set(self._key, payload)
            except Exception as e:
                logger.error(f"Failed to save gallery ({len(self._items)} items): {e}")
