# tests/unit/conftest.py
"""Shared fakes for queue, session, and tool tests."""

import asyncio
import base64
from collections.abc import Callable, Sequence

import pytest

from gemini_studio.models.jobs import AspectRatio
from gemini_studio.models.store import InMemoryKeyValueStore
from gemini_studio.provider.base import ImageProvider
from gemini_studio.session import StudioSession


def make_data_url(payload: bytes = b"fake-png-bytes", mime_type: str = "image/png") -> str:
    return f"data:{mime_type};base64,{base64.b64encode(payload).decode('ascii')}"


PNG_DATA_URL = make_data_url()
UPSCALED_DATA_URL = make_data_url(b"fake-upscaled-png-bytes")


class FakeProvider(ImageProvider):
    """
    Scriptable provider.

    results: queued outcomes for generate() (str = image, Exception = raised).
    gate: when set, every call waits on it before returning.
    on_generate: called with the prompt when a generate() call starts.
    """

    def __init__(
        self,
        results: Sequence[object] = (),
        gate: asyncio.Event | None = None,
        on_generate: Callable[[str], None] | None = None,
        upscale_result: object = UPSCALED_DATA_URL,
        max_refs: int | None = None,
    ) -> None:
        self.results = list(results)
        self.gate = gate
        self.on_generate = on_generate
        self.upscale_result = upscale_result
        self.max_refs = max_refs
        self.calls: list[tuple[str, AspectRatio, tuple[str, ...]]] = []
        self.upscale_calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    @property
    def max_reference_images(self) -> int | None:
        return self.max_refs

    async def generate(self, prompt, aspect_ratio, reference_images=()):
        self.calls.append((prompt, aspect_ratio, tuple(reference_images)))
        if self.on_generate:
            self.on_generate(prompt)

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            else:
                await asyncio.sleep(0)

            result = self.results.pop(0) if self.results else PNG_DATA_URL
            if isinstance(result, BaseException):
                raise result
            return result
        finally:
            self.in_flight -= 1

    async def upscale(self, image):
        self.upscale_calls.append(image)
        if self.gate is not None:
            await self.gate.wait()
        if isinstance(self.upscale_result, BaseException):
            raise self.upscale_result
        return self.upscale_result

    async def aclose(self) -> None:
        self.closed = True


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll predicate on the event loop until true or fail after timeout."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.01)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def session(provider: FakeProvider) -> StudioSession:
    return StudioSession(provider, store=InMemoryKeyValueStore())
