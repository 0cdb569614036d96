# gemini_studio/provider/gemini.py
"""Gemini image client over the Generative Language REST API."""

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from gemini_studio.models.jobs import AspectRatio

from .base import GenerationError, ImageProvider
from .data_url import parse_data_url, to_data_url
from .retry import gemini_retry

logger = logging.getLogger(__name__)

UPSCALE_INSTRUCTION = (
    "Please upscale this image to 4x its original resolution. Focus on enhancing "
    "details and clarity without adding, removing, or changing any elements in "
    "the original image."
)

# finishReason values that mean the candidate was withheld by policy
_BLOCKING_FINISH_REASONS = {
    "SAFETY",
    "IMAGE_SAFETY",
    "PROHIBITED_CONTENT",
    "BLOCKLIST",
    "SPII",
}


class GeminiImageClient(ImageProvider):
    """
    Async Gemini image client.

    Handles:
    - Text-to-image through the Imagen :predict endpoint (honours aspect ratio)
    - Image-conditioned generation and upscaling through :generateContent
    - Policy blocks and empty responses mapped to GenerationError
    - Transient HTTP failures retried with backoff
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        image_model: str = "imagen-4.0-generate-001",
        multimodal_model: str = "gemini-2.5-flash-image-preview",
        timeout: int = 120,
        max_reference_images: int | None = 1,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize Gemini client.

        Args:
            api_key: Gemini API key (None = every call fails with a clear error)
            base_url: API base URL
            image_model: Text-to-image model
            multimodal_model: Image-conditioned model, also used for upscaling
            timeout: Request timeout in seconds
            max_reference_images: Reference images sent per request (None = all)
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.image_model = image_model
        self.multimodal_model = multimodal_model
        self._api_key = api_key
        self._max_reference_images = max_reference_images
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    @property
    def max_reference_images(self) -> int | None:
        return self._max_reference_images

    async def generate(
        self,
        prompt: str,
        aspect_ratio: AspectRatio,
        reference_images: Sequence[str] = (),
    ) -> str:
        """
        Generate one image.

        Zero reference images use the text-to-image model with the requested
        aspect ratio. Otherwise the multimodal model is used and the aspect
        ratio is not applied.

        Returns:
            Data URL of the generated image

        Raises:
            GenerationError: On API failure, policy block, or empty response
        """
        aspect_ratio = AspectRatio(aspect_ratio)
        logger.info(
            f"Generating image: aspect_ratio={aspect_ratio.value}, "
            f"references={len(reference_images)}, prompt={prompt[:80]!r}"
        )

        if not reference_images:
            return await self._generate_from_text(prompt, aspect_ratio)

        images = list(reference_images)
        limit = self._max_reference_images
        if limit is not None and len(images) > limit:
            logger.warning(
                f"{self.multimodal_model} accepts {limit} reference image(s); "
                f"using the first {limit} of {len(images)} provided"
            )
            images = images[:limit]

        parts = [_inline_part(image) for image in images]
        parts.append({"text": prompt})
        return await self._generate_content(
            parts, empty_message="Image generation failed: No image data received from API."
        )

    async def upscale(self, image: str) -> str:
        """
        Upscale an image to 4x resolution with the multimodal model.

        Raises:
            GenerationError: On API failure, policy block, or empty response
        """
        logger.info("Upscaling image")
        parts = [_inline_part(image), {"text": UPSCALE_INSTRUCTION}]
        return await self._generate_content(
            parts, empty_message="Upscaling failed: No image data received from API."
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _generate_from_text(self, prompt: str, aspect_ratio: AspectRatio) -> str:
        body = {
            "instances": [{"prompt": prompt}],
            "parameters": {
                "sampleCount": 1,
                "aspectRatio": aspect_ratio.value,
                "outputOptions": {"mimeType": "image/png"},
            },
        }
        payload = await self._call(self.image_model, "predict", body)

        predictions = payload.get("predictions") or []
        first = predictions[0] if predictions else {}
        if first.get("bytesBase64Encoded"):
            logger.info("Text-to-image generated successfully")
            return to_data_url(first["bytesBase64Encoded"], first.get("mimeType") or "image/png")

        if first.get("raiFilteredReason"):
            raise GenerationError.blocked(first["raiFilteredReason"])

        logger.error(f"Text-to-image response had no image data: {_describe(payload)}")
        raise GenerationError("Image generation failed: No image data received from API.")

    async def _generate_content(self, parts: list[dict], empty_message: str) -> str:
        body = {
            "contents": [{"parts": parts}],
            "generationConfig": {"responseModalities": ["IMAGE", "TEXT"]},
        }
        payload = await self._call(self.multimodal_model, "generateContent", body)

        block_reason = (payload.get("promptFeedback") or {}).get("blockReason")
        if block_reason:
            raise GenerationError.blocked(block_reason)

        candidates = payload.get("candidates") or []
        candidate = candidates[0] if candidates else {}
        for part in (candidate.get("content") or {}).get("parts") or []:
            inline = part.get("inlineData") or part.get("inline_data")
            if inline and inline.get("data"):
                mime_type = inline.get("mimeType") or inline.get("mime_type") or "image/png"
                logger.info("Multimodal image generated successfully")
                return to_data_url(inline["data"], mime_type)

        finish_reason = candidate.get("finishReason")
        if finish_reason in _BLOCKING_FINISH_REASONS:
            raise GenerationError.blocked(finish_reason)

        logger.error(f"generateContent response had no image data: {_describe(payload)}")
        raise GenerationError(empty_message)

    async def _call(self, model: str, method: str, body: dict) -> dict[str, Any]:
        """POST to a model method, translating transport/HTTP errors to GenerationError."""
        if not self._api_key:
            raise GenerationError(
                "Gemini API key not configured (set gemini.api_key or GEMINI_API_KEY)"
            )

        url = f"{self.base_url}/models/{model}:{method}"
        try:
            return await self._post(url, body)
        except httpx.HTTPStatusError as e:
            raise GenerationError(_api_error_message(e.response)) from e
        except httpx.HTTPError as e:
            raise GenerationError(f"Gemini request failed: {type(e).__name__}: {e}") from e
        except ValueError as e:
            # Non-JSON body
            raise GenerationError(f"Gemini returned an unreadable response: {e}") from e

    @gemini_retry
    async def _post(self, url: str, body: dict) -> dict[str, Any]:
        response = await self._client.post(
            url,
            json=body,
            headers={"x-goog-api-key": self._api_key or ""},
        )
        response.raise_for_status()
        return response.json()


def _inline_part(image: str) -> dict:
    try:
        mime_type, data = parse_data_url(image)
    except ValueError as e:
        raise GenerationError(str(e)) from e
    return {"inlineData": {"mimeType": mime_type, "data": data}}


def _api_error_message(response: httpx.Response) -> str:
    """Extract the API's error message, falling back to the status line."""
    try:
        error = response.json().get("error") or {}
        message = error.get("message")
    except (ValueError, AttributeError):
        message = None
    prefix = f"Gemini API error {response.status_code}"
    return f"{prefix}: {message}" if message else f"{prefix}: {response.reason_phrase}"


def _describe(payload: dict) -> str:
    """Short payload summary for logs (image data is never logged)."""
    candidates = payload.get("candidates") or []
    finish = candidates[0].get("finishReason") if candidates else None
    return f"keys={sorted(payload)}, candidates={len(candidates)}, finishReason={finish}"
