import logging
from typing import List, Optional

import httpx
from google import genai
from google.genai import errors, types

from app.configs.config import get_settings
from app.exceptions import (
    ConfigurationError,
    ContentPolicyError,
    EmptyResultError,
    TransportError,
    UnknownError,
    UploadError,
)

logger = logging.getLogger(__name__)
settings = get_settings()

OUTPAINT_INSTRUCTION = (
    "Expand this image to a 1200x1200px 1:1 square aspect ratio. "
    "Intelligently outpaint the background to fill the square while keeping "
    "the product centered and perfectly preserved. Ensure the lighting and "
    "textures match the original. The output must be a high-quality product "
    "image suitable for TikTok Shop."
)

# Finish and block reasons reported by Gemini when a safety filter fired.
SAFETY_REASONS = {
    "SAFETY",
    "IMAGE_SAFETY",
    "PROHIBITED_CONTENT",
    "IMAGE_PROHIBITED_CONTENT",
    "BLOCKLIST",
    "SPII",
}

_API_KEY_MARKERS = ("api_key", "api key")


def _reason_name(reason) -> Optional[str]:
    if reason is None:
        return None
    return str(getattr(reason, "value", reason)).upper()


def classify_exception(exc: BaseException) -> UploadError:
    """
    Convert any failure raised while talking to Gemini into one classified
    UploadError. Structured SDK attributes are checked before message markers.
    """
    if isinstance(exc, UploadError):
        return exc

    message = str(exc)
    lowered = message.lower()

    if isinstance(exc, errors.APIError):
        api_message = exc.message or message
        api_lowered = api_message.lower()
        if any(marker in api_lowered for marker in _API_KEY_MARKERS):
            return ConfigurationError()
        if exc.code in (401, 403) or exc.status in ("UNAUTHENTICATED", "PERMISSION_DENIED"):
            return ConfigurationError()
        if "safety" in api_lowered:
            return ContentPolicyError()
        return UnknownError(api_message or None)

    if isinstance(exc, (httpx.TransportError, ConnectionError, TimeoutError, OSError)):
        return TransportError()

    if any(marker in lowered for marker in _API_KEY_MARKERS):
        return ConfigurationError()
    if "safety" in lowered:
        return ContentPolicyError()
    return UnknownError(message or None)


class ImageTransformService:
    """
    Adapter around the Gemini image model used to outpaint product photos
    into a square canvas.

    The adapter owns error classification: every method either returns a
    usable value or raises an UploadError subclass.
    """

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.model = model or settings.GEMINI_MODEL
        self._client = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @property
    def client(self) -> genai.Client:
        if not self.configured:
            raise ConfigurationError()
        if self._client is None:
            try:
                self._client = genai.Client(api_key=self.api_key)
            except Exception as e:
                logger.error(f"Error initializing Gemini client: {str(e)}")
                raise classify_exception(e) from e
        return self._client

    def build_request(self, image: bytes, mime_type: str) -> List[types.Part]:
        """
        Build the content parts for one outpainting request: the inline image
        followed by the fixed instruction.
        """
        return [
            types.Part.from_bytes(data=image, mime_type=mime_type),
            types.Part.from_text(text=OUTPAINT_INSTRUCTION),
        ]

    async def generate(self, contents: List[types.Part]) -> types.GenerateContentResponse:
        """
        Issue exactly one generate_content call. Not retried.

        :raises UploadError: classified failure of the remote call.
        """
        try:
            return await self._generate_content(contents)
        except Exception as e:
            classified = classify_exception(e)
            logger.error(
                f"Gemini request failed ({classified.kind}): {str(e)}", exc_info=True
            )
            raise classified from e

    async def _generate_content(
        self, contents: List[types.Part]
    ) -> types.GenerateContentResponse:
        logger.info(f"Sending outpainting request to {self.model}")
        return await self.client.aio.models.generate_content(
            model=self.model,
            contents=contents,
            config=types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"]),
        )

    def extract_image(self, response: types.GenerateContentResponse) -> bytes:
        """
        Return the first inline image carried by the response.

        :raises ContentPolicyError: no image and the request was blocked for safety.
        :raises EmptyResultError: no image and no safety signal.
        """
        candidates = response.candidates or []
        first = candidates[0] if candidates else None

        parts = []
        if first is not None and first.content is not None:
            parts = first.content.parts or []

        for part in parts:
            if part.inline_data is not None and part.inline_data.data:
                return part.inline_data.data

        feedback = response.prompt_feedback
        if feedback is not None and feedback.block_reason is not None:
            logger.warning(f"Prompt blocked: {_reason_name(feedback.block_reason)}")
            raise ContentPolicyError()
        if first is not None and _reason_name(first.finish_reason) in SAFETY_REASONS:
            logger.warning(f"Generation stopped: {_reason_name(first.finish_reason)}")
            raise ContentPolicyError()

        raise EmptyResultError()


_transform_service: Optional[ImageTransformService] = None


def get_transform_service() -> ImageTransformService:
    """FastAPI dependency returning the process-wide transform adapter."""
    global _transform_service
    if _transform_service is None:
        _transform_service = ImageTransformService()
    return _transform_service
