import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from app.exceptions import (
    ConfigurationError,
    FileTooLargeError,
    InvalidFileTypeError,
    InvalidStateError,
    UnknownError,
    UploadError,
)
from app.services.gemini_service import ImageTransformService

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
ALLOWED_MIME_TYPES = {"image/jpeg", "image/png"}
RESULT_MIME_TYPE = "image/png"

# Cosmetic progress checkpoints; only 0 (failed) and 100 (succeeded) carry meaning.
PROGRESS_STARTED = 10
PROGRESS_ENCODED = 30
PROGRESS_RESPONDED = 80
PROGRESS_DONE = 100


class UploadStatus(str, Enum):
    IDLE = "idle"
    SELECTED = "selected"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class SourceImage:
    data: bytes
    mime_type: str
    filename: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class UploadSession:
    source: Optional[SourceImage] = None
    preview_id: Optional[str] = None
    result_image: Optional[bytes] = None
    status: UploadStatus = UploadStatus.IDLE
    progress_percent: int = 0
    error: Optional[UploadError] = None
    error_dismissed: bool = False


def normalize_mime_type(mime_type: Optional[str]) -> str:
    if not mime_type:
        return ""
    return mime_type.split(";", 1)[0].strip().lower()


class UploadWorkflow:
    """
    Drives a single image through selection, validation, remote
    transformation and download.

    One workflow owns exactly one UploadSession. At most one transform
    request is in flight at a time; reset or a new selection cancels it and
    the late result is discarded.
    """

    def __init__(
        self,
        transform_service: ImageTransformService,
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
    ):
        self.transform_service = transform_service
        self.max_upload_bytes = max_upload_bytes
        self.session = UploadSession()
        self._task: Optional[asyncio.Task] = None
        # Bumped on every reset/selection so a stale task cannot write back.
        self._generation = 0

    @property
    def status(self) -> UploadStatus:
        return self.session.status

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    def select(
        self,
        data: bytes,
        mime_type: Optional[str],
        filename: Optional[str] = None,
        declared_size: Optional[int] = None,
    ) -> UploadSession:
        """
        Validate and accept a new source image, replacing whatever the session
        held before.

        :raises FileTooLargeError: the file exceeds the size ceiling.
        :raises InvalidFileTypeError: the file is neither JPEG nor PNG.
        """
        self._clear()

        size = max(declared_size or 0, len(data))
        normalized = normalize_mime_type(mime_type)

        error: Optional[UploadError] = None
        if normalized not in ALLOWED_MIME_TYPES:
            error = InvalidFileTypeError()
        elif size > self.max_upload_bytes:
            error = FileTooLargeError()

        if error is not None:
            logger.info(f"Rejected selection {filename!r} ({normalized}, {size} bytes): {error.kind}")
            self.session.error = error
            raise error

        self.session.source = SourceImage(data=data, mime_type=normalized, filename=filename)
        self.session.preview_id = uuid.uuid4().hex
        self.session.status = UploadStatus.SELECTED
        logger.info(f"Selected {filename!r} ({normalized}, {size} bytes)")
        return self.session

    def start_processing(self) -> Optional[asyncio.Task]:
        """
        Kick off the transform for the selected image.

        Returns the running task, or None when nothing was started: either a
        request is already in flight, or the credential is missing and the
        session failed immediately.

        :raises InvalidStateError: there is no selected image to process.
        """
        if self.session.status == UploadStatus.PROCESSING:
            logger.debug("Process requested while a transform is in flight; ignoring")
            return None

        retriggerable = (UploadStatus.SELECTED, UploadStatus.FAILED)
        if self.session.status not in retriggerable or self.session.source is None:
            raise InvalidStateError(
                f"Cannot process an image while {self.session.status.value}",
                status=self.session.status.value,
            )

        if not self.transform_service.configured:
            logger.error("Transform requested but GEMINI_API_KEY is not configured")
            self._fail(ConfigurationError())
            return None

        self.session.status = UploadStatus.PROCESSING
        self.session.progress_percent = PROGRESS_STARTED
        self.session.error = None
        self.session.error_dismissed = False
        self.session.result_image = None

        self._task = asyncio.create_task(
            self._run(self.session.source, self._generation)
        )
        return self._task

    async def process(self) -> UploadSession:
        task = self.start_processing()
        if task is None and self.in_flight:
            task = self._task
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
        return self.session

    async def _run(self, source: SourceImage, generation: int) -> None:
        try:
            contents = self.transform_service.build_request(source.data, source.mime_type)
            self._set_progress(generation, PROGRESS_ENCODED)

            response = await self.transform_service.generate(contents)
            self._set_progress(generation, PROGRESS_RESPONDED)

            image = self.transform_service.extract_image(response)
        except UploadError as e:
            if generation == self._generation:
                self._fail(e)
            return
        except Exception as e:
            logger.error(f"Unclassified transform failure: {str(e)}", exc_info=True)
            if generation == self._generation:
                self._fail(UnknownError(str(e) or None))
            return

        if generation != self._generation:
            logger.debug("Discarding result of a superseded transform")
            return

        self.session.result_image = image
        self.session.progress_percent = PROGRESS_DONE
        self.session.status = UploadStatus.SUCCEEDED
        logger.info(f"Transform succeeded ({len(image)} bytes)")

    def _set_progress(self, generation: int, percent: int) -> None:
        if generation == self._generation:
            self.session.progress_percent = percent

    def _fail(self, error: UploadError) -> None:
        logger.warning(f"Transform failed ({error.kind}): {error.message}")
        self.session.status = UploadStatus.FAILED
        self.session.progress_percent = 0
        self.session.result_image = None
        self.session.error = error
        self.session.error_dismissed = False

    def download(self) -> Tuple[str, bytes]:
        """
        Return a download filename and the PNG bytes of the result. The
        session status does not change.
        """
        if self.session.status != UploadStatus.SUCCEEDED or self.session.result_image is None:
            raise InvalidStateError(
                "No result is available to download",
                status=self.session.status.value,
            )
        filename = f"tiktop-size-{int(time.time() * 1000)}.png"
        return filename, self.session.result_image

    def reset(self) -> UploadSession:
        """Cancel any in-flight transform and return to Idle with every field cleared."""
        self._clear()
        return self.session

    def dismiss_error(self) -> UploadSession:
        # Presentation only: the status is untouched.
        if self.session.error is not None:
            self.session.error_dismissed = True
        return self.session

    def _clear(self) -> None:
        self._generation += 1
        if self.in_flight:
            logger.info("Cancelling in-flight transform")
            self._task.cancel()
        self._task = None
        self.session = UploadSession()

    def close(self) -> None:
        self._clear()

    def snapshot(self) -> Dict[str, Any]:
        session = self.session
        error = session.error
        visible = error is not None and not session.error_dismissed
        return {
            "status": session.status.value,
            "progress_percent": session.progress_percent,
            "preview_id": session.preview_id,
            "filename": session.source.filename if session.source else None,
            "mime_type": session.source.mime_type if session.source else None,
            "size": session.source.size if session.source else None,
            "has_result": session.result_image is not None,
            "error_kind": error.kind if visible else None,
            "error_message": error.message if visible else None,
        }
