import logging
import time
from collections import OrderedDict
from typing import Callable, Optional, Tuple

from app.configs.config import get_settings
from app.services.gemini_service import ImageTransformService
from app.services.upload_workflow import UploadWorkflow

logger = logging.getLogger(__name__)
settings = get_settings()


class WorkflowRegistry:
    """
    In-memory map of upload-session ids to their UploadWorkflow.

    Entries untouched for longer than ``ttl_seconds`` are evicted on access.
    At most ``max_sessions`` entries are held; past that the least recently
    used one is closed and dropped.
    """

    def __init__(
        self,
        ttl_seconds: Optional[int] = None,
        max_upload_bytes: Optional[int] = None,
        max_sessions: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds or settings.UPLOAD_SESSION_TTL_SECONDS
        self.max_upload_bytes = max_upload_bytes or settings.MAX_UPLOAD_BYTES
        self.max_sessions = max_sessions or settings.MAX_UPLOAD_SESSIONS
        self._clock = clock
        # Ordered oldest access first.
        self._workflows: "OrderedDict[str, Tuple[UploadWorkflow, float]]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._workflows)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._workflows

    def get(
        self, session_id: str, transform_service: ImageTransformService
    ) -> UploadWorkflow:
        """Return the workflow for session_id, creating it on first use."""
        self.evict_expired()
        now = self._clock()
        entry = self._workflows.pop(session_id, None)
        if entry is None:
            while len(self._workflows) >= self.max_sessions:
                oldest, (stale, _) = self._workflows.popitem(last=False)
                logger.info(f"Upload session cap reached; evicting {oldest}")
                stale.close()
            logger.debug(f"Creating upload workflow for session {session_id}")
            workflow = UploadWorkflow(
                transform_service, max_upload_bytes=self.max_upload_bytes
            )
        else:
            workflow = entry[0]
            workflow.transform_service = transform_service
        self._workflows[session_id] = (workflow, now)
        return workflow

    def discard(self, session_id: str) -> None:
        entry = self._workflows.pop(session_id, None)
        if entry is not None:
            entry[0].close()

    def evict_expired(self) -> int:
        cutoff = self._clock() - self.ttl_seconds
        expired = []
        for session_id, (_, seen) in self._workflows.items():
            if seen >= cutoff:
                break
            expired.append(session_id)
        for session_id in expired:
            logger.info(f"Evicting idle upload session {session_id}")
            self.discard(session_id)
        return len(expired)


_registry: Optional[WorkflowRegistry] = None


def get_workflow_registry() -> WorkflowRegistry:
    global _registry
    if _registry is None:
        _registry = WorkflowRegistry()
    return _registry
