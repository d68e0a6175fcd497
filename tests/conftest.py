import asyncio
import json
from typing import Any, Dict, List, Optional

import pytest
from google.genai import types

from app.services.gemini_service import ImageTransformService
from app.services.redis_service import RedisClient

# Smallest useful stand-ins for image payloads; only the header bytes matter here.
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64


def image_part(data: bytes = PNG_BYTES, mime_type: str = "image/png") -> types.Part:
    return types.Part(inline_data=types.Blob(data=data, mime_type=mime_type))


def make_response(
    parts: Optional[List[types.Part]] = None,
    finish_reason: Optional[types.FinishReason] = types.FinishReason.STOP,
    block_reason: Optional[types.BlockedReason] = None,
) -> types.GenerateContentResponse:
    candidates = []
    if parts is not None:
        candidates.append(
            types.Candidate(
                content=types.Content(role="model", parts=parts),
                finish_reason=finish_reason,
            )
        )
    feedback = None
    if block_reason is not None:
        feedback = types.GenerateContentResponsePromptFeedback(block_reason=block_reason)
    return types.GenerateContentResponse(candidates=candidates, prompt_feedback=feedback)


class FakeTransformService(ImageTransformService):
    """Real adapter with only the network call replaced."""

    def __init__(self, api_key: str = "test-key", response=None, error: Optional[BaseException] = None):
        super().__init__(api_key=api_key, model="gemini-test")
        self.response = response if response is not None else make_response([image_part()])
        self.error = error
        self.calls: List[Dict[str, Any]] = []
        self.gate: Optional[asyncio.Event] = None

    async def _generate_content(self, contents):
        self.calls.append({"contents": contents})
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.response


class FakeRedis:
    """In-memory stand-in for redis.Redis covering the calls RedisClient makes."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.ttls: Dict[str, Optional[int]] = {}
        self.error: Optional[Exception] = None

    def _check(self):
        if self.error is not None:
            raise self.error

    def set(self, name, value, ex=None):
        self._check()
        self.data[name] = value
        self.ttls[name] = ex
        return True

    def get(self, name):
        self._check()
        return self.data.get(name)

    def delete(self, *names):
        self._check()
        removed = 0
        for name in names:
            if self.data.pop(name, None) is not None:
                removed += 1
            self.ttls.pop(name, None)
        return removed

    def record(self, name) -> Dict[str, Any]:
        return json.loads(self.data[name])

    def update_record(self, name, **fields):
        self.data[name] = json.dumps(dict(self.record(name), **fields))


@pytest.fixture
def transform_service():
    return FakeTransformService()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def redis_client(fake_redis):
    return RedisClient(client=fake_redis)
