from pydantic import BaseModel
from typing import Optional


class UploadSessionResponse(BaseModel):
    status: str  # idle | selected | processing | succeeded | failed
    progress_percent: int
    preview_id: Optional[str] = None
    preview_url: Optional[str] = None
    filename: Optional[str] = None
    mime_type: Optional[str] = None
    size: Optional[int] = None
    has_result: bool = False
    result_url: Optional[str] = None
    error_kind: Optional[str] = None
    error_message: Optional[str] = None
