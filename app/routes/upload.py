import logging
from fastapi import (
    APIRouter,
    Depends,
    File,
    HTTPException,
    Query,
    Request,
    Response,
    UploadFile,
    status,
)
from fastapi.responses import JSONResponse

from app.exceptions import ValidationError
from app.schemas.upload import UploadSessionResponse
from app.services.gemini_service import ImageTransformService, get_transform_service
from app.services.upload_workflow import RESULT_MIME_TYPE, UploadWorkflow
from app.services.workflow_registry import WorkflowRegistry, get_workflow_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["upload"])


def get_workflow(
    request: Request,
    registry: WorkflowRegistry = Depends(get_workflow_registry),
    transform_service: ImageTransformService = Depends(get_transform_service),
) -> UploadWorkflow:
    """Resolve the workflow owned by the caller's upload-session cookie."""
    return registry.get(request.state.upload_session_id, transform_service)


def _session_response(workflow: UploadWorkflow) -> dict:
    data = workflow.snapshot()
    data["preview_url"] = (
        f"{router.prefix}/preview/{data['preview_id']}" if data["preview_id"] else None
    )
    data["result_url"] = f"{router.prefix}/result" if data["has_result"] else None
    return UploadSessionResponse(**data).model_dump()


@router.get("", response_model=UploadSessionResponse)
async def get_upload_session(workflow: UploadWorkflow = Depends(get_workflow)):
    return _session_response(workflow)


@router.post("", response_model=UploadSessionResponse)
async def select_file(
    file: UploadFile = File(...),
    workflow: UploadWorkflow = Depends(get_workflow),
):
    """
    Accept the user's image. Files over the size ceiling or of an unsupported
    type are rejected and leave the session Idle.
    """
    # Never buffer more than one byte past the ceiling.
    data = await file.read(workflow.max_upload_bytes + 1)
    logger.info(
        f"Received file: {file.filename}, content_type: {file.content_type}, size: {file.size}"
    )

    try:
        workflow.select(
            data,
            file.content_type,
            filename=file.filename,
            declared_size=file.size,
        )
    except ValidationError:
        return JSONResponse(
            status_code=422,
            content=_session_response(workflow),
        )
    return _session_response(workflow)


@router.post("/process", response_model=UploadSessionResponse)
async def process_image(
    response: Response,
    wait: bool = Query(False),
    workflow: UploadWorkflow = Depends(get_workflow),
):
    """
    Start the outpainting transform. Returns 202 while the transform runs
    unless ``wait`` is set, in which case the call resolves once the
    transform has finished.
    A request while a transform is already running changes nothing. A
    session that fails before any request is sent answers 200.
    """
    if wait:
        await workflow.process()
        return _session_response(workflow)

    task = workflow.start_processing()
    if task is not None or workflow.in_flight:
        response.status_code = status.HTTP_202_ACCEPTED
    return _session_response(workflow)


@router.get("/preview/{preview_id}")
async def get_preview(preview_id: str, workflow: UploadWorkflow = Depends(get_workflow)):
    session = workflow.session
    if session.source is None or session.preview_id != preview_id:
        raise HTTPException(status_code=404, detail="Preview not found")
    return Response(content=session.source.data, media_type=session.source.mime_type)


@router.get("/result")
async def download_result(workflow: UploadWorkflow = Depends(get_workflow)):
    filename, data = workflow.download()
    return Response(
        content=data,
        media_type=RESULT_MIME_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/reset", response_model=UploadSessionResponse)
async def reset_upload(workflow: UploadWorkflow = Depends(get_workflow)):
    workflow.reset()
    return _session_response(workflow)


@router.post("/dismiss-error", response_model=UploadSessionResponse)
async def dismiss_error(workflow: UploadWorkflow = Depends(get_workflow)):
    workflow.dismiss_error()
    return _session_response(workflow)
