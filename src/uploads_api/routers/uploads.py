import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile, status

from uploads_api.errors import error_response
from uploads_api.models import IncomingFile
from uploads_api.schemas import ErrorResponse, FileInfo, ListFilesResponse, UploadResponse
from uploads_api.services.pipeline import (
    ListingOrchestrator,
    UploadOrchestrator,
    UploadOutcome,
    UploadState,
)
from uploads_api.validation import MAX_FILE_SIZE, REJECT_MESSAGES

logger = logging.getLogger(__name__)

router = APIRouter()

UPLOAD_SUCCESS_MESSAGE = "File uploaded successfully!"
FALLBACK_SUCCESS_MESSAGE = "File uploaded successfully (local storage fallback)"
MISSING_FILE_MESSAGE = "No file uploaded"
STORAGE_FAILED_MESSAGE = "Failed to save file"
LIST_FAILED_MESSAGE = "Failed to list uploaded files"

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


def get_upload_orchestrator(request: Request) -> UploadOrchestrator:
    return request.app.state.upload_orchestrator


def get_listing_orchestrator(request: Request) -> ListingOrchestrator:
    return request.app.state.listing_orchestrator


async def read_incoming_file(image: Optional[UploadFile]) -> Optional[IncomingFile]:
    """
    Turn the parsed multipart field into an IncomingFile.

    At most one byte more than the size limit is read, which is enough for the
    validator to reject oversized uploads without buffering them.
    """
    if image is None:
        return None
    try:
        content = await image.read(MAX_FILE_SIZE + 1)
    finally:
        await image.close()
    size = image.size if image.size is not None else len(content)
    return IncomingFile(
        original_name=image.filename or "",
        content_type=image.content_type,
        size_bytes=size,
        content=content,
    )


def outcome_to_response(outcome: UploadOutcome):
    if outcome.state is UploadState.SUCCESS:
        message = FALLBACK_SUCCESS_MESSAGE if outcome.fallback else UPLOAD_SUCCESS_MESSAGE
        return UploadResponse(message=message, file=FileInfo.from_record(outcome.record))
    if outcome.state is UploadState.MISSING_FILE:
        return error_response(MISSING_FILE_MESSAGE, status.HTTP_400_BAD_REQUEST)
    if outcome.state is UploadState.INVALID_FILE:
        return error_response(REJECT_MESSAGES[outcome.reason], status.HTTP_400_BAD_REQUEST)
    return error_response(STORAGE_FAILED_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.post("/upload", response_model=UploadResponse, responses=ERROR_RESPONSES)
async def upload_image(
    image: Optional[UploadFile] = File(None, description="A JPEG, PNG or GIF image of at most 5 MB"),
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
):
    """
    Upload a single image.

    The image goes to Cloudinary when it is configured, otherwise (or when the
    Cloudinary upload fails) to the local uploads directory.
    """
    incoming = await read_incoming_file(image)
    outcome = await orchestrator.handle_upload(incoming)
    return outcome_to_response(outcome)


@router.get("/upload", response_model=ListFilesResponse, responses=ERROR_RESPONSES)
async def list_images(
    orchestrator: ListingOrchestrator = Depends(get_listing_orchestrator),
):
    """List previously uploaded images from the active storage backend."""
    outcome = await orchestrator.handle_list()
    if not outcome.ok:
        return error_response(LIST_FAILED_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return ListFilesResponse(files=[FileInfo.from_record(r) for r in outcome.files])
