from fastapi import APIRouter, Depends

from models.user import User
from routers.dependencies import get_file_service
from schemas.artifact import FileUploadURLRequest, UploadURLResponse
from services.auth import get_current_user
from services.file_service import FileService

router = APIRouter()


@router.post("/files/upload-url", response_model=UploadURLResponse)
def get_file_upload_url(
    payload: FileUploadURLRequest,
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    """Presign an upload under the caller's own uploads/ prefix."""
    return service.get_upload_url(user_id=current_user.id, filename=payload.filename)
