from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from medistore.dependencies.admin import require_admin
from medistore.dependencies.clients import get_object_store
from medistore.exceptions import StorageError
from medistore.services.storage_client import UPLOAD_FOLDERS
from medistore.utils.token import CurrentUser

router = APIRouter()


@router.post("/{folder}")
def upload_image(
    folder: str,
    file: UploadFile = File(...),
    store=Depends(get_object_store),
    _: CurrentUser = Depends(require_admin),
):
    """Upload a product/article/doctor/webinar/partner image and return its public URL."""
    if folder not in UPLOAD_FOLDERS:
        raise HTTPException(400, f"Unknown upload folder: {folder}")

    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(400, "Only image uploads are allowed")

    try:
        key = store.upload_image(file, folder)
    except StorageError as e:
        raise HTTPException(500, e.message)

    return {"key": key, "url": store.public_url(key)}
