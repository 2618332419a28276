"""Signed file download endpoint."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import FileResponse

from skportal.api.deps import get_blob_store
from skportal.services.storage import BlobStore, verify_signed_token

router = APIRouter(prefix="/files", tags=["files"])


@router.get("/{bucket}/{key:path}")
async def download_file(
    bucket: str,
    key: str,
    token: str = Query(...),
    store: BlobStore = Depends(get_blob_store),
):
    """
    Serve a stored file to the holder of a signed URL.

    The token is the credential; no bearer token is needed.
    """
    if not verify_signed_token(token, bucket, key):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired download link",
        )

    path = store.path_for(bucket, key)
    return FileResponse(path, filename=path.name)
