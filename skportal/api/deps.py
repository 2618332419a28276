from functools import lru_cache
from typing import Generator, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from skportal.core.config import get_settings
from skportal.core.security import decode_token
from skportal.core.structure import StructureCatalog, load_catalog
from skportal.db.models import Profile
from skportal.db.session import SessionLocal
from skportal.services.storage import BlobStore, LocalBlobStore

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator:
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_profile(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Profile:
    """Get the current profile from the bearer JWT."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    profile_id = decode_token(credentials.credentials)
    if profile_id is None:
        raise credentials_exception

    profile = db.query(Profile).filter(Profile.id == profile_id).first()
    if profile is None:
        raise credentials_exception
    return profile


@lru_cache
def get_blob_store() -> BlobStore:
    """Blob store dependency; one local store per process."""
    return LocalBlobStore(get_settings().storage_dir)


@lru_cache
def get_catalog() -> StructureCatalog:
    """Structure catalog dependency, loaded once from settings."""
    settings = get_settings()
    return load_catalog(settings.structure_catalog_path, settings.branch_coordinator_slots)
