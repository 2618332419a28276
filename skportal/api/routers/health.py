"""Health check endpoints.

- /health: the app is running
- /health/ready: the database and blob store answer
"""

import logging
import os
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from skportal import __version__
from skportal.api.deps import get_blob_store, get_db
from skportal.services.storage import BUCKETS, BlobStore, LocalBlobStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


def check_database(db: Session) -> Dict[str, Any]:
    try:
        db.execute(text("SELECT 1")).fetchone()
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return {"status": "unhealthy", "error": str(e)}
    return {"status": "healthy"}


def check_storage(store: BlobStore) -> Dict[str, Any]:
    if not isinstance(store, LocalBlobStore):
        return {"status": "healthy"}
    root = store.root
    # Created on first upload, so a missing root is fine
    if root.exists() and not (root.is_dir() and os.access(root, os.W_OK)):
        return {"status": "unhealthy", "error": f"{root} is not a writable directory"}
    return {"status": "healthy", "buckets": sorted(b for b in BUCKETS if (root / b).is_dir())}


@router.get("/health")
async def health_check():
    """Returns 200 while the application is running."""
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.get("/health/ready")
async def readiness_check(
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
):
    """Returns 503 when a dependency is unavailable."""
    checks = {"database": check_database(db), "storage": check_storage(store)}
    healthy = all(c["status"] == "healthy" for c in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if healthy else "not_ready",
            "checks": checks,
            "timestamp": datetime.utcnow().isoformat(),
        },
    )
