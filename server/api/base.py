from datetime import UTC, datetime

from fastapi import APIRouter

router = APIRouter(tags=["API"])


@router.get("/")
async def root() -> dict:
    return {"message": "Mathematico API v1", "version": "1.1.0"}


@router.get("/health")
async def health() -> dict:
    return {"status": "healthy", "timestamp": datetime.now(UTC).isoformat()}
