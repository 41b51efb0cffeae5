from fastapi import APIRouter

from daytracker.config import settings

router = APIRouter()


@router.get("/health")
def health() -> dict:
    return {"ok": True, "mode": "remote" if settings.remote_enabled else "demo"}
