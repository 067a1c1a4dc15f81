from __future__ import annotations

from fastapi import APIRouter, Depends

from rhdocs.core.config import settings
from rhdocs.core.dependencies import get_backend
from rhdocs.services.backend_client import BackendClient

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check(backend: BackendClient = Depends(get_backend)):  # noqa: B008
    services: dict[str, str] = {}

    try:
        ok = await backend.check_connection()
        services["backend"] = "ok" if ok else "error"
    except Exception:
        services["backend"] = "error"

    all_ok = all(v == "ok" for v in services.values())

    return {
        "status": "healthy" if all_ok else "degraded",
        "version": settings.APP_VERSION,
        "services": services,
    }


@router.get("/ready")
async def readiness_probe():
    return {"ready": True}
