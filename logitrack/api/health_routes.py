"""
Name: Health Routes

Responsibilities:
  - Liveness/readiness probe reporting the credential store backend
"""

from fastapi import APIRouter, Depends, Request

from ..config import Settings, get_settings
from ..platform.logger import logger

router = APIRouter(tags=["Health"])


def _check_postgres() -> bool:
    from ..infrastructure.db.pool import get_pool

    with get_pool().connection() as conn:
        conn.execute("SELECT 1").fetchone()
    return True


@router.get("/healthz")
def healthz(request: Request, settings: Settings = Depends(get_settings)):
    """
    R: Health check for orchestration.

    Returns:
        ok: True if the credential store is reachable
        store: "postgres" or "memory"
        request_id: Correlation ID for this request
    """
    ok = True
    store = "memory"
    if settings.uses_postgres():
        store = "postgres"
        try:
            _check_postgres()
        except Exception as e:
            logger.warning("Health check: DB unavailable", extra={"error": str(e)})
            ok = False

    return {
        "ok": ok,
        "store": store,
        "request_id": getattr(request.state, "request_id", None),
    }
