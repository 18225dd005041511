from fastapi import APIRouter

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health():
    """Liveness check. No auth, no I/O."""
    return {"status": "ok"}
