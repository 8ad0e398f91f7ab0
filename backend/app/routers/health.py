from fastapi import APIRouter, Depends, HTTPException

from backend.app.core.errors import StorageError
from backend.app.db.store import ReservationStore, get_store


router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, bool]:
    """Basic liveness check."""
    return {"ok": True}


@router.get("/readiness")
async def readiness(store: ReservationStore = Depends(get_store)) -> dict[str, bool]:
    """Ensure the reservation file can be read."""
    try:
        await store.list_all()
    except StorageError as exc:
        raise HTTPException(status_code=503, detail="Reservation store unavailable") from exc

    return {"ready": True}
