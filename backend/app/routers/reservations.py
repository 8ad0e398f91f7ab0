import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from backend.app.core.errors import StorageError, ValidationError
from backend.app.routers.schemas import ErrorOut, ReservationIn, ReservationOut
from backend.app.services.reservations import ReservationService, get_reservation_service

INTERNAL_ERROR_MESSAGE = "Internal error. Please try again later."

logger = structlog.get_logger(__name__)

router = APIRouter()


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorOut(error=message).model_dump())


@router.post(
    "/reservations",
    response_model=ReservationOut,
    responses={400: {"model": ErrorOut}, 500: {"model": ErrorOut}},
)
async def create_reservation(
    payload: ReservationIn | None = None,
    service: ReservationService = Depends(get_reservation_service),
) -> ReservationOut | JSONResponse:
    data = payload.model_dump() if payload is not None else {}
    try:
        accepted = await service.submit(data)
    except ValidationError as exc:
        return error_response(status.HTTP_400_BAD_REQUEST, exc.reason)
    except StorageError:
        logger.exception("Reservation could not be stored")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)

    return ReservationOut(message=accepted.message, code=accepted.code)
