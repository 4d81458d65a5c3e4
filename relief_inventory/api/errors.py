"""Maps coordination errors onto HTTP responses."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from shared.core import get_logger
from relief_inventory.domain.errors import CoordinationError, ErrorKind

logger = get_logger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 422,
    ErrorKind.INVALID_QUANTITY: 422,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_STATE_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
}


async def coordination_error_handler(request: Request, exc: CoordinationError) -> JSONResponse:
    status_code = STATUS_BY_KIND.get(exc.kind, status.HTTP_400_BAD_REQUEST)
    log = logger.warning if exc.kind in (ErrorKind.FORBIDDEN, ErrorKind.CONFLICT) else logger.info
    log(
        f"{exc.kind.value}: {exc.detail}",
        extra={'extra_fields': {
            'method': request.method,
            'path': request.url.path,
            'status_code': status_code,
        }}
    )
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CoordinationError, coordination_error_handler)
