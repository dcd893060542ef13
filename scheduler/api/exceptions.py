import structlog
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from ..errors import ConcurrencyConflict, InvalidArgument, NotFound, ReviewError, Unauthorized

logger = structlog.get_logger()

STATUS_BY_ERROR = (
    (NotFound, status.HTTP_404_NOT_FOUND),
    (Unauthorized, status.HTTP_403_FORBIDDEN),
    (InvalidArgument, status.HTTP_400_BAD_REQUEST),
    (ConcurrencyConflict, status.HTTP_409_CONFLICT),
)


def review_exception_handler(exc, context):
    """Map review engine errors to HTTP responses; defer the rest to DRF."""
    if not isinstance(exc, ReviewError):
        return exception_handler(exc, context)

    status_code = next(
        (code for cls, code in STATUS_BY_ERROR if isinstance(exc, cls)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    request = context.get("request")
    logger.warning("review_error_response",
        error=exc.code,
        message=str(exc),
        status=status_code,
        path=request.path if request is not None else None,
    )
    return Response({"error": exc.code, "message": str(exc)}, status=status_code)
