from .errors import ServiceError, register_exception_handlers
from .request_context import REQUEST_ID_HEADER, RequestIDMiddleware
from .schemas import ErrorResponse, HealthResponse

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "REQUEST_ID_HEADER",
    "RequestIDMiddleware",
    "ServiceError",
    "register_exception_handlers",
]
