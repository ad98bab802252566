import inspect
from enum import Enum, IntEnum
from uuid import uuid4


class AppErrorCode(str, Enum):
    E_INTERNAL_ERROR = "E_INTERNAL_ERROR"
    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_INVALID_PARAMS = "E_INVALID_PARAMS"
    E_UNAUTHORIZED = "E_UNAUTHORIZED"
    E_FORBIDDEN = "E_FORBIDDEN"

    E_SESSION_NOT_FOUND = "E_SESSION_NOT_FOUND"
    E_SESSION_ALREADY_ENDED = "E_SESSION_ALREADY_ENDED"
    E_RECORDING_NOT_FOUND = "E_RECORDING_NOT_FOUND"
    E_CONTENT_NOT_FOUND = "E_CONTENT_NOT_FOUND"
    E_CONTENT_NOT_PUBLISHED = "E_CONTENT_NOT_PUBLISHED"
    E_CONTENT_NOT_BOOSTED = "E_CONTENT_NOT_BOOSTED"
    E_CONTENT_ALREADY_BOOSTED = "E_CONTENT_ALREADY_BOOSTED"

    E_VERSION_CONFLICT = "E_VERSION_CONFLICT"
    E_DUPLICATE_RECORD = "E_DUPLICATE_RECORD"
    E_INVALID_CURSOR = "E_INVALID_CURSOR"

    E_PROVIDER_UNAVAILABLE = "E_PROVIDER_UNAVAILABLE"
    E_PROVIDER_NOT_CONFIGURED = "E_PROVIDER_NOT_CONFIGURED"
    E_WEBHOOK_SIGNATURE_INVALID = "E_WEBHOOK_SIGNATURE_INVALID"

    def __str__(self) -> str:
        return self.value


class HttpStatusCode(IntEnum):
    OK = 200
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    CONFLICT = 409
    UNPROCESSABLE_ENTITY = 422
    INTERNAL_SERVER_ERROR = 500
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503


class AppError(Exception):
    """
    Application error carrying an error code, a user-facing message and the HTTP status.

    The caller location is captured at construction time so the registered
    exception handler can log where the error was raised, not where it was caught.
    """

    def __init__(
        self,
        errcode: AppErrorCode | str = AppErrorCode.E_INTERNAL_ERROR,
        errmesg: str = "We are sorry, an error occurred.",
        status_code: int = HttpStatusCode.BAD_REQUEST,
    ):
        self.errcode = errcode.value if isinstance(errcode, AppErrorCode) else str(errcode)
        self.errmesg = errmesg
        self.status_code = int(status_code)
        self.erresid = uuid4().hex[:10]
        self.caller_info = self._capture_caller()
        super().__init__(f"{self.errcode}: {errmesg}")

    @staticmethod
    def _capture_caller() -> str:
        # Skip this helper and __init__ (and subclass __init__ frames)
        for frame_info in inspect.stack()[2:]:
            if frame_info.function != "__init__":
                module = inspect.getmodule(frame_info.frame)
                module_name = module.__name__ if module else frame_info.filename
                return f"{module_name}:{frame_info.function}:{frame_info.lineno}"
        return "unknown"

    @property
    def retryable(self) -> bool:
        """Transient failures the caller may retry as-is."""
        return self.status_code in (HttpStatusCode.SERVICE_UNAVAILABLE, HttpStatusCode.BAD_GATEWAY)
