"""API error definitions.

All API errors are defined here with their corresponding HTTP status codes.
"""

from enum import Enum


class ApiErrorCode(str, Enum):
    """Standardized error codes for the API.

    Format: E_CATEGORY_NAME
    """

    # Authentication errors (401)
    E_UNAUTHENTICATED = "E_UNAUTHENTICATED"
    E_INVALID_CREDENTIALS = "E_INVALID_CREDENTIALS"

    # Not found errors (404)
    E_NOT_FOUND = "E_NOT_FOUND"
    E_BUBBLE_NOT_FOUND = "E_BUBBLE_NOT_FOUND"
    E_MEDIA_NOT_FOUND = "E_MEDIA_NOT_FOUND"
    E_MEDIA_FILE_MISSING = "E_MEDIA_FILE_MISSING"
    E_SPEAKER_NOT_FOUND = "E_SPEAKER_NOT_FOUND"

    # Validation errors (400)
    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_TITLE_REQUIRED = "E_TITLE_REQUIRED"
    E_BUBBLE_SELF_PARENT = "E_BUBBLE_SELF_PARENT"
    E_BUBBLE_CYCLE = "E_BUBBLE_CYCLE"
    E_INVALID_KIND = "E_INVALID_KIND"
    E_INVALID_CONTENT_TYPE = "E_INVALID_CONTENT_TYPE"
    E_FILE_TOO_LARGE = "E_FILE_TOO_LARGE"
    E_FILE_REQUIRED = "E_FILE_REQUIRED"
    E_INVALID_FILE = "E_INVALID_FILE"
    E_INVALID_URL = "E_INVALID_URL"
    E_INVALID_TIME = "E_INVALID_TIME"
    E_INVALID_TIME_WINDOW = "E_INVALID_TIME_WINDOW"

    # Conflict errors (409)
    E_SCHEDULE_CONFLICT = "E_SCHEDULE_CONFLICT"

    # Server errors
    E_INTERNAL = "E_INTERNAL"  # 500
    E_UPLOAD_FAILED = "E_UPLOAD_FAILED"  # 500
    E_STORAGE_ERROR = "E_STORAGE_ERROR"  # 500
    E_DOWNLOAD_FAILED = "E_DOWNLOAD_FAILED"  # 502


# Error code to HTTP status mapping
ERROR_CODE_TO_STATUS: dict[ApiErrorCode, int] = {
    ApiErrorCode.E_UNAUTHENTICATED: 401,
    ApiErrorCode.E_INVALID_CREDENTIALS: 401,
    ApiErrorCode.E_NOT_FOUND: 404,
    ApiErrorCode.E_BUBBLE_NOT_FOUND: 404,
    ApiErrorCode.E_MEDIA_NOT_FOUND: 404,
    ApiErrorCode.E_MEDIA_FILE_MISSING: 404,
    ApiErrorCode.E_SPEAKER_NOT_FOUND: 404,
    ApiErrorCode.E_INVALID_REQUEST: 400,
    ApiErrorCode.E_TITLE_REQUIRED: 400,
    ApiErrorCode.E_BUBBLE_SELF_PARENT: 400,
    ApiErrorCode.E_BUBBLE_CYCLE: 400,
    ApiErrorCode.E_INVALID_KIND: 400,
    ApiErrorCode.E_INVALID_CONTENT_TYPE: 400,
    ApiErrorCode.E_FILE_TOO_LARGE: 400,
    ApiErrorCode.E_FILE_REQUIRED: 400,
    ApiErrorCode.E_INVALID_FILE: 400,
    ApiErrorCode.E_INVALID_URL: 400,
    ApiErrorCode.E_INVALID_TIME: 400,
    ApiErrorCode.E_INVALID_TIME_WINDOW: 400,
    ApiErrorCode.E_SCHEDULE_CONFLICT: 409,
    ApiErrorCode.E_INTERNAL: 500,
    ApiErrorCode.E_UPLOAD_FAILED: 500,
    ApiErrorCode.E_STORAGE_ERROR: 500,
    ApiErrorCode.E_DOWNLOAD_FAILED: 502,
}


class ApiError(Exception):
    """Base exception for API errors.

    Attributes:
        code: The error code enum value
        message: Human-readable error message
        status_code: HTTP status code (derived from code)
    """

    def __init__(self, code: ApiErrorCode, message: str):
        self.code = code
        self.message = message
        self.status_code = ERROR_CODE_TO_STATUS.get(code, 500)
        super().__init__(message)


class NotFoundError(ApiError):
    """Resource not found error."""

    def __init__(self, code: ApiErrorCode = ApiErrorCode.E_NOT_FOUND, message: str = "Not found"):
        super().__init__(code, message)


class InvalidRequestError(ApiError):
    """Invalid request error."""

    def __init__(
        self, code: ApiErrorCode = ApiErrorCode.E_INVALID_REQUEST, message: str = "Invalid request"
    ):
        super().__init__(code, message)


class ConflictError(ApiError):
    """Write rejected because it collides with existing state."""

    def __init__(
        self, code: ApiErrorCode = ApiErrorCode.E_SCHEDULE_CONFLICT, message: str = "Conflict"
    ):
        super().__init__(code, message)


class UploadError(ApiError):
    """Asset host rejected or failed an upload."""

    def __init__(self, message: str = "Failed to upload asset"):
        super().__init__(ApiErrorCode.E_UPLOAD_FAILED, message)
