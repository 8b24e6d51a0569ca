import enum


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    INVALID_CREDENTIALS = "invalid_credentials"
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    SERVICE_UNAVAILABLE = "service_unavailable"
    CONFIGURATION = "configuration"
    AI_FAILURE = "ai_failure"


class AppError(Exception):
    """Base class for errors the API boundary knows how to present."""

    kind: ErrorKind = ErrorKind.AI_FAILURE

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(AppError):
    kind = ErrorKind.VALIDATION


class ConflictError(AppError):
    kind = ErrorKind.CONFLICT


class AuthenticationError(AppError):
    kind = ErrorKind.AUTHENTICATION

    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(detail)


class InvalidCredentialsError(AuthenticationError):
    # Unknown email and wrong password share this exact message
    kind = ErrorKind.INVALID_CREDENTIALS

    def __init__(self):
        super().__init__("Invalid credentials")


class NotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")


class ServiceUnavailableError(AppError):
    kind = ErrorKind.SERVICE_UNAVAILABLE

    def __init__(self, detail: str = "AI service quota exceeded"):
        super().__init__(detail)


class ConfigurationError(AppError):
    kind = ErrorKind.CONFIGURATION

    def __init__(self, detail: str = "AI service configuration error"):
        super().__init__(detail)


class AIQueryError(AppError):
    kind = ErrorKind.AI_FAILURE

    def __init__(self, detail: str = "Failed to process query with the AI service"):
        super().__init__(detail)


STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.CONFLICT: 400,
    ErrorKind.INVALID_CREDENTIALS: 400,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.SERVICE_UNAVAILABLE: 503,
    ErrorKind.CONFIGURATION: 503,
    ErrorKind.AI_FAILURE: 500,
}

AI_UNAVAILABLE_MESSAGE = "AI service temporarily unavailable"
INTERNAL_ERROR_MESSAGE = "Internal server error"

# Kinds whose internal detail is replaced before it reaches the caller
PUBLIC_DETAILS = {
    ErrorKind.SERVICE_UNAVAILABLE: AI_UNAVAILABLE_MESSAGE,
    ErrorKind.CONFIGURATION: AI_UNAVAILABLE_MESSAGE,
    ErrorKind.AI_FAILURE: INTERNAL_ERROR_MESSAGE,
}


def status_code_for(error: AppError) -> int:
    return STATUS_CODES.get(error.kind, 500)


def public_detail(error: AppError) -> str:
    return PUBLIC_DETAILS.get(error.kind, error.detail)
