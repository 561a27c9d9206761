"""
Error types shared by the service router.

HTTP errors carry the status code a caller should surface. Configuration
errors are raised at startup when the service catalog cannot be used.
"""


class HttpError(Exception):
    """Base class for errors that map onto an HTTP status code"""

    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class ServiceError(HttpError):
    """Error returned by a backend service"""


class NotFoundError(HttpError):
    def __init__(self, message: str = "The requested resource could not be found"):
        super().__init__(404, message)


class RequestValidationError(HttpError):
    def __init__(self, message: str = "Invalid request"):
        super().__init__(400, message)


class ConfigurationError(Exception):
    """The service catalog is missing, empty, or malformed"""
