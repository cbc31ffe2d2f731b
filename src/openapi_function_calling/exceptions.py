from typing import Optional


class FunctionCallingError(Exception):
    """Base exception for OpenAPI function calling errors."""
    pass


class MalformedInputError(FunctionCallingError):
    """Raised when an API description is structurally invalid or cannot be loaded."""
    pass


class ConfigurationError(FunctionCallingError):
    """Raised when a component is constructed with unusable settings."""
    pass


class InvalidCredentialError(ConfigurationError):
    """Raised when the model provider credential is missing or a placeholder."""
    pass


class DuplicateOperationError(ConfigurationError):
    """Raised when two operations share the same operationId."""
    pass


class UpstreamError(FunctionCallingError):
    """Raised when the model provider cannot be reached or answers with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MalformedResponseError(FunctionCallingError):
    """Raised when the model provider response lacks the expected structure."""

    def __init__(self, message: str, body: str = ""):
        super().__init__(message)
        self.body = body


class MissingArgumentError(FunctionCallingError):
    """Raised when a function call omits an argument its operation requires."""

    def __init__(self, operation: str, argument: str):
        super().__init__(f"Missing required argument '{argument}' for operation {operation}")
        self.operation = operation
        self.argument = argument


class DispatchError(FunctionCallingError):
    """Raised when a function call cannot be executed against the target API."""

    def __init__(
        self, message: str, operation: str, status_code: Optional[int] = None, body: str = ""
    ):
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code
        self.body = body
