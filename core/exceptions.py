class MRPError(Exception):
    """Base exception for MRP portal errors."""

    status_code = 500

    def __init__(self, message=None, code=None, details=None):
        """Initialize the exception.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
        """
        self.message = message or "An error occurred in the MRP portal"
        self.code = code
        self.details = details
        super().__init__(self.message)

    def __str__(self):
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def to_dict(self):
        """Convert the exception to a response body."""
        error_dict = {'error': self.message}

        if self.code:
            error_dict['code'] = self.code

        if self.details:
            error_dict['details'] = self.details

        return error_dict


class InvalidInputError(MRPError):
    """Raised when a request is missing something it needs."""

    status_code = 400

    def __init__(self, message=None, code=None, details=None):
        message = message or "Invalid input"
        super().__init__(message, code, details)


class ValidationError(MRPError):
    """Raised when an attribute value fails its datatype or required rule."""

    status_code = 400

    def __init__(self, message=None, code=None, details=None):
        message = message or "Validation error"
        super().__init__(message, code, details)


class NotFoundError(MRPError):
    """Raised when a requested resource is not found."""

    status_code = 404

    def __init__(self, message=None, code=None, details=None):
        message = message or "Resource not found"
        super().__init__(message, code, details)
