class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )

class SlotConflictError(AppError):
    """Raised when a slot cannot be committed because a cell, faculty or room is taken."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)

class NoFacultyAvailableError(AppError):
    """Raised when faculty auto-resolution finds nobody to bind to a slot."""
    def __init__(self, message: str = "No faculty available to assign."):
        super().__init__(message, status_code=400)

class MalformedInputError(AppError):
    """Raised when a request is missing fields the store cannot do without."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class StoreUnavailableError(AppError):
    """Raised when the persistent store fails for reasons unrelated to the request."""
    def __init__(self, message: str = "Timetable store is temporarily unavailable."):
        super().__init__(message, status_code=503)
