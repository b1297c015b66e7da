class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ValidationError(AppError):
    """Raised for malformed input: blank fields, non-positive capacity, inverted time range."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=422, details=details)

class PlanningError(AppError):
    """Raised when a set of locations can never hold the requested allocation."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class DuplicateLocationError(AppError):
    """Raised when one location is booked twice for the same exam slot."""
    def __init__(self, names: list[str], message: str = None):
        self.names = list(names)
        super().__init__(
            message or f"Location used more than once: {', '.join(self.names)}",
            status_code=409,
            details={"duplicates": self.names},
        )

class IncompletePlanError(AppError):
    """Raised when a plan cannot be committed as it stands."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)
