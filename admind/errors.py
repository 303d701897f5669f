class ServiceError(RuntimeError):
    """An error the API reports to the client as ``{"error": message}``."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class DashboardError(ServiceError):
    """A fail-closed dashboard view could not read its data."""

    def __init__(self, message: str = "Database error") -> None:
        super().__init__(message, status_code=500)


class MeetingCreationError(ServiceError):
    def __init__(self, message: str = "Failed to create meeting") -> None:
        super().__init__(message, status_code=500)
