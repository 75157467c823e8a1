"""
Custom exception classes for the AI Data Cleaner application.
These allow us to differentiate between user errors (4xx) and upstream failures (5xx).

Schema inference and EDA never raise these: degenerate data yields empty results.
"""

class AppException(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

class FileProcessingError(AppException):
    """Raised when file upload or parsing fails."""
    def __init__(self, message: str = "Failed to process the uploaded file."):
        super().__init__(message, status_code=400)

class RemoteSourceError(AppException):
    """Raised when a dataset URL cannot be fetched."""
    def __init__(self, message: str = "Failed to fetch the remote dataset."):
        super().__init__(message, status_code=502)

class CleaningServiceError(AppException):
    """Raised when the remote cleaning service fails or returns an unusable payload."""
    def __init__(self, message: str = "The cleaning service failed to clean the dataset."):
        super().__init__(message, status_code=502)

class InvalidConfigError(AppException):
    """Raised when a manual cleaning configuration does not match the dataset schema."""
    def __init__(self, message: str = "The cleaning configuration is invalid."):
        super().__init__(message, status_code=400)

class NoDatasetError(AppException):
    """Raised when an operation needs a loaded dataset and the session has none."""
    def __init__(self, message: str = "No dataset loaded. Please upload a file or URL first."):
        super().__init__(message, status_code=400)
