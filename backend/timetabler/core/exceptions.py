class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, exit_code: int = 1, details: dict = None):
        self.message = message
        self.exit_code = exit_code
        self.details = details or {}
        super().__init__(self.message)

class ConfigurationError(AppError):
    """Raised when search tunables are invalid, before any search begins."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, exit_code=2, details=details)

class InputValidationError(AppError):
    """Raised when enrollment data is malformed."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, exit_code=65, details=details)

class SchedulerError(AppError):
    """Raised when the search encounters a logical error or invalid state."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, exit_code=70, details=details)

class InfeasibleConstructionError(SchedulerError):
    """Raised when a conflict-free initial genotype cannot be built within the retry budget."""

class RepairExhaustedError(SchedulerError):
    """Raised when a single-gene feasible reassignment runs out of retries."""
    def __init__(self, exam: int, retries: int):
        super().__init__(
            f"No feasible timeslot found for exam {exam} within {retries} retries",
            details={"exam": exam, "retries": retries},
        )
        self.exam = exam
        self.retries = retries
