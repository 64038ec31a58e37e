"""Exception types raised by the review core."""

RECORD_REVIEW_FAILED = "Failed to record review, please retry"


class AlgoMasteryError(Exception):
    """Base class for application errors."""


class ReviewValidationError(AlgoMasteryError, ValueError):
    """A rating, id or stored review state is outside its valid domain."""


class ReviewNotFoundError(AlgoMasteryError, LookupError):
    """The problem is not enrolled in the review system."""

    def __init__(self, problem_id: str):
        super().__init__(f"Problem {problem_id!r} is not in the review system")
        self.problem_id = problem_id


class ReviewRecordError(AlgoMasteryError):
    """The store failed while recording a review; nothing was written."""

    def __init__(self, message: str = RECORD_REVIEW_FAILED):
        super().__init__(message)


class ImportValidationError(AlgoMasteryError, ValueError):
    """An import payload failed validation before any write happened."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Import failed")
