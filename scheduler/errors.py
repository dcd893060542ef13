class ReviewError(Exception):
    code = "review_error"
    default_message = "Review failed"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class NotFound(ReviewError):
    code = "not_found"
    default_message = "Not found"


class Unauthorized(ReviewError):
    code = "unauthorized"
    default_message = "You do not have access to this card"


class InvalidArgument(ReviewError, ValueError):
    code = "invalid_argument"
    default_message = "Invalid argument"


class ConcurrencyConflict(ReviewError):
    """The card was reviewed concurrently and the retry budget ran out."""

    code = "concurrency_conflict"
    default_message = "Card was modified by a concurrent review, please retry"
