"""Typed outcomes the components raise and the HTTP layer turns into responses."""


class TasklaneError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self):
        return {"error": self.message}


class Unauthenticated(TasklaneError):
    """Missing, invalid or expired credential."""
    status_code = 401
    message = "Unauthorized"


class NotFound(TasklaneError):
    """Resource absent or owned by someone else. The two are never told apart."""
    status_code = 404
    message = "Not found"


class ValidationError(TasklaneError):
    """Malformed input. ``details`` maps each offending field to a reason."""
    status_code = 400
    message = "Validation failed"

    def __init__(self, details, message=None):
        super().__init__(message)
        self.details = dict(details)

    def to_dict(self):
        return {"error": self.message, "details": self.details}


class SuggestionsNotConfigured(TasklaneError):
    status_code = 503
    message = "Task suggestions are not configured"


class SuggestionUnavailable(TasklaneError):
    """Every suggestion model failed. ``attempts`` is kept for the logs only."""
    status_code = 502
    message = "Task suggestions are temporarily unavailable"

    def __init__(self, attempts):
        super().__init__()
        self.attempts = attempts
