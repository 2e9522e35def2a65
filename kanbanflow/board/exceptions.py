"""Board engine exception types."""


class BoardError(Exception):
    """Base class for every error raised by the board engine."""


class ValidationError(BoardError):
    """Raised when a payload fails a field-level rule."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"Invalid {field}: {message}")


class ConflictError(BoardError):
    """Raised when a mutation would break a uniqueness or label rule."""


class NotFoundError(BoardError, LookupError):
    """Raised when a referenced id does not resolve in the current snapshot."""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind.capitalize()} not found: {entity_id}")


class StorageError(BoardError):
    """Raised when the persisted state could not be written."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not save board state to {path}: {reason}")


class CorruptDataError(BoardError):
    """Raised when a persisted document fails schema validation on load."""

    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"Corrupt board data at {location}: {reason}")
